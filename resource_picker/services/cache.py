"""
Process-local cache of the last fetched resource list per profile and region.
"""

from typing import Dict, Iterable, Optional, Tuple

from resource_picker.models.resource import Resource, ResourceList


class ResourceCache:
    """Stores resource lists keyed by ``(profile, region)``.

    Stored lists are tagged ``from_cache=True`` so later readers know to
    revalidate. Entries never expire; the cache lives as long as the
    process.
    """

    def __init__(self):
        self._entries: Dict[Tuple[str, str], ResourceList] = {}

    @staticmethod
    def make_cache_key(region: str, profile: Optional[str]) -> Tuple[str, str]:
        return (profile or "", region)

    def set(self, region: str, profile: Optional[str], resources: Iterable[Resource]) -> None:
        self._entries[self.make_cache_key(region, profile)] = ResourceList(resources, from_cache=True)

    def get(self, region: str, profile: Optional[str]) -> Optional[ResourceList]:
        return self._entries.get(self.make_cache_key(region, profile))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
