"""
Most-recently-used ledger of selected resource urls, partitioned by kind.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from resource_picker.models.resource import KindKey, kind_key
from resource_picker.services.base import BaseKeyValueStorage


MRU_CAPACITY = 10


@dataclass
class _RecentIndex:
    """Lookup structures derived from one kind's stored order."""

    dirty: bool = True
    members: Set[str] = field(default_factory=set)
    ranks: Dict[str, int] = field(default_factory=dict)


class MRULedger:
    """Tracks recently selected urls per resource kind.

    The stored order lives in the injected key-value storage under
    ``mru:<kind>``, most recent first, at most ``MRU_CAPACITY`` entries.
    Membership and rank lookups use indexes rebuilt lazily after each
    mutation.
    """

    def __init__(self, storage: BaseKeyValueStorage, capacity: int = MRU_CAPACITY):
        self.storage = storage
        self.capacity = capacity
        self.logger = logging.getLogger(__name__)
        self._indexes: Dict[str, _RecentIndex] = {}

    @staticmethod
    def storage_key(kind: KindKey) -> str:
        return f"mru:{kind_key(kind)}"

    def get_recently_selected(self, kind: KindKey) -> List[str]:
        """
        Get the stored urls for a kind, most recent first.

        Values that are not strings are skipped, so a damaged state file
        never breaks the picker.
        """
        stored = self.storage.get(self.storage_key(kind), [])
        if not isinstance(stored, list):
            self.logger.warning(f"Ignoring malformed recent list for {kind_key(kind)}")
            return []
        return [text for text in stored if isinstance(text, str)]

    async def notify_selected(self, kind: KindKey, url: str) -> None:
        """Move url to the front of the kind's recent list."""
        def move_to_front(recent: List[str]) -> List[str]:
            if url in recent:
                recent.remove(url)
            return [url] + recent

        await self._replace(kind, move_to_front)

    async def clear_recent(self, kind: KindKey, url: str) -> None:
        """Remove url from the kind's recent list, if present."""
        def remove(recent: List[str]) -> Optional[List[str]]:
            if url not in recent:
                return None
            return [text for text in recent if text != url]

        await self._replace(kind, remove)

    def is_recent(self, kind: KindKey, url: str) -> bool:
        return url in self._index(kind).members

    def index_of(self, kind: KindKey, url: str) -> int:
        """Rank of url in the recent order, or -1 if it is not recent."""
        return self._index(kind).ranks.get(url, -1)

    def _index(self, kind: KindKey) -> _RecentIndex:
        key = kind_key(kind)
        index = self._indexes.setdefault(key, _RecentIndex())
        if index.dirty:
            recent = self.get_recently_selected(kind)
            index.members = set(recent)
            index.ranks = {}
            for rank, text in enumerate(recent):
                index.ranks.setdefault(text, rank)
            index.dirty = False
        return index

    async def _replace(self, kind: KindKey, generator: Callable[[List[str]], Optional[List[str]]]) -> None:
        next_recent = generator(self.get_recently_selected(kind))
        if next_recent is None:
            return

        await self.storage.update(self.storage_key(kind), next_recent[:self.capacity])
        self._indexes.setdefault(kind_key(kind), _RecentIndex()).dirty = True
