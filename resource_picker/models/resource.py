"""
Data models for selectable cloud resources.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union


class ResourceKind(Enum):
    """Kinds of resources the picker can browse."""
    AUTO_SCALING_GROUP = "auto-scaling-group"
    BUCKET = "bucket"
    CLUSTER = "cluster"
    DATABASE = "database"
    DISTRIBUTION = "distribution"
    FUNCTION = "function"
    HOSTED_ZONE = "hosted-zone"
    INSTANCE = "instance"
    LOG_GROUP = "log-group"
    PARAMETER = "parameter"
    REGION = "region"
    SECRET = "secret"
    STACK = "stack"
    TABLE = "table"

    @property
    def label(self) -> str:
        """Human-readable singular label, e.g. 'log group'."""
        return self.value.replace("-", " ")


KindKey = Union[ResourceKind, str]


def kind_key(kind: KindKey) -> str:
    """Return the storage partition key for a resource kind."""
    return kind.value if isinstance(kind, ResourceKind) else str(kind)


@dataclass(frozen=True)
class Resource:
    """One selectable cloud object.

    ``url`` is both the navigation target and the identity key: two
    resources with the same url are the same entity even if their name or
    description differ between fetches.
    """

    name: str
    description: str
    url: str
    arn: Optional[str] = None


class ResourceList(list):
    """A list of resources tagged with whether it was served from cache."""

    def __init__(self, resources: Iterable[Resource] = (), from_cache: bool = False):
        super().__init__(resources)
        self.from_cache = from_cache


def is_from_cache(resources: Iterable[Resource]) -> bool:
    """True when a loader result was served from the resource cache."""
    return bool(getattr(resources, "from_cache", False))


def sort_by_name(resources: Iterable[Resource]) -> list:
    """Sort resources alphabetically by name, ignoring case."""
    return sorted(resources, key=lambda resource: resource.name.casefold())
