"""
Item variants shown in the resource selection list.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from .resource import Resource


@dataclass(eq=False)
class ItemButton:
    """A button rendered next to a list item."""

    icon: Any
    tooltip: str


@dataclass(eq=False)
class SelectResourceItem:
    """A real resource the user can select."""

    label: str
    description: str
    url: str
    resource: Resource
    buttons: List[ItemButton] = field(default_factory=list)
    always_show: bool = False
    variant: str = field(default="resource:select", init=False)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.variant, self.url)


@dataclass(eq=False)
class SeparatorItem:
    """Divider between recent items and the remainder."""

    label: str = ""
    icon: Any = None
    description: str = ""
    always_show: bool = False
    variant: str = field(default="separator", init=False)

    @property
    def key(self) -> Tuple[str]:
        return (self.variant,)


@dataclass(eq=False)
class SwitchProfileItem:
    """Synthesised while the filter text names a known profile, e.g. ``@prod``."""

    label: str
    profile: str
    description: str = ""
    always_show: bool = True
    variant: str = field(default="profile:switch", init=False)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.variant, self.profile)


@dataclass(eq=False)
class CreateResourceItem:
    """Trailing entry that hands off to the creation flow."""

    label: str
    description: str = ""
    always_show: bool = True
    variant: str = field(default="resource:create", init=False)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.variant, self.label)


PickItem = Union[SelectResourceItem, SeparatorItem, SwitchProfileItem, CreateResourceItem]


@dataclass
class HandoffResult:
    """Result of a selection handler or creation handoff."""

    finished: bool


def item_signature(items: List[PickItem]) -> Tuple[Tuple[str, ...], ...]:
    """Identity sequence of a rendered list.

    Resource entries contribute only their url, so a changed name or
    description never counts as a difference.
    """
    return tuple(item.key for item in items)


def resource_urls(items: List[PickItem]) -> List[str]:
    """Urls of the resource entries in display order."""
    return [item.url for item in items if isinstance(item, SelectResourceItem)]


def find_resource_item(items: List[PickItem], url: Optional[str]) -> Optional[SelectResourceItem]:
    """Return the resource entry with the given url, if any."""
    for item in items:
        if isinstance(item, SelectResourceItem) and item.url == url:
            return item
    return None
