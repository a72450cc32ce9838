"""
Events delivered from a selection list to the picker engine.
"""

from dataclasses import dataclass
from typing import Optional, Union

from .items import ItemButton, PickItem


@dataclass
class ValueChanged:
    """The filter text changed."""

    value: str


@dataclass
class ItemAccepted:
    """The user accepted an item (or nothing, if the list was empty)."""

    item: Optional[PickItem] = None


@dataclass
class ItemButtonTriggered:
    """A button on an item was pressed."""

    item: PickItem
    button: ItemButton


@dataclass
class ListHidden:
    """The list was dismissed without an accepted item."""

    pass


@dataclass
class LoadFailed:
    """The initial resource load raised."""

    error: Exception


@dataclass
class RenderFailed:
    """Showing the loaded resources in the list raised."""

    error: Exception


PickerEvent = Union[ValueChanged, ItemAccepted, ItemButtonTriggered, ListHidden, LoadFailed, RenderFailed]
