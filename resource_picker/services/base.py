"""
Base interfaces and abstract classes for the picker's collaborators.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

from resource_picker.models.events import PickerEvent
from resource_picker.models.items import PickItem, SeparatorItem


T = TypeVar("T")


class EventSubscription:
    """A queue of events delivered from one selection list to one consumer.

    Disposing detaches the subscription; events posted afterwards are
    dropped.
    """

    def __init__(self, detach: Callable[["EventSubscription"], None]):
        self._queue: "asyncio.Queue[PickerEvent]" = asyncio.Queue()
        self._detach = detach
        self.disposed = False

    def post(self, event: PickerEvent) -> None:
        if not self.disposed:
            self._queue.put_nowait(event)

    async def next_event(self) -> PickerEvent:
        return await self._queue.get()

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self._detach(self)


class BaseSelectionList(ABC):
    """Abstract base class for an incrementally updated selection list."""

    def __init__(self):
        self._items: List[PickItem] = []
        self.active_items: List[PickItem] = []
        self.selected_items: List[PickItem] = []
        self.value: str = ""
        self.placeholder: str = ""
        self.busy: bool = False
        self.keep_scroll_position: bool = False
        self.ignore_focus_out: bool = False
        self.match_on_description: bool = False
        self._subscriptions: List[EventSubscription] = []

    @property
    def items(self) -> List[PickItem]:
        return self._items

    @items.setter
    def items(self, items: Sequence[PickItem]) -> None:
        self._items = list(items)
        self.active_items = []
        self.on_items_changed()

    def on_items_changed(self) -> None:
        """Hook called after the item list was replaced."""
        pass

    def subscribe(self) -> EventSubscription:
        """Open an event channel for this list."""
        subscription = EventSubscription(self._subscriptions.remove)
        self._subscriptions.append(subscription)
        return subscription

    def post(self, event: PickerEvent) -> None:
        """Deliver an event to every live subscription."""
        for subscription in list(self._subscriptions):
            subscription.post(event)

    @abstractmethod
    def show(self) -> None:
        """Make the list visible."""
        pass

    @abstractmethod
    def hide(self) -> None:
        """Hide the list. Implementations post ``ListHidden``."""
        pass


class BasePickUI(ABC):
    """Abstract base class for the UI primitives the picker consumes."""

    clear_icon: Any = "clear"
    separator: SeparatorItem = SeparatorItem()

    @abstractmethod
    def create_selection_list(self) -> BaseSelectionList:
        """Create a new, hidden selection list."""
        pass

    @abstractmethod
    async def show_error(self, message: str) -> None:
        """Show an error message to the user."""
        pass

    @abstractmethod
    async def open_url(self, url: str) -> bool:
        """Open a url in an external browser."""
        pass

    @abstractmethod
    async def input(self, title: str, placeholder: str = "", initial_value: str = "",
                    validate: Optional[Callable[[str], Optional[str]]] = None) -> Optional[str]:
        """Prompt for a line of text; None when cancelled."""
        pass

    @abstractmethod
    async def pick_string(self, options: Sequence[str], placeholder: str,
                          title: str = "") -> Optional[str]:
        """Choose one of a fixed set of strings; None when cancelled."""
        pass

    async def run(self, work: Callable[[], Awaitable[T]]) -> T:
        """Run the picking work while this UI is active."""
        return await work()

    def write(self, text: str) -> None:
        """Emit a value the user asked to see on standard output."""
        print(text)


class BaseKeyValueStorage(ABC):
    """Abstract base class for persisted key-value state."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Read a value, or the default if absent."""
        pass

    @abstractmethod
    async def update(self, key: str, value: Any) -> None:
        """Write a value."""
        pass


class BaseSettings(ABC):
    """Abstract base class for the active profile and region."""

    @property
    @abstractmethod
    def profile(self) -> Optional[str]:
        pass

    @abstractmethod
    async def set_profile(self, profile: str) -> None:
        pass

    @property
    @abstractmethod
    def region(self) -> Optional[str]:
        pass

    @abstractmethod
    async def set_region(self, region: str) -> None:
        pass

    @property
    @abstractmethod
    def config_filepath(self) -> str:
        pass

    @abstractmethod
    def is_profile_name(self, name: str) -> bool:
        """True if name is a known credential profile."""
        pass

    @abstractmethod
    def enumerate_profile_names(self) -> Optional[List[str]]:
        """Profile names from the config file, or None if it is missing."""
        pass
