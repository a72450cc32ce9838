"""
Selection list rendered as a textual screen: a filter input above the items.

Keys:

    <text>        filter (``@<profile>`` offers a profile switch)
    up / down     move the highlight
    enter         accept the highlighted item
    ctrl+d        remove the highlighted item from the recent list
    escape        close the list
"""

from typing import TYPE_CHECKING, ClassVar, List, Optional

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Footer, Input, Label, ListItem, ListView, Static

from resource_picker.models.events import ItemAccepted, ItemButtonTriggered, ListHidden, ValueChanged
from resource_picker.models.items import ItemButton, PickItem, SeparatorItem
from resource_picker.services.base import BaseSelectionList

if TYPE_CHECKING:
    from resource_picker.ui.tui import TextualPickUI


def item_text(item: PickItem, clear_icon: str) -> Text:
    """Render one item as a single line of rich text."""
    if isinstance(item, SeparatorItem):
        return Text(f"── {item.label}", style="dim")

    text = Text(item.label)
    if item.description:
        text.append(f"  {item.description}", style="dim")
    if getattr(item, "buttons", None):
        text.append(f"  [{clear_icon}]", style="dim italic")
    return text


class PickListItem(ListItem):
    """A list row that remembers the item it shows."""

    def __init__(self, pick_item: PickItem, clear_icon: str):
        super().__init__(
            Label(item_text(pick_item, clear_icon)),
            disabled=isinstance(pick_item, SeparatorItem),
        )
        self.pick_item = pick_item


class SelectionScreen(Screen[None]):
    """Full screen view of one ``TextualSelectionList``."""

    DEFAULT_CSS = """
    SelectionScreen > #selection_status {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    SelectionScreen > #selection_items {
        height: 1fr;
    }
    """

    BINDINGS: ClassVar[List[Binding]] = [
        Binding("escape", "hide_list", "Close"),
        Binding("up", "cursor_up", "Up", show=False, priority=True),
        Binding("down", "cursor_down", "Down", show=False, priority=True),
        Binding("ctrl+d", "trigger_button", "Forget recent", priority=True),
    ]

    def __init__(self, selection_list: "TextualSelectionList"):
        super().__init__()
        self.selection_list = selection_list
        self.shown_items: List[PickItem] = []

    def compose(self) -> ComposeResult:
        yield Static(Text(self.selection_list.placeholder), id="selection_status")
        yield Input(
            value=self.selection_list.value,
            placeholder="Filter, or @profile to switch profile",
            id="selection_filter",
        )
        yield ListView(id="selection_items")
        yield Footer()

    def on_mount(self) -> None:
        self.show_busy(self.selection_list.busy)
        self.query_one(Input).focus()
        self.rebuild()

    def show_status(self, placeholder: str) -> None:
        self.query_one("#selection_status", Static).update(Text(placeholder))

    def show_busy(self, busy: bool) -> None:
        self.query_one(ListView).loading = busy

    def rebuild(self) -> None:
        """Re-render the visible items. A newer rebuild replaces a pending one."""
        self.run_worker(self._rebuild(), group="rebuild", exclusive=True)

    async def _rebuild(self) -> None:
        list_view = self.query_one(ListView)
        scroll_y = list_view.scroll_y
        clear_icon = self.selection_list.ui.clear_icon

        self.shown_items = self.selection_list.visible_items()
        await list_view.clear()
        await list_view.extend(PickListItem(item, clear_icon) for item in self.shown_items)

        self.highlight_active()
        if self.selection_list.keep_scroll_position:
            list_view.scroll_to(y=scroll_y, animate=False)

    def highlight_active(self) -> None:
        """Highlight the first active item, else the first selectable one."""
        active = self.selection_list.active_items
        index = next((i for i, item in enumerate(self.shown_items) if item in active), None)
        if index is None:
            index = next(
                (i for i, item in enumerate(self.shown_items) if not isinstance(item, SeparatorItem)),
                None
            )
        self.query_one(ListView).index = index

    def highlighted_item(self) -> Optional[PickItem]:
        child = self.query_one(ListView).highlighted_child
        return child.pick_item if isinstance(child, PickListItem) else None

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        self.selection_list.change_value(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.selection_list.accept(self.highlighted_item())

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        event.stop()
        if isinstance(event.item, PickListItem):
            self.selection_list.accept(event.item.pick_item)

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        if isinstance(event.item, PickListItem):
            self.selection_list.note_highlighted(event.item.pick_item)

    def action_cursor_up(self) -> None:
        self.query_one(ListView).action_cursor_up()

    def action_cursor_down(self) -> None:
        self.query_one(ListView).action_cursor_down()

    def action_hide_list(self) -> None:
        self.selection_list.hide()

    def action_trigger_button(self) -> None:
        item = self.highlighted_item()
        buttons = getattr(item, "buttons", None)
        if not buttons:
            self.notify("Only recent items can be removed", severity="warning")
            return
        self.selection_list.trigger(item, buttons[0])


class TextualSelectionList(BaseSelectionList):
    """Selection list backed by a ``SelectionScreen``.

    The engine writes plain attributes. The ones the screen renders are
    properties here, and refresh the screen once it is mounted.
    ``ignore_focus_out`` has no effect: the screen stays up until an item
    is accepted or the list is hidden.
    """

    def __init__(self, ui: "TextualPickUI"):
        self.ui = ui
        self.visible = False
        self.screen = SelectionScreen(self)
        super().__init__()

    @property
    def placeholder(self) -> str:
        return self._placeholder

    @placeholder.setter
    def placeholder(self, placeholder: str) -> None:
        self._placeholder = placeholder
        if self.screen.is_mounted:
            self.screen.show_status(placeholder)

    @property
    def busy(self) -> bool:
        return self._busy

    @busy.setter
    def busy(self, busy: bool) -> None:
        self._busy = busy
        if self.screen.is_mounted:
            self.screen.show_busy(busy)

    @property
    def active_items(self) -> List[PickItem]:
        return self._active_items

    @active_items.setter
    def active_items(self, items: List[PickItem]) -> None:
        self._active_items = list(items)
        if self.screen.is_mounted:
            self.screen.highlight_active()

    def on_items_changed(self) -> None:
        if self.screen.is_mounted:
            self.screen.rebuild()

    def show(self) -> None:
        if self.visible:
            return
        self.visible = True
        self.ui.app.push_screen(self.screen)

    def hide(self) -> None:
        if not self.visible:
            return
        self.visible = False
        if self.ui.app.screen is self.screen:
            self.screen.dismiss()
        self.post(ListHidden())

    def visible_items(self) -> List[PickItem]:
        """Items matching the filter, with always-shown items kept."""
        needle = self.value.casefold()
        matched: List[PickItem] = []
        for item in self.items:
            if isinstance(item, SeparatorItem):
                if matched and not isinstance(matched[-1], SeparatorItem):
                    matched.append(item)
                continue
            haystack = item.label
            if self.match_on_description:
                haystack = f"{haystack} {item.description}"
            if item.always_show or needle in haystack.casefold():
                matched.append(item)

        if matched and isinstance(matched[-1], SeparatorItem):
            matched.pop()
        return matched

    # Called by the screen on user input

    def change_value(self, value: str) -> None:
        if value == self.value:
            return
        self.value = value
        self.post(ValueChanged(value))
        if self.screen.is_mounted:
            self.screen.rebuild()

    def accept(self, item: Optional[PickItem]) -> None:
        self.selected_items = [item] if item is not None else []
        self.post(ItemAccepted(item))

    def trigger(self, item: PickItem, button: ItemButton) -> None:
        self.post(ItemButtonTriggered(item, button))

    def note_highlighted(self, item: PickItem) -> None:
        # Highlight events for rows of a replaced item list arrive late
        if item in self.items:
            self._active_items = [item]
