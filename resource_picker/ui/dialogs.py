"""
Modal dialogs for prompts, fixed choices and error messages.
"""

from typing import Callable, ClassVar, List, Optional, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, ListItem, ListView, Static


DIALOG_CSS = """
{name} {{
    align: center middle;
}}

{name} > #dialog {{
    width: 80;
    height: auto;
    max-height: 80%;
    border: thick $accent;
    background: $surface;
    padding: 1 2;
}}

{name} #dialog_title {{
    text-style: bold;
}}

{name} #dialog_hint {{
    color: $text-muted;
}}
"""


class InputScreen(ModalScreen[Optional[str]]):
    """Prompt for one line of text.

    Args:
        prompt: Dialog title
        placeholder: Shown while the input is empty
        initial_value: Text the input starts with
        validator: Returns a message for invalid text, None when valid
    """

    DEFAULT_CSS = DIALOG_CSS.format(name="InputScreen") + """
    InputScreen #dialog_message {
        color: $error;
    }
    """

    BINDINGS: ClassVar[List[Binding]] = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, prompt: str, placeholder: str = "", initial_value: str = "",
                 validator: Optional[Callable[[str], Optional[str]]] = None):
        super().__init__()
        self.prompt = prompt
        self.placeholder = placeholder
        self.initial_value = initial_value
        self.validator = validator
        self.validation_message: Optional[str] = None

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label(Text(self.prompt), id="dialog_title")
            yield Input(value=self.initial_value, placeholder=self.placeholder, id="dialog_input")
            yield Static("", id="dialog_message")
            yield Static("Press Enter to confirm, Escape to cancel", id="dialog_hint")

    def on_mount(self) -> None:
        self.query_one(Input).focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        self._show_message(self._check(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        message = self._check(event.value)
        if message:
            self._show_message(message)
            return
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _check(self, value: str) -> Optional[str]:
        return self.validator(value) if self.validator else None

    def _show_message(self, message: Optional[str]) -> None:
        self.validation_message = message
        self.query_one("#dialog_message", Static).update(Text(message or ""))


class ChoiceScreen(ModalScreen[Optional[str]]):
    """Choose one of a fixed set of strings."""

    DEFAULT_CSS = DIALOG_CSS.format(name="ChoiceScreen") + """
    ChoiceScreen #dialog_options {
        height: auto;
        max-height: 20;
    }
    """

    BINDINGS: ClassVar[List[Binding]] = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, options: Sequence[str], placeholder: str, prompt: str = ""):
        super().__init__()
        self.options = list(options)
        self.placeholder = placeholder
        self.prompt = prompt

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            if self.prompt:
                yield Label(Text(self.prompt), id="dialog_title")
            yield Static(Text(self.placeholder), id="dialog_message")
            yield ListView(
                *(ListItem(Label(Text(option))) for option in self.options),
                id="dialog_options",
            )
            yield Static("Press Enter to choose, Escape to cancel", id="dialog_hint")

    def on_mount(self) -> None:
        list_view = self.query_one(ListView)
        list_view.index = 0 if self.options else None
        list_view.focus()

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        event.stop()
        index = event.list_view.index
        if index is not None:
            self.dismiss(self.options[index])

    def action_cancel(self) -> None:
        self.dismiss(None)


class MessageScreen(ModalScreen[None]):
    """A message the user acknowledges with Enter or Escape."""

    DEFAULT_CSS = DIALOG_CSS.format(name="MessageScreen")

    BINDINGS: ClassVar[List[Binding]] = [
        Binding("enter", "close", "Close"),
        Binding("escape", "close", "Close", show=False),
    ]

    def __init__(self, body: str, prompt: str = "Error"):
        super().__init__()
        self.body = body
        self.prompt = prompt

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label(Text(self.prompt), id="dialog_title")
            yield Static(Text(self.body), id="dialog_message")
            yield Static("Press Enter to continue", id="dialog_hint")

    def action_close(self) -> None:
        self.dismiss(None)
