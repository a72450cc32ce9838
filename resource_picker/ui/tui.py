"""
Textual implementation of the picker UI.

``TextualPickUI.run`` starts a ``PickerApp`` and runs the picking work in
one of its workers. Selection lists and prompts are screens pushed on that
app. Values the user asks to see are printed once the app has released
the terminal, so stdout carries nothing else.
"""

import asyncio
import webbrowser
from typing import Any, Awaitable, Callable, ClassVar, List, Optional, Sequence, TypeVar

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Static

from resource_picker.models.items import SeparatorItem
from resource_picker.services.base import BasePickUI
from resource_picker.ui.dialogs import ChoiceScreen, InputScreen, MessageScreen
from resource_picker.ui.selection import TextualSelectionList


T = TypeVar("T")
ResultT = TypeVar("ResultT")


class PickerApp(App[None]):
    """Hosts the picker's screens while the picking work runs.

    The outcome of the work (its result, or the exception it raised) is
    kept on the app for ``TextualPickUI.run`` to hand back.
    """

    TITLE = "aws-pick"

    BINDINGS: ClassVar[List[Binding]] = [
        Binding("ctrl+c", "interrupt", "Quit", show=False, priority=True),
    ]

    def __init__(self, work: Optional[Callable[[], Awaitable[Any]]] = None):
        super().__init__()
        self.work = work
        self.outcome: Any = None
        self.error: Optional[Exception] = None
        self.interrupted = False

    def compose(self) -> ComposeResult:
        yield Static(Text("aws-pick"), id="picker_idle")

    def on_mount(self) -> None:
        if self.work is not None:
            self.run_worker(self._run_work(), name="pick", exclusive=True)

    async def _run_work(self) -> None:
        try:
            self.outcome = await self.work()
        except Exception as e:
            self.error = e
        finally:
            self.exit()

    def action_interrupt(self) -> None:
        self.interrupted = True
        self.exit()


class TextualPickUI(BasePickUI):
    """Picker UI for an interactive terminal, built on textual."""

    clear_icon = "x"
    separator = SeparatorItem(label="recent")

    def __init__(self, app: Optional[PickerApp] = None, output: Callable[[str], None] = print,
                 headless: bool = False):
        """
        Initialize the UI.

        Args:
            app: App to push screens on, a new ``PickerApp`` by default
            output: Where written values go once the app has exited
            headless: Run the app without a terminal
        """
        self.app = app or PickerApp()
        self.output = output
        self.headless = headless
        self.written: List[str] = []

    async def run(self, work: Callable[[], Awaitable[T]]) -> T:
        """
        Run the picking work inside the app.

        Raises:
            KeyboardInterrupt: If the user quit with ctrl+c
            Exception: Whatever the work raised
        """
        self.app.work = work
        await self.app.run_async(headless=self.headless)

        for text in self.written:
            self.output(text)
        self.written.clear()

        if self.app.interrupted:
            raise KeyboardInterrupt
        if self.app.error is not None:
            raise self.app.error
        return self.app.outcome

    def write(self, text: str) -> None:
        self.written.append(text)

    def create_selection_list(self) -> TextualSelectionList:
        return TextualSelectionList(self)

    async def show_error(self, message: str) -> None:
        await self._wait_for(MessageScreen(message, prompt="Error"))

    async def open_url(self, url: str) -> bool:
        self.app.notify(url, title="Opening in browser")
        return await asyncio.to_thread(webbrowser.open, url)

    async def input(self, title: str, placeholder: str = "", initial_value: str = "",
                    validate: Optional[Callable[[str], Optional[str]]] = None) -> Optional[str]:
        return await self._wait_for(InputScreen(title, placeholder, initial_value, validate))

    async def pick_string(self, options: Sequence[str], placeholder: str,
                          title: str = "") -> Optional[str]:
        return await self._wait_for(ChoiceScreen(options, placeholder, title))

    async def _wait_for(self, screen: Screen[ResultT]) -> ResultT:
        """Push a screen and wait until it is dismissed."""
        dismissed: "asyncio.Future[ResultT]" = asyncio.get_running_loop().create_future()

        def resolve(result: ResultT) -> None:
            if not dismissed.done():
                dismissed.set_result(result)

        self.app.push_screen(screen, callback=resolve)
        return await dismissed
