"""
Terminal user interface for the resource picker.
"""

from .dialogs import ChoiceScreen, InputScreen, MessageScreen
from .selection import SelectionScreen, TextualSelectionList
from .tui import PickerApp, TextualPickUI

__all__ = [
    "ChoiceScreen",
    "InputScreen",
    "MessageScreen",
    "SelectionScreen",
    "TextualSelectionList",
    "PickerApp",
    "TextualPickUI",
]
