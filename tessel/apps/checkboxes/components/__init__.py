"""Check-box components for the demo application."""

from tessel.apps.checkboxes.components.check_button import (
    Check,
    CheckButton,
    Toggle,
    Uncheck,
)
from tessel.apps.checkboxes.components.window import (
    MinusWrapper,
    PlusWrapper,
    Quit,
    Window,
)

__all__ = [
    "Check",
    "CheckButton",
    "Toggle",
    "Uncheck",
    "MinusWrapper",
    "PlusWrapper",
    "Quit",
    "Window",
]
