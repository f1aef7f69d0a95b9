"""Headless stand-ins for toolkit widgets.

They reproduce the one toolkit behaviour the demo depends on: changing a
toggle button's state programmatically fires the same "clicked" signal as a
user click.
"""

from collections import defaultdict
from collections.abc import Callable
from typing import Any


class SignalSource:
    """Minimal signal registry in the style of GObject.connect()."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def connect(self, signal: str, handler: Callable[..., Any]) -> int:
        self._handlers[signal].append(handler)
        return len(self._handlers[signal])

    def fire(self, signal: str, *args: Any) -> Any:
        """Invoke the handlers of ``signal`` and return the last result."""
        result = None
        for handler in self._handlers[signal]:
            result = handler(self, *args)
        return result


class ToggleButton(SignalSource):
    def __init__(self, label: str) -> None:
        super().__init__()
        self.label = label
        self.active = False

    def set_active(self, active: bool) -> None:
        if active != self.active:
            self.active = active
            self.fire("clicked")

    def click(self) -> None:
        """Simulate the user clicking the button."""
        self.set_active(not self.active)


class TopLevel(SignalSource):
    def __init__(self, title: str) -> None:
        super().__init__()
        self.title = title
        self.children: list[Any] = []
        self.visible = True

    def add(self, child: Any) -> None:
        self.children.append(child)

    def request_close(self) -> bool:
        """Simulate the window manager's close button.

        Returns:
            True if a handler inhibited the close.
        """
        inhibited = bool(self.fire("delete-event"))
        if not inhibited:
            self.visible = False
        return inhibited
