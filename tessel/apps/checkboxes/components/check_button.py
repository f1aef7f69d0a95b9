"""CheckButton component: a toggle that can be set without echoing."""

from tessel.apps.checkboxes.widgets import ToggleButton
from tessel.core.component import Link, Update
from tessel.core.connect import emitter
from tessel.core.message import Message


class Check(Message):
    pass


class Toggle(Message):
    pass


class Uncheck(Message):
    pass


CheckMsg = Check | Toggle | Uncheck


class CheckButton(Update):
    """Wraps a ToggleButton whose clicks are reported as Toggle messages.

    Check and Uncheck come from other components and move the button
    programmatically; the stream is locked meanwhile so the button's
    "clicked" echo is not reported as a user Toggle.
    """

    def __init__(self, link: Link, label: str) -> None:
        super().__init__(link)
        self.check = False
        self.button = ToggleButton(label)
        self.button.connect("clicked", emitter(link.stream, Toggle()))

    def update(self, message: CheckMsg) -> None:
        if isinstance(message, Check):
            self.check = True
            with self.link.stream.locked():
                self.button.set_active(True)
        elif isinstance(message, Toggle):
            self.check = not self.check
            self.button.set_active(self.check)
        elif isinstance(message, Uncheck):
            self.check = False
            with self.link.stream.locked():
                self.button.set_active(False)
