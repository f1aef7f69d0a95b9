"""Window component: keeps its two check buttons mutually exclusive."""

from tessel.apps.checkboxes.components.check_button import (
    Check,
    CheckButton,
    CheckMsg,
    Toggle,
    Uncheck,
)
from tessel.apps.checkboxes.widgets import TopLevel
from tessel.core.component import Link, Update
from tessel.core.connect import emitter_returning
from tessel.core.message import Message
from tessel.core.observer import forward


class MinusWrapper(Message):
    msg: CheckMsg


class PlusWrapper(Message):
    msg: CheckMsg


class Quit(Message):
    pass


WindowMsg = MinusWrapper | PlusWrapper | Quit


class Window(Update):
    """Parent of a "+" and a "-" CheckButton.

    Children's messages reach the window wrapped in PlusWrapper or
    MinusWrapper; when one button is toggled the other one is set to the
    opposite state.
    """

    def __init__(self, link: Link, title: str = "Checkboxes") -> None:
        super().__init__(link)
        self.window = TopLevel(title)
        self.plus = link.context.create_component(CheckButton, "+", name="plus")
        self.minus = link.context.create_component(CheckButton, "-", name="minus")
        self.window.add(self.plus.widget.button)
        self.window.add(self.minus.widget.button)
        self.closed = False

    def subscriptions(self, link: Link) -> None:
        forward(self.plus.stream, link.stream, lambda msg: PlusWrapper(msg=msg))
        forward(self.minus.stream, link.stream, lambda msg: MinusWrapper(msg=msg))
        self.window.connect(
            "delete-event",
            emitter_returning(link.stream, lambda *args: (Quit(), False)),
        )

    def update(self, message: WindowMsg) -> None:
        if isinstance(message, Quit):
            self.closed = True
            self.link.stream.close()
        elif isinstance(message, MinusWrapper) and isinstance(message.msg, Toggle):
            self._mirror(self.minus, self.plus)
        elif isinstance(message, PlusWrapper) and isinstance(message.msg, Toggle):
            self._mirror(self.plus, self.minus)

    def _mirror(self, toggled, other) -> None:
        if toggled.widget.check:
            other.emit(Uncheck())
        else:
            other.emit(Check())
