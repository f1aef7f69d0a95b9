"""Observer records and cross-component wiring helpers.

Wiring forms a static directed graph of streams built at construction time:

    source --converter--> target

Converters are plain functions. A converter that raises propagates straight
to the caller of ``source.emit()``; observers notified before it keep their
effects and the source mailbox does not receive the message.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tessel.streams.base import Stream


@dataclass(frozen=True)
class Observer:
    """A registered forwarding rule from one stream to another.

    The observer references its target but does not own it: closing the
    source never closes the target.

    Attributes:
        converter: Pure function mapping a source message to a target message.
        target: The stream receiving converted messages.
        when: Optional predicate; messages it rejects are not forwarded.
    """

    converter: Callable[[Any], Any]
    target: "Stream"
    when: Callable[[Any], bool] | None = None

    def notify(self, message: Any) -> None:
        if self.when is not None and not self.when(message):
            return
        self.target.emit(self.converter(message))


def forward(source: "Stream", target: "Stream", wrap: Callable[[Any], Any]) -> None:
    """Forward every message of ``source`` into ``target`` wrapped by ``wrap``.

    Typically used by a parent component to receive its children's messages
    as one of its own variants::

        forward(plus.stream, link.stream, PlusWrapper)
    """
    source.observe(wrap, target)


def relay(
    source: "Stream",
    target: "Stream",
    when: Callable[[Any], bool],
    message: Any,
) -> None:
    """Send ``message`` to ``target`` whenever ``source`` emits a match.

    Args:
        source: Stream to watch.
        target: Stream receiving the message.
        when: Predicate selecting the source messages to react to.
        message: The message to send. A callable is invoked with the source
            message to build it.
    """
    if callable(message):
        converter = message
    else:
        def converter(_: Any) -> Any:
            return message

    source.observe(converter, target, when=when)
