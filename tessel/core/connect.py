"""Glue between toolkit callbacks and streams.

Each helper returns a plain callable to register as a widget signal handler.
The callable emits synchronously from inside the toolkit callback.
"""

from collections.abc import Callable
from typing import Any

from tessel.streams.base import Stream


def emitter(stream: Stream, message: Any) -> Callable[..., None]:
    """Return a callback emitting ``message`` whatever its arguments.

    Example:
        button.connect("clicked", emitter(link.stream, Toggle()))
    """

    def callback(*args: Any) -> None:
        stream.emit(message)

    return callback


def emitter_from(stream: Stream, build: Callable[..., Any]) -> Callable[..., None]:
    """Return a callback emitting ``build(*args)`` unless it returns None."""

    def callback(*args: Any) -> None:
        message = build(*args)
        if message is not None:
            stream.emit(message)

    return callback


def emitter_returning(
    stream: Stream, build: Callable[..., tuple[Any, Any]]
) -> Callable[..., Any]:
    """Return a callback for signals expecting a return value.

    ``build(*args)`` returns ``(message_or_None, return_value)``; the message
    is emitted when present and ``return_value`` is handed back to the
    toolkit (e.g. whether a delete event is inhibited).
    """

    def callback(*args: Any) -> Any:
        message, return_value = build(*args)
        if message is not None:
            stream.emit(message)
        return return_value

    return callback
