"""Single-threaded event stream driven by a cooperative scheduler.

The stream is the mailbox of one component. UI callbacks and sibling
components push into it with emit(); the scheduler pulls from it with poll(),
or natively with ``async for``.

All operations must run on the thread owning the consumer's event loop.
"""

import asyncio
import copy
import logging
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import partial
from typing import Any, Generic, TypeVar

from tessel.core.errors import ConcurrentPollError, ReentrantEmitError, StreamCloseError
from tessel.core.observer import Observer
from tessel.streams.base import END_OF_STREAM, PENDING, Poll

M = TypeVar("M")

logger = logging.getLogger("tessel.stream")

Waker = Callable[[], None]


def _resolve(future: asyncio.Future) -> None:
    if not future.done():
        future.set_result(None)


class EventStream(Generic[M]):
    """Mailbox, observer list and suspension slot of one component.

    States:
        Open-Unlocked: emit() has full effect.
        Open-Locked: emit() drops the message entirely.
        Closed: terminal; emit() is a no-op and poll() yields END_OF_STREAM.

    Args:
        name: Label used in log records and error messages.
        on_close: Optional teardown hook for an associated external channel.
            An OSError raised by it is reported by close() as StreamCloseError.
    """

    def __init__(
        self,
        name: str | None = None,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self.name = name or f"stream-{id(self):x}"
        self._mailbox: deque[M] = deque()
        self._observers: list[Observer] = []
        self._waker: Waker | None = None
        self._locked = False
        self._terminated = False
        self._emitting = False
        self._wake_count = 0
        self._on_close = on_close

    def __repr__(self) -> str:
        return (
            f"<EventStream {self.name!r} pending={len(self._mailbox)} "
            f"locked={self._locked} closed={self._terminated}>"
        )

    def __len__(self) -> int:
        """Return the number of undelivered messages."""
        return len(self._mailbox)

    @property
    def is_locked(self) -> bool:
        return self._locked

    @property
    def is_closed(self) -> bool:
        return self._terminated

    @property
    def wake_count(self) -> int:
        """Number of times a parked consumer was woken."""
        return self._wake_count

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def emit(self, message: M) -> None:
        """Deliver ``message`` to the parked consumer, observers and mailbox.

        Observers run inline, in registration order, each with its own copy
        of the message. The message is appended to the mailbox after fan-out.

        Raises:
            ReentrantEmitError: If an observer emits back into this stream.
        """
        if self._terminated:
            return
        if self._locked:
            logger.debug(
                "Dropped message emitted while locked",
                extra={"stream": self.name, "message_type": type(message).__name__},
            )
            return
        if self._emitting:
            raise ReentrantEmitError(self.name)

        self._emitting = True
        try:
            waker, self._waker = self._waker, None
            if waker is not None:
                self._wake_count += 1
                waker()

            for observer in self._observers:
                observer.notify(copy.copy(message))

            self._mailbox.append(message)
        finally:
            self._emitting = False

    def observe(
        self,
        converter: Callable[[M], Any],
        target: Any,
        *,
        when: Callable[[M], bool] | None = None,
    ) -> None:
        """Forward every later message to ``target`` through ``converter``.

        Args:
            converter: Pure function building the target's message.
            target: Any stream; it is referenced, not owned.
            when: Optional predicate selecting the messages to forward.
        """
        self._observers.append(Observer(converter, target, when))

    def lock(self) -> None:
        """Start dropping every emitted message until unlock()."""
        self._locked = True

    def unlock(self) -> None:
        self._locked = False

    @contextmanager
    def locked(self) -> Iterator["EventStream[M]"]:
        """Bracket a multi-step mutation so its echoes are not delivered."""
        self.lock()
        try:
            yield self
        finally:
            self.unlock()

    def close(self) -> None:
        """Terminate the stream and wake any parked consumer.

        Idempotent. The stream is terminated even when the teardown hook
        fails.

        Raises:
            StreamCloseError: If the teardown hook raised an OSError.
        """
        if self._terminated:
            return
        self._terminated = True
        waker, self._waker = self._waker, None
        logger.debug(
            "Closed stream",
            extra={"stream": self.name, "pending": len(self._mailbox)},
        )
        try:
            if self._on_close is not None:
                self._on_close()
        except OSError as e:
            raise StreamCloseError(e) from e
        finally:
            if waker is not None:
                self._wake_count += 1
                waker()

    def poll(self, waker: Waker) -> Poll:
        """Pop the next message, or park ``waker`` until one is emitted.

        Args:
            waker: Called once by the next emit() or close().

        Returns:
            READY with the front message, PENDING once parked, or END after
            close().

        Raises:
            ConcurrentPollError: If a different waker is already parked.
        """
        if self._terminated:
            return END_OF_STREAM

        if self._mailbox:
            self._waker = None
            return Poll.ready(self._mailbox.popleft())

        if self._waker is not None and self._waker != waker:
            raise ConcurrentPollError(self.name)
        self._waker = waker
        return PENDING

    def cancel_poll(self, waker: Waker) -> None:
        """Un-park ``waker`` if it is the parked consumer."""
        if self._waker is not None and self._waker == waker:
            self._waker = None

    async def next(self) -> M:
        """Wait for the next message.

        Raises:
            StopAsyncIteration: Once the stream is closed.
        """
        loop = asyncio.get_running_loop()
        while True:
            future = loop.create_future()
            waker = partial(_resolve, future)
            result = self.poll(waker)
            if result.is_ready:
                return result.message
            if result.is_end:
                raise StopAsyncIteration
            try:
                await future
            finally:
                self.cancel_poll(waker)

    def __aiter__(self) -> "EventStream[M]":
        return self

    async def __anext__(self) -> M:
        return await self.next()
