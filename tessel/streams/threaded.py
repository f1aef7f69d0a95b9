"""Event stream shared between a producer thread and a single consumer.

Used when a background reactor thread delivers messages to a consumer that
runs on a different, logically single-threaded loop. State is guarded by a
lock, and the wake crosses threads through a WakeChannel the consumer watches
as a readiness source:

    producer thread                 consumer thread
    ---------------                 ---------------
    emit(msg) --lock--> mailbox
              --notify--> [WakeChannel] --readable--> drain(); poll()

Besides the pending mailbox, the stream keeps an append-only log of the
messages already delivered to the consumer.
"""

import asyncio
import copy
import logging
import threading
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from tessel.core.errors import ConcurrentPollError, ReentrantEmitError, StreamCloseError
from tessel.core.observer import Observer
from tessel.streams.base import END_OF_STREAM, PENDING, Poll
from tessel.streams.wake import WakeChannel

M = TypeVar("M")

logger = logging.getLogger("tessel.streams.threaded")


def _resolve(future: asyncio.Future) -> None:
    if not future.done():
        future.set_result(None)


class ThreadedEventStream(Generic[M]):
    """Lock-guarded event stream with a cross-thread wake channel.

    Args:
        channel: Wake channel to notify; a new one is created if omitted.
            The stream owns the channel and closes it on close().
        name: Label used in log records and error messages.
    """

    def __init__(self, channel: WakeChannel | None = None, name: str | None = None) -> None:
        self.name = name or f"threaded-stream-{id(self):x}"
        self._channel = channel if channel is not None else WakeChannel()
        self._lock = threading.RLock()
        self._mailbox: deque[M] = deque()
        self._delivered: list[M] = []
        self._delivered_cursor = 0
        self._observers: list[Observer] = []
        self._parked_by: int | None = None
        self._waiter: tuple[asyncio.AbstractEventLoop, asyncio.Future] | None = None
        self._locked = False
        self._terminated = False
        self._emitting_thread: int | None = None
        self._wake_count = 0

    def __repr__(self) -> str:
        return (
            f"<ThreadedEventStream {self.name!r} pending={len(self)} "
            f"locked={self._locked} closed={self._terminated}>"
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._mailbox)

    @property
    def channel(self) -> WakeChannel:
        return self._channel

    def fileno(self) -> int:
        """Return the readiness source of the wake channel."""
        return self._channel.fileno()

    @property
    def is_locked(self) -> bool:
        return self._locked

    @property
    def is_closed(self) -> bool:
        return self._terminated

    @property
    def wake_count(self) -> int:
        """Number of wake notifications sent to a parked consumer."""
        return self._wake_count

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    @property
    def delivered(self) -> tuple[M, ...]:
        """Snapshot of every message delivered to the consumer so far."""
        with self._lock:
            return tuple(self._delivered)

    def pop_delivered(self) -> M | None:
        """Return the oldest delivered message not yet popped, or None.

        The delivered log itself is never truncated; a read cursor advances.
        """
        with self._lock:
            if self._delivered_cursor >= len(self._delivered):
                return None
            message = self._delivered[self._delivered_cursor]
            self._delivered_cursor += 1
            return message

    def emit(self, message: M) -> None:
        """Deliver ``message``; safe to call from any thread.

        Observers run on the emitting thread while the stream lock is held,
        so concurrent producers observe one total order.

        Raises:
            ReentrantEmitError: If an observer emits back into this stream.
        """
        with self._lock:
            if self._terminated:
                return
            if self._locked:
                logger.debug(
                    "Dropped message emitted while locked",
                    extra={"stream": self.name, "message_type": type(message).__name__},
                )
                return
            thread_id = threading.get_ident()
            if self._emitting_thread == thread_id:
                raise ReentrantEmitError(self.name)

            self._emitting_thread = thread_id
            try:
                if self._parked_by is not None:
                    self._parked_by = None
                    self._wake_count += 1
                    self._channel.notify()

                for observer in self._observers:
                    observer.notify(copy.copy(message))

                self._mailbox.append(message)
            finally:
                self._emitting_thread = None

    def observe(
        self,
        converter: Callable[[M], Any],
        target: Any,
        *,
        when: Callable[[M], bool] | None = None,
    ) -> None:
        """Forward every later message to ``target`` through ``converter``."""
        with self._lock:
            self._observers.append(Observer(converter, target, when))

    def lock(self) -> None:
        with self._lock:
            self._locked = True

    def unlock(self) -> None:
        with self._lock:
            self._locked = False

    @contextmanager
    def locked(self) -> Iterator["ThreadedEventStream[M]"]:
        """Bracket a multi-step mutation so its echoes are not delivered."""
        self.lock()
        try:
            yield self
        finally:
            self.unlock()

    def close(self) -> None:
        """Terminate the stream and close its wake channel.

        Idempotent. The stream is terminated even when the teardown fails.
        The channel's readiness source stays readable after close, so a
        consumer watching fileno() wakes and polls END; its next drain()
        releases the read end.

        Raises:
            StreamCloseError: If closing the wake channel raised an OSError.
        """
        with self._lock:
            if self._terminated:
                return
            self._terminated = True
            parked = self._parked_by is not None
            self._parked_by = None
            waiter, self._waiter = self._waiter, None

            if waiter is not None:
                loop, future = waiter
                if not loop.is_closed():
                    loop.call_soon_threadsafe(_resolve, future)
            if parked:
                self._wake_count += 1
                self._channel.notify()

            logger.debug(
                "Closed threaded stream",
                extra={"stream": self.name, "pending": len(self._mailbox)},
            )
            try:
                self._channel.close()
            except OSError as e:
                logger.error(
                    f"Failed to close wake channel: {e}",
                    extra={"stream": self.name, "error": str(e)},
                )
                raise StreamCloseError(e) from e

    def poll(self) -> Poll:
        """Pop the next message, or park the calling thread's consumer.

        Returns:
            READY with the front message, PENDING once parked, or END after
            close(). A PENDING consumer is woken through the wake channel.

        Raises:
            ConcurrentPollError: If another thread's consumer is parked.
        """
        with self._lock:
            if self._terminated:
                return END_OF_STREAM

            if self._mailbox:
                message = self._mailbox.popleft()
                self._parked_by = None
                self._delivered.append(message)
                return Poll.ready(message)

            thread_id = threading.get_ident()
            if self._parked_by is not None and self._parked_by != thread_id:
                raise ConcurrentPollError(self.name)
            self._parked_by = thread_id
            return PENDING

    async def next(self) -> M:
        """Wait on the running loop for the next message.

        Raises:
            StopAsyncIteration: Once the stream is closed.
            ConcurrentPollError: If another coroutine is already waiting.
        """
        loop = asyncio.get_running_loop()
        while True:
            if self._waiter is not None:
                raise ConcurrentPollError(self.name)

            result = self.poll()
            if result.is_ready:
                return result.message
            if result.is_end:
                raise StopAsyncIteration

            future = loop.create_future()
            with self._lock:
                if self._terminated:
                    continue
                fd = self._channel.fileno()
                self._waiter = (loop, future)
                loop.add_reader(fd, _resolve, future)
            try:
                await future
            finally:
                with self._lock:
                    if self._waiter is not None and self._waiter[1] is future:
                        self._waiter = None
                loop.remove_reader(fd)
                self._channel.drain()

    def __aiter__(self) -> "ThreadedEventStream[M]":
        return self

    async def __anext__(self) -> M:
        return await self.next()
