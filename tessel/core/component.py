"""Components and the update loop that drives them.

A component pairs an EventStream (its mailbox) with an Update instance (its
logic). The update loop is the consumer of the stream:

- Waits on the stream for the next message
- Calls the component's update() with it (sync or async)
- Warns when an update is slow and applies the failure mode on errors

The loop ends when the stream is closed.
"""

import asyncio
import inspect
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from tessel.core.errors import StreamCloseError
from tessel.core.logging import configure_component_logger
from tessel.core.message import DEFAULT_PREVIEW_CHARS, display_variant

if TYPE_CHECKING:
    from tessel.core.context import Context
    from tessel.streams.local import EventStream

# Updates taking at least this long are logged as slow
DEFAULT_SLOW_UPDATE_MS = 200.0

U = TypeVar("U", bound="Update")


class UpdateFailureMode(Enum):
    """Strategy for handling exceptions raised by update().

    LOG: Log the error and keep consuming messages
    RAISE: Close the component's stream and re-raise from the update loop
    """

    LOG = "log"
    RAISE = "raise"


@dataclass
class ComponentStats:
    """Statistics from a component's update loop."""

    messages_processed: int = 0
    slow_updates: int = 0
    update_errors: int = 0


class Link:
    """What a component sees of the framework: its own stream and the context."""

    def __init__(self, context: "Context", stream: "EventStream") -> None:
        self.context = context
        self.stream = stream

    def emit(self, message: Any) -> None:
        """Send a message to this component's own update()."""
        self.stream.emit(message)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run a coroutine on the consumer loop alongside the component."""
        return self.context.spawn(coro)


class Update(ABC):
    """Base class for component logic.

    Subclasses receive their Link first, followed by any construction
    parameters given to Context.create_component().
    """

    def __init__(self, link: Link) -> None:
        self.link = link

    def subscriptions(self, link: Link) -> None:
        """Connect long-running sources once the component is created."""

    @abstractmethod
    def update(self, message: Any) -> None | Awaitable[None]:
        """Handle one message.

        Args:
            message: The next message from the component's stream.

        Returns:
            None, or an awaitable the update loop waits for before taking the
            next message.
        """
        ...


class Component(Generic[U]):
    """A running component: its stream, its logic and its update loop."""

    def __init__(
        self,
        stream: "EventStream",
        widget: U,
        name: str | None = None,
        slow_update_ms: float = DEFAULT_SLOW_UPDATE_MS,
        update_failure_mode: UpdateFailureMode = UpdateFailureMode.LOG,
        message_preview_chars: int = DEFAULT_PREVIEW_CHARS,
        log_level: int = logging.INFO,
    ) -> None:
        self.name = name or type(widget).__name__
        self._stream = stream
        self._widget = widget
        self.slow_update_ms = slow_update_ms
        self.update_failure_mode = update_failure_mode
        self.message_preview_chars = message_preview_chars
        self._log = configure_component_logger(log_level)
        self._stats = ComponentStats()
        self._task: asyncio.Task | None = None

    def __repr__(self) -> str:
        return f"<Component {self.name!r} stream={self._stream!r}>"

    @property
    def stream(self) -> "EventStream":
        return self._stream

    @property
    def widget(self) -> U:
        return self._widget

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def stats(self) -> ComponentStats:
        """Return a copy of current statistics."""
        return ComponentStats(
            messages_processed=self._stats.messages_processed,
            slow_updates=self._stats.slow_updates,
            update_errors=self._stats.update_errors,
        )

    def emit(self, message: Any) -> None:
        self._stream.emit(message)

    def observe(
        self,
        converter: Callable[[Any], Any],
        target: Any,
        *,
        when: Callable[[Any], bool] | None = None,
    ) -> None:
        self._stream.observe(converter, target, when=when)

    def start(self) -> asyncio.Task:
        """Start the update loop on the running event loop."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(
                self._run(), name=f"tessel-update-{self.name}"
            )
        return self._task

    async def done(self) -> None:
        """Wait for the update loop to finish without closing the stream."""
        if self._task is not None:
            await self._task

    async def stop(self) -> None:
        """Close the stream and wait for the update loop to drain out.

        Raises:
            StreamCloseError: If the stream's teardown failed. The update
                loop is still awaited first.
        """
        try:
            self._stream.close()
        finally:
            await self.done()

    async def _invoke_update(self, message: Any) -> None:
        result = self._widget.update(message)
        if inspect.isawaitable(result):
            await result

    async def _run(self) -> ComponentStats:
        async for message in self._stream:
            label = display_variant(message, self.message_preview_chars)
            self._log.debug(
                f"Dispatching {label} to {self.name}",
                extra={"component": self.name, "message_type": type(message).__name__},
            )
            self._stats.messages_processed += 1
            start = time.perf_counter()

            try:
                await self._invoke_update(message)
            except Exception as e:
                self._stats.update_errors += 1
                self._log.error(
                    f"Update of {self.name} raised exception: {e}",
                    extra={
                        "component": self.name,
                        "message_type": type(message).__name__,
                        "error": str(e),
                    },
                )
                if self.update_failure_mode == UpdateFailureMode.RAISE:
                    try:
                        self._stream.close()
                    except StreamCloseError as close_error:
                        self._log.error(
                            f"Closing {self.name} after a failed update raised: {close_error}",
                            extra={"component": self.name, "error": str(close_error)},
                        )
                    raise
                continue

            elapsed_ms = (time.perf_counter() - start) * 1000
            if elapsed_ms >= self.slow_update_ms:
                self._stats.slow_updates += 1
                self._log.warning(
                    f"The update function was slow to execute for message {label}: "
                    f"{elapsed_ms:.0f}ms",
                    extra={
                        "component": self.name,
                        "message_type": type(message).__name__,
                        "elapsed_ms": round(elapsed_ms, 3),
                    },
                )

        return self._stats
