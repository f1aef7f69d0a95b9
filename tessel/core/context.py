"""Application context.

The context is constructed once at startup and passed explicitly to every
consumer. It owns the configuration, creates streams and components, and
tears them all down on shutdown.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

from pydantic import BaseModel, Field

from tessel.core.component import (
    DEFAULT_SLOW_UPDATE_MS,
    Component,
    Link,
    Update,
    UpdateFailureMode,
)
from tessel.core.message import DEFAULT_PREVIEW_CHARS
from tessel.core.reactor import ReactorHandle
from tessel.streams.local import EventStream
from tessel.streams.threaded import ThreadedEventStream

U = TypeVar("U", bound=Update)


class ContextConfig(BaseModel):
    """Validated, immutable settings shared by every component of a context.

    Attributes:
        slow_update_ms: Threshold above which an update is logged as slow.
        message_preview_chars: Maximum length of message labels in logs.
        update_failure_mode: What the update loop does when update() raises.
        log_level: Level of the tessel.component logger.
    """

    slow_update_ms: float = Field(default=DEFAULT_SLOW_UPDATE_MS, ge=0)
    message_preview_chars: int = Field(default=DEFAULT_PREVIEW_CHARS, ge=1)
    update_failure_mode: UpdateFailureMode = UpdateFailureMode.LOG
    log_level: int = logging.INFO

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }


class Context:
    """Explicit application context; there is no global default.

    Args:
        config: Settings for the components created by this context.
        reactor: Handle onto a background reactor, needed for
            threaded_stream().
    """

    def __init__(
        self,
        config: ContextConfig | None = None,
        reactor: ReactorHandle | None = None,
    ) -> None:
        self.config = config or ContextConfig()
        self.reactor = reactor
        self._components: list[Component] = []
        self._tasks: set[asyncio.Task] = set()

    @property
    def components(self) -> tuple[Component, ...]:
        return tuple(self._components)

    def stream(self, name: str | None = None) -> EventStream:
        """Create a single-threaded stream for the consumer loop."""
        return EventStream(name=name)

    def threaded_stream(self, name: str | None = None) -> ThreadedEventStream:
        """Create a stream the reactor thread can feed.

        Raises:
            RuntimeError: If the context was built without a reactor.
        """
        if self.reactor is None:
            raise RuntimeError("threaded_stream() requires a context created with a reactor")
        return self.reactor.stream(name)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run a coroutine on the consumer loop, keeping a reference to it."""
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def create_component(
        self,
        update_cls: type[U],
        *args: Any,
        name: str | None = None,
        **kwargs: Any,
    ) -> Component[U]:
        """Build a component and start its update loop.

        Must be called with the consumer loop running.

        Args:
            update_cls: The component's Update subclass.
            *args: Construction parameters passed after the Link.
            name: Component name; defaults to the class name.
            **kwargs: Keyword construction parameters.
        """
        name = name or update_cls.__name__
        stream = self.stream(name)
        link = Link(self, stream)
        widget = update_cls(link, *args, **kwargs)
        widget.subscriptions(link)

        component = Component(
            stream,
            widget,
            name=name,
            slow_update_ms=self.config.slow_update_ms,
            update_failure_mode=self.config.update_failure_mode,
            message_preview_chars=self.config.message_preview_chars,
            log_level=self.config.log_level,
        )
        component.start()
        self._components.append(component)
        return component

    async def shutdown(self) -> None:
        """Stop every component, then cancel leftover spawned tasks.

        Raises:
            Exception: The first failure, after every component has been
                stopped: a StreamCloseError from a teardown, or the error
                a RAISE-mode update loop ended with.
        """
        first_error: Exception | None = None
        components, self._components = self._components, []
        for component in components:
            try:
                await component.stop()
            except Exception as e:
                if first_error is None:
                    first_error = e

        current = asyncio.current_task()
        tasks = [task for task in self._tasks if task is not current]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if first_error is not None:
            raise first_error
