"""Background reactor thread.

A dedicated daemon thread runs its own asyncio event loop forever. Callers
get a ReactorHandle to schedule work onto that loop and to create
ThreadedEventStreams through which the reactor delivers messages back to the
consumer thread.
"""

import asyncio
import concurrent.futures
import logging
import threading
from collections.abc import Callable, Coroutine
from typing import Any

from tessel.core.errors import ReactorStoppedError
from tessel.streams.threaded import ThreadedEventStream
from tessel.streams.wake import WakeChannel

logger = logging.getLogger("tessel.reactor")

# Seconds to wait for the reactor loop to come up
DEFAULT_START_TIMEOUT = 5.0


class ReactorHandle:
    """Thread-safe handle onto a running reactor loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, name: str) -> None:
        self._loop = loop
        self.name = name

    def __repr__(self) -> str:
        return f"<ReactorHandle {self.name!r} running={self.is_running}>"

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def is_running(self) -> bool:
        return self._loop.is_running() and not self._loop.is_closed()

    def _ensure_running(self) -> None:
        if not self.is_running:
            raise ReactorStoppedError(f"Reactor {self.name!r} is not running")

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future:
        """Submit a coroutine to the reactor loop.

        Returns:
            concurrent.futures.Future (Thread-safe)

        Raises:
            ReactorStoppedError: If the reactor is not running.
        """
        if not self.is_running:
            coro.close()
            self._ensure_running()
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> asyncio.Handle:
        """Schedule ``callback(*args)`` on the reactor loop."""
        self._ensure_running()
        return self._loop.call_soon_threadsafe(callback, *args)

    def wake_channel(self) -> WakeChannel:
        """Return a new channel through which the reactor can wake a consumer."""
        return WakeChannel()

    def stream(self, name: str | None = None) -> ThreadedEventStream:
        """Return a stream the reactor can feed from its own thread."""
        return ThreadedEventStream(self.wake_channel(), name=name)


class Reactor:
    """Dedicated background thread running a persistent asyncio loop.

    Example:
        with Reactor() as handle:
            stream = handle.stream("ticks")
            handle.spawn(produce(stream))
            ...
    """

    def __init__(self, name: str = "tessel-reactor") -> None:
        self.name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()
        self._handle: ReactorHandle | None = None

    @property
    def handle(self) -> ReactorHandle | None:
        return self._handle

    @property
    def is_running(self) -> bool:
        return self._handle is not None and self._handle.is_running

    def start(self, timeout: float = DEFAULT_START_TIMEOUT) -> ReactorHandle:
        """Start the reactor thread and wait for its loop.

        Returns:
            The handle onto the running loop. Starting twice returns the
            existing handle.

        Raises:
            RuntimeError: If the loop did not come up within ``timeout``.
        """
        if self._handle is not None:
            return self._handle

        self._ready.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        if not self._ready.wait(timeout) or self._loop is None:
            raise RuntimeError(f"Reactor {self.name!r} failed to start within {timeout}s")

        self._handle = ReactorHandle(self._loop, self.name)
        return self._handle

    def _run(self) -> None:
        """Thread entry point."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        logger.info(f"Reactor {self.name!r} starting", extra={"reactor": self.name})
        try:
            loop.call_soon(self._ready.set)
            loop.run_forever()
        except Exception as e:
            logger.error(
                f"Reactor {self.name!r} crashed: {e}",
                extra={"reactor": self.name, "error": str(e)},
            )
            raise
        finally:
            self._ready.set()
            tasks = asyncio.all_tasks(loop)
            for task in tasks:
                task.cancel()
            if tasks:
                loop.run_until_complete(asyncio.gather(*tasks, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
            logger.info(f"Reactor {self.name!r} stopped", extra={"reactor": self.name})

    def stop(self, timeout: float | None = None) -> None:
        """Stop the loop and join the reactor thread (Thread-safe)."""
        loop, thread = self._loop, self._thread
        if loop is not None and not loop.is_closed():
            try:
                loop.call_soon_threadsafe(loop.stop)
            except RuntimeError:
                # Loop closed between the check and the call.
                pass
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._handle = None
        self._thread = None
        self._loop = None

    def __enter__(self) -> ReactorHandle:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
