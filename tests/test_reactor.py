"""Tests for the background Reactor and its handle."""

import asyncio
import threading

import pytest

from tessel.core.errors import ReactorStoppedError
from tessel.core.reactor import Reactor, ReactorHandle
from tessel.streams.threaded import ThreadedEventStream
from tessel.streams.wake import WakeChannel


@pytest.fixture
def reactor():
    reactor = Reactor("test-reactor")
    yield reactor
    reactor.stop(timeout=5.0)


def test_start_returns_running_handle(reactor):
    handle = reactor.start()

    assert isinstance(handle, ReactorHandle)
    assert handle.is_running
    assert reactor.is_running
    assert reactor.start() is handle


def test_spawn_runs_coroutine_on_reactor_thread(reactor):
    handle = reactor.start()

    async def whoami():
        await asyncio.sleep(0)
        return threading.current_thread().name

    assert handle.spawn(whoami()).result(timeout=5.0) == "test-reactor"


def test_call_soon_runs_callback_on_reactor_loop(reactor):
    handle = reactor.start()
    done = threading.Event()
    seen = []

    def callback(value):
        seen.append((value, threading.current_thread().name))
        done.set()

    handle.call_soon(callback, 42)

    assert done.wait(5.0)
    assert seen == [(42, "test-reactor")]


def test_stop_joins_thread_and_rejects_new_work():
    reactor = Reactor("short-lived")
    handle = reactor.start()

    reactor.stop(timeout=5.0)

    assert not reactor.is_running
    assert not handle.is_running

    async def never():
        return None

    with pytest.raises(ReactorStoppedError):
        handle.spawn(never())
    with pytest.raises(ReactorStoppedError):
        handle.call_soon(print)


def test_stop_cancels_pending_tasks():
    reactor = Reactor("cancel-on-stop")
    handle = reactor.start()
    started = threading.Event()

    async def forever():
        started.set()
        await asyncio.Event().wait()

    future = handle.spawn(forever())
    assert started.wait(5.0)

    reactor.stop(timeout=5.0)

    assert future.cancelled()


def test_context_manager_starts_and_stops():
    with Reactor("scoped") as handle:
        assert handle.is_running

    assert not handle.is_running


def test_handle_creates_threaded_streams(reactor):
    handle = reactor.start()

    stream = handle.stream("ticks")

    assert isinstance(stream, ThreadedEventStream)
    assert stream.name == "ticks"
    assert isinstance(handle.wake_channel(), WakeChannel)
    stream.close()


@pytest.mark.asyncio
async def test_reactor_feeds_consumer_loop(reactor):
    """Work running on the reactor thread delivers into the consumer loop."""
    handle = reactor.start()
    stream = handle.stream("ticks")

    async def produce():
        for i in range(5):
            stream.emit((i, threading.current_thread().name))
            await asyncio.sleep(0.001)

    producer = handle.spawn(produce())
    received = []
    async for tick in stream:
        received.append(tick)
        if len(received) == 5:
            stream.close()

    producer.result(timeout=5.0)
    assert [i for i, _ in received] == [0, 1, 2, 3, 4]
    assert {name for _, name in received} == {"test-reactor"}
