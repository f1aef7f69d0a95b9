"""Tests for the cross-thread WakeChannel."""

import selectors
import threading

import pytest

from tessel.streams.wake import WakeChannel


class FailingWakeChannel(WakeChannel):
    """Channel whose socket teardown fails."""

    def _close_writer(self) -> None:
        super()._close_writer()
        raise OSError("teardown failed")


def is_readable(channel: WakeChannel, timeout: float = 0.0) -> bool:
    with selectors.DefaultSelector() as selector:
        selector.register(channel.fileno(), selectors.EVENT_READ)
        return bool(selector.select(timeout))


def test_fresh_channel_is_not_readable():
    channel = WakeChannel()
    try:
        assert not is_readable(channel)
        assert not channel.signalled
    finally:
        channel.close()


def test_notify_makes_channel_readable():
    channel = WakeChannel()
    try:
        assert channel.notify() is True
        assert is_readable(channel, timeout=1.0)
    finally:
        channel.close()


def test_notifications_coalesce_until_drained():
    channel = WakeChannel()
    try:
        assert channel.notify() is True
        assert channel.notify() is False
        assert channel.notify() is False

        channel.drain()

        assert not is_readable(channel)
        assert channel.notify() is True
    finally:
        channel.close()


def test_notify_from_another_thread_wakes_selector():
    channel = WakeChannel()
    try:
        thread = threading.Thread(target=channel.notify)
        thread.start()
        assert is_readable(channel, timeout=2.0)
        thread.join()
    finally:
        channel.close()


def test_close_is_idempotent():
    channel = WakeChannel()

    channel.close()
    channel.close()

    assert channel.closed
    assert channel.notify() is False
    channel.drain()


def test_close_failure_surfaces_and_marks_closed():
    channel = FailingWakeChannel()

    with pytest.raises(OSError, match="teardown failed"):
        channel.close()

    assert channel.closed
    # Not retried
    channel.close()


def test_close_leaves_read_end_readable_until_drained():
    channel = WakeChannel()

    channel.close()

    assert is_readable(channel, timeout=1.0)
    channel.drain()
    assert channel.fileno() == -1
    # Draining a released channel is a no-op
    channel.drain()


def test_close_from_another_thread_wakes_parked_selector():
    channel = WakeChannel()
    fd = channel.fileno()
    with selectors.DefaultSelector() as selector:
        selector.register(fd, selectors.EVENT_READ)
        closer = threading.Timer(0.05, channel.close)
        closer.start()
        ready = selector.select(2.0)
        closer.join()
        selector.unregister(fd)
    channel.drain()

    assert ready
