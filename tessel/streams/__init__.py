"""Stream implementations for message delivery."""

from tessel.streams.base import END_OF_STREAM, PENDING, Poll, PollState, Stream
from tessel.streams.local import EventStream
from tessel.streams.threaded import ThreadedEventStream
from tessel.streams.wake import WakeChannel

__all__ = [
    "END_OF_STREAM",
    "PENDING",
    "Poll",
    "PollState",
    "Stream",
    "EventStream",
    "ThreadedEventStream",
    "WakeChannel",
]
