"""Tessel - Reactive event-stream core for Model-View-Update UI applications."""

from tessel.core import (
    Component,
    ComponentStats,
    ConcurrentPollError,
    Context,
    ContextConfig,
    Link,
    Message,
    Observer,
    Reactor,
    ReactorHandle,
    ReactorStoppedError,
    ReentrantEmitError,
    StreamCloseError,
    StreamInvariantError,
    Update,
    UpdateFailureMode,
    emitter,
    emitter_from,
    emitter_returning,
    forward,
    relay,
)
from tessel.streams import (
    END_OF_STREAM,
    PENDING,
    EventStream,
    Poll,
    PollState,
    ThreadedEventStream,
    WakeChannel,
)

__version__ = "0.1.0"

__all__ = [
    # Streams
    "EventStream",
    "ThreadedEventStream",
    "WakeChannel",
    "Poll",
    "PollState",
    "PENDING",
    "END_OF_STREAM",
    # Wiring
    "Observer",
    "forward",
    "relay",
    "emitter",
    "emitter_from",
    "emitter_returning",
    # Update loop
    "Message",
    "Update",
    "Link",
    "Component",
    "ComponentStats",
    "UpdateFailureMode",
    "Context",
    "ContextConfig",
    # Reactor
    "Reactor",
    "ReactorHandle",
    # Failure handling
    "StreamCloseError",
    "StreamInvariantError",
    "ReentrantEmitError",
    "ConcurrentPollError",
    "ReactorStoppedError",
    # Meta
    "__version__",
]
