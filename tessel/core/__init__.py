"""Core components for the Tessel update loop.

This module exposes the primary types, constants, and utilities:

Types:
    Message: Immutable, validated message base model.
    Observer: Registered (converter, target) forwarding rule.
    Update: Abstract base class for component logic.
    Link: A component's handle onto its stream and context.
    Component: A running component with its update loop.
    ComponentStats: Statistics dataclass from an update loop.
    Context: Explicit application context creating streams and components.
    ContextConfig: Validated settings for a Context.
    Reactor: Background thread running its own asyncio loop.
    ReactorHandle: Thread-safe handle onto a running reactor.

Wiring:
    forward, relay: Cross-component observer helpers.
    emitter, emitter_from, emitter_returning: Toolkit callback glue.

Failure Handling:
    UpdateFailureMode: Enum for update() failure strategies (LOG, RAISE).
    StreamCloseError: Raised when a stream's channel teardown fails.
    StreamInvariantError: Base for single-consumer invariant violations.
    ReentrantEmitError: emit() re-entered from one of the stream's observers.
    ConcurrentPollError: A second consumer polled a stream.
    ReactorStoppedError: Work scheduled on a stopped reactor.

Constants:
    DEFAULT_SLOW_UPDATE_MS: Slow update warning threshold (200ms).
    DEFAULT_PREVIEW_CHARS: Maximum message label length in logs (100).
"""

from tessel.core.component import (
    DEFAULT_SLOW_UPDATE_MS,
    Component,
    ComponentStats,
    Link,
    Update,
    UpdateFailureMode,
)
from tessel.core.connect import emitter, emitter_from, emitter_returning
from tessel.core.context import Context, ContextConfig
from tessel.core.errors import (
    ConcurrentPollError,
    ReactorStoppedError,
    ReentrantEmitError,
    StreamCloseError,
    StreamInvariantError,
)
from tessel.core.message import DEFAULT_PREVIEW_CHARS, Message, display_variant
from tessel.core.observer import Observer, forward, relay
from tessel.core.reactor import Reactor, ReactorHandle

__all__ = [
    "Message",
    "display_variant",
    "DEFAULT_PREVIEW_CHARS",
    "Observer",
    "forward",
    "relay",
    "emitter",
    "emitter_from",
    "emitter_returning",
    "Update",
    "Link",
    "Component",
    "ComponentStats",
    "UpdateFailureMode",
    "DEFAULT_SLOW_UPDATE_MS",
    "Context",
    "ContextConfig",
    "Reactor",
    "ReactorHandle",
    "StreamCloseError",
    "StreamInvariantError",
    "ReentrantEmitError",
    "ConcurrentPollError",
    "ReactorStoppedError",
]
