"""Stream protocol and poll results.

Both stream flavours (local and threaded) satisfy the Stream protocol, so an
observer may forward from one flavour into the other.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class PollState(Enum):
    """Outcome of a single poll."""

    READY = "ready"
    PENDING = "pending"
    END = "end"


@dataclass(frozen=True)
class Poll:
    """Result of polling a stream.

    Attributes:
        state: READY when ``message`` holds the next message, PENDING when the
            consumer was parked, END once the stream is closed.
        message: The delivered message (READY only).
    """

    state: PollState
    message: Any = None

    @classmethod
    def ready(cls, message: Any) -> "Poll":
        return cls(PollState.READY, message)

    @property
    def is_ready(self) -> bool:
        return self.state is PollState.READY

    @property
    def is_pending(self) -> bool:
        return self.state is PollState.PENDING

    @property
    def is_end(self) -> bool:
        return self.state is PollState.END


PENDING = Poll(PollState.PENDING)
END_OF_STREAM = Poll(PollState.END)


class Stream(Protocol):
    """Protocol shared by every stream flavour.

    Streams are responsible for:
    - Buffering emitted messages in FIFO order (emit)
    - Forwarding messages to observers synchronously (observe)
    - Suppressing emissions during lock windows (lock/unlock)
    - Terminating delivery (close)
    """

    def emit(self, message: Any) -> None:
        """Deliver a message to observers and the mailbox."""
        ...

    def observe(
        self,
        converter: Callable[[Any], Any],
        target: "Stream",
        *,
        when: Callable[[Any], bool] | None = None,
    ) -> None:
        """Forward every later message to ``target`` through ``converter``."""
        ...

    def lock(self) -> None: ...

    def unlock(self) -> None: ...

    def close(self) -> None: ...

    @property
    def is_locked(self) -> bool: ...

    @property
    def is_closed(self) -> bool: ...
