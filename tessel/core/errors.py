"""Exception types shared by the stream flavours and the reactor."""


class StreamCloseError(Exception):
    """Raised when tearing down a stream's external channel fails.

    The stream is terminated regardless; the failure is only reported.

    Attributes:
        original: The I/O error raised by the teardown.
    """

    def __init__(self, original: Exception):
        self.original = original
        super().__init__(str(original))


class StreamInvariantError(RuntimeError):
    """Base class for broken single-consumer / single-emitter assumptions.

    These indicate programmer errors and are not meant to be recovered from.
    """


class ReentrantEmitError(StreamInvariantError):
    """Raised when emit() re-enters a stream from one of its own observers."""

    def __init__(self, stream_name: str):
        self.stream_name = stream_name
        super().__init__(
            f"emit() re-entered on stream {stream_name!r} while it was "
            f"notifying its observers (observer cycle?)"
        )


class ConcurrentPollError(StreamInvariantError):
    """Raised when a second consumer polls a stream with a parked consumer."""

    def __init__(self, stream_name: str):
        self.stream_name = stream_name
        super().__init__(f"stream {stream_name!r} already has a parked consumer")


class ReactorStoppedError(RuntimeError):
    """Raised when scheduling work onto a reactor that is not running."""
