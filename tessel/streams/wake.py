"""Cross-thread notification channel.

A non-blocking socket pair whose read end is a readiness source for whatever
I/O multiplexing the consumer already runs: ``selectors``, ``loop.add_reader``
or a toolkit's fd watch. Producers call notify(); the consumer waits for the
read end to become readable, calls drain(), then polls its stream.

One byte is written per pending batch: notifications between two drains are
coalesced.
"""

import socket
import threading


class WakeChannel:
    """Self-pipe style wake primitive shared by a producer and a consumer."""

    def __init__(self) -> None:
        self._reader, self._writer = socket.socketpair()
        self._reader.setblocking(False)
        self._writer.setblocking(False)
        self._lock = threading.Lock()
        self._signalled = False
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("signalled" if self._signalled else "idle")
        return f"<WakeChannel {state}>"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def signalled(self) -> bool:
        return self._signalled

    def fileno(self) -> int:
        """Return the file descriptor to watch for readability."""
        return self._reader.fileno()

    def notify(self) -> bool:
        """Wake the consumer.

        Returns:
            True if a byte was written, False if the notification was
            coalesced into a pending one or the channel is closed.
        """
        with self._lock:
            if self._closed or self._signalled:
                return False
            self._signalled = True
            try:
                self._writer.send(b"\x00")
            except (BlockingIOError, InterruptedError):
                # Buffer full: the reader is already readable.
                pass
            return True

    def drain(self) -> None:
        """Consume pending notifications and re-arm the channel.

        Once the channel is closed, draining releases the read end; the
        consumer should stop watching fileno() before calling it.
        """
        with self._lock:
            if self._closed:
                self._release_reader()
                return
            self._signalled = False
            while True:
                try:
                    if not self._reader.recv(4096):
                        break
                except (BlockingIOError, InterruptedError):
                    break

    def close(self) -> None:
        """Close the write end of the channel.

        The read end then reports EOF and stays readable, so a consumer
        parked on fileno() wakes up and sees the end of its stream. The read
        end is released by the next drain().

        The channel is marked closed even if closing the socket fails.

        Raises:
            OSError: If closing the write end failed.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._close_writer()

    def _close_writer(self) -> None:
        self._writer.close()

    def _release_reader(self) -> None:
        if self._reader.fileno() != -1:
            self._reader.close()
