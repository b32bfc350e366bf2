"""Bounded in-memory byte pipe connecting a producer thread to a consumer thread."""

from __future__ import annotations

import io
import threading
from collections import deque

from artifact_worker.core.constants import PIPE_CAPACITY
from artifact_worker.core.exceptions import PipeClosedError


class _PipeState:
    """Buffer and close flags shared by both ends, guarded by one condition."""

    def __init__(self, capacity: int) -> None:
        self.capacity = max(1, int(capacity))
        self.chunks: deque[bytes] = deque()
        self.buffered = 0
        self.cond = threading.Condition()
        self.writer_closed = False
        self.writer_error: BaseException | None = None
        self.reader_closed = False
        self.reader_error: BaseException | None = None

    def write(self, data: bytes) -> int:
        with self.cond:
            if self.writer_closed:
                raise PipeClosedError("write to closed pipe")
            # an oversized chunk is accepted into an empty buffer
            while not self.reader_closed and self.buffered and self.buffered + len(data) > self.capacity:
                self.cond.wait()
            if self.reader_closed:
                raise self.reader_error or PipeClosedError("read end of pipe is closed")
            if data:
                self.chunks.append(data)
                self.buffered += len(data)
                self.cond.notify_all()
            return len(data)

    def readinto(self, buffer) -> int:
        with self.cond:
            if self.reader_closed:
                raise PipeClosedError("read from closed pipe")
            while not self.chunks and not self.writer_closed:
                self.cond.wait()
            if self.writer_error is not None:
                raise self.writer_error
            if not self.chunks:
                return 0
            head = self.chunks[0]
            size = min(len(buffer), len(head))
            buffer[:size] = head[:size]
            if size == len(head):
                self.chunks.popleft()
            else:
                self.chunks[0] = head[size:]
            self.buffered -= size
            self.cond.notify_all()
            return size

    def close_writer(self, error: BaseException | None) -> None:
        with self.cond:
            if self.writer_closed:
                return
            self.writer_closed = True
            if error is not None:
                self.writer_error = error
                self.chunks.clear()
                self.buffered = 0
            self.cond.notify_all()

    def close_reader(self, error: BaseException | None) -> None:
        with self.cond:
            if self.reader_closed:
                return
            self.reader_closed = True
            self.reader_error = error
            self.chunks.clear()
            self.buffered = 0
            self.cond.notify_all()


class PipeReader(io.RawIOBase):
    """Read end of a :class:`StreamPipe`."""

    def __init__(self, state: _PipeState) -> None:
        self._state = state

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        return self._state.readinto(buffer)

    def close_with_error(self, error: BaseException | None) -> None:
        """Close the read end; pending and later writes raise ``error``."""
        self._state.close_reader(error)
        super().close()

    def close(self) -> None:
        self.close_with_error(None)


class PipeWriter(io.RawIOBase):
    """Write end of a :class:`StreamPipe`."""

    def __init__(self, state: _PipeState) -> None:
        self._state = state

    def writable(self) -> bool:
        return True

    @property
    def reader_error(self) -> BaseException | None:
        """Error the read end was closed with, if any."""
        return self._state.reader_error

    def write(self, data) -> int:  # type: ignore[override]
        return self._state.write(bytes(data))

    def close_with_error(self, error: BaseException | None) -> None:
        """Close the write end; the reader sees EOF, or ``error`` when given."""
        self._state.close_writer(error)
        super().close()

    def close(self) -> None:
        self.close_with_error(None)


class StreamPipe:
    """A unidirectional pipe with ``reader`` and ``writer`` ends.

    Writes block while ``capacity`` bytes are buffered and the reader is still
    open. Closing the reader releases a blocked writer, so a consumer that gives
    up never leaves the producer hanging.
    """

    def __init__(self, capacity: int = PIPE_CAPACITY) -> None:
        state = _PipeState(capacity)
        self.reader = PipeReader(state)
        self.writer = PipeWriter(state)

    def __iter__(self):
        return iter((self.reader, self.writer))
