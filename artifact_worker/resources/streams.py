"""File-like adapters over chunked HTTP bodies."""

from __future__ import annotations

import io
from typing import Iterator

from artifact_worker.core.constants import STREAM_CHUNK_SIZE


class ChunkIteratorReader(io.RawIOBase):
    """Expose an iterator of byte chunks as a readable raw stream."""

    def __init__(self, chunks: Iterator[bytes]) -> None:
        self._chunks = chunks
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


def open_chunk_reader(chunks: Iterator[bytes], buffer_size: int = STREAM_CHUNK_SIZE) -> io.BufferedReader:
    return io.BufferedReader(ChunkIteratorReader(chunks), buffer_size=buffer_size)


def iter_stream(source, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield ``source.read(chunk_size)`` until EOF."""
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            return
        yield bytes(chunk)
