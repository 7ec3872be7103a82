from __future__ import annotations

import asyncio
import io
from contextlib import contextmanager
from typing import IO, Iterator

from mimedetect.containers import ZipFileAccessor
from mimedetect.core import ByteSource
from mimedetect.defaults import MAX_HEADER_SIZE
from mimedetect.errors import HeaderReadError


class BufferSource(ByteSource):
    """Pre-loaded bytes. The header is a prefix; a buffer shorter than max_size is not padded."""

    data: bytes

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self.data = bytes(data)

    def __repr__(self) -> str:
        return f"BufferSource({len(self.data)} bytes)"

    def read_header(self, max_size: int = MAX_HEADER_SIZE) -> bytes:
        return self.data[:max_size]

    async def read_header_async(self, max_size: int = MAX_HEADER_SIZE) -> bytes:
        return self.read_header(max_size)

    def open_container(self) -> ZipFileAccessor:
        return ZipFileAccessor.from_bytes(self.data)


class StreamSource(ByteSource):
    """
    A binary stream owned by the caller. It is never closed here.

    Reading rewinds a seekable stream to the start first. Opening the container reuses the same
    stream and restores its position afterwards.
    """

    stream: IO[bytes]

    def __init__(self, stream: IO[bytes]) -> None:
        self.stream = stream
        # Bytes already consumed from a non-seekable stream, replayed when opening the container.
        self._consumed = b""

    def __repr__(self) -> str:
        return f"StreamSource({self.stream!r})"

    def read_header(self, max_size: int = MAX_HEADER_SIZE) -> bytes:
        try:
            readable = self.stream.readable()
            if readable and not self.stream.seekable():
                # _consumed is always the stream's prefix; only read what it is missing.
                if len(self._consumed) < max_size:
                    self._consumed += _read_up_to(self.stream, max_size - len(self._consumed))
                return self._consumed[:max_size]
            if readable and self.stream.tell() > 0:
                self.stream.seek(0)
            header = _read_up_to(self.stream, max_size) if readable else b""
        except (OSError, ValueError) as e:
            # ValueError: I/O operation on closed file
            raise HeaderReadError(f"Could not read stream: {e}") from e
        if not readable:
            raise HeaderReadError("Could not read stream: not readable")
        return header

    async def read_header_async(self, max_size: int = MAX_HEADER_SIZE) -> bytes:
        return await asyncio.to_thread(self.read_header, max_size)

    @contextmanager
    def open_container(self) -> Iterator[ZipFileAccessor]:
        stream = self.stream
        if not stream.seekable():
            # zipfile needs random access; buffer the rest of the stream.
            self._consumed += stream.read()
            stream = io.BytesIO(self._consumed)
        position = stream.tell()
        try:
            with ZipFileAccessor(stream) as accessor:
                yield accessor
        finally:
            if stream is self.stream:
                stream.seek(position)


def _read_up_to(stream: IO[bytes], size: int) -> bytes:
    """read() may return short counts on pipes and sockets; keep going until EOF or `size`."""
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
