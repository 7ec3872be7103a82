from __future__ import annotations

import io
import zipfile
import zlib
from contextlib import AbstractContextManager
from pathlib import Path
from typing import IO, Callable, Protocol, Self, Sequence

from mimedetect.errors import EntryDecodeError, EntryNotFoundError, UnreadableContainerError


class ZipAccessor(Protocol):
    """
    Read access to the entries of a ZIP-family archive.

    - Responsibilities: enumerate entry names, read one entry's full text.
    - Non-responsibilities: deciding what the archive is (that's the matcher's job).
    """

    def list_entries(self: Self) -> Sequence[str]: ...
    def read_entry_text(self: Self, name: str) -> str: ...
    def close(self: Self) -> None: ...
    def __enter__(self: Self) -> Self: ...
    def __exit__(self, *exc_info) -> None: ...


ContainerOpener = Callable[[], AbstractContextManager[ZipAccessor]]
"""Zero-argument factory the matcher calls only when the plain ZIP signature matched."""


class ZipFileAccessor(ZipAccessor):
    """
    ZipAccessor over `zipfile.ZipFile`.

    `source` may be a path or a seekable binary file object. Opening fails with
    UnreadableContainerError for corrupt or truncated archives.
    When given a file object, closing the accessor does not close the file object.
    """

    def __init__(self, source: str | Path | IO[bytes], *, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        try:
            if not isinstance(source, (str, Path)) and source.seekable():
                source.seek(0)
            self._zip = zipfile.ZipFile(source)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError, EOFError) as e:
            raise UnreadableContainerError(f"Not a readable ZIP archive: {e}") from e

    @classmethod
    def from_bytes(cls, data: bytes, *, encoding: str = "utf-8") -> ZipFileAccessor:
        return cls(io.BytesIO(data), encoding=encoding)

    def list_entries(self) -> list[str]:
        try:
            return [info.filename for info in self._zip.infolist()]
        except (ValueError, OSError) as e:
            raise UnreadableContainerError(f"Could not enumerate entries: {e}") from e

    def read_entry_text(self, name: str) -> str:
        try:
            data = self._zip.read(name)
        except KeyError as e:
            raise EntryNotFoundError(name) from e
        except (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, OSError, EOFError) as e:
            # Bad CRC, corrupt deflate stream, unsupported compression, encrypted entry...
            raise EntryDecodeError(name, str(e)) from e
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise EntryDecodeError(name, str(e)) from e

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ZipFileAccessor({self._zip.filename or '<stream>'!r})"
