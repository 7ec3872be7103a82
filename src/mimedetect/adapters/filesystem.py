from __future__ import annotations

import asyncio
import os
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Iterable

from mimedetect.containers import ZipFileAccessor
from mimedetect.core import ByteSource
from mimedetect.defaults import DEFAULT_EXCLUSIONS, MAX_HEADER_SIZE
from mimedetect.errors import HeaderReadError
from mimedetect.filters import GitIgnoreEngine, is_hidden

if TYPE_CHECKING:
    from mimedetect.cli_common import Context


class FileSystemSource(ByteSource):
    """
    A single local file.
    """

    path: Path

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"FileSystemSource(path={str(self.path)!r})"

    def read_header(self, max_size: int = MAX_HEADER_SIZE) -> bytes:
        """At most `max_size` leading bytes. Shorter files give shorter buffers; no padding."""
        try:
            with open(self.path, "rb") as f:
                return f.read(max_size)
        except OSError as e:
            raise HeaderReadError(f"Could not read file {str(self.path)!r}: {e}") from e

    async def read_header_async(self, max_size: int = MAX_HEADER_SIZE) -> bytes:
        return await asyncio.to_thread(self.read_header, max_size)

    def open_container(self) -> ZipFileAccessor:
        return ZipFileAccessor(self.path)


class FileSystemWalker:
    """
    Expands CLI path tokens into files.

    Directories are traversed depth-first: each directory yields its own files first, then descends
    into its sub-directories; both are sorted case-insensitively. Symbolic links are not followed.
    Hidden entries and ignored paths are pruned unless configured otherwise. An explicit file token
    is always yielded.
    """

    anchor: Path
    exclusions: list[str]
    include_hidden: bool
    no_ignore: bool

    def __init__(self, anchor=None) -> None:
        self.anchor = Path(anchor or Path.cwd()).resolve()
        self.exclusions = list(DEFAULT_EXCLUSIONS)
        self.include_hidden = False
        self.no_ignore = False

    def __repr__(self) -> str:
        return f"FileSystemWalker(anchor={self.anchor!r})"

    def configure(self, ctx: Context) -> None:
        self.exclusions = list(ctx.exclusions)
        self.include_hidden = ctx.include_hidden
        self.no_ignore = ctx.no_ignore

    def resolve(self, path) -> Path:
        """
        Resolve the path relative to the anchor to its absolute form.

        os.path.realpath would resolve symlinks, which is undesired, and .absolute() does not resolve
        '..' segments, which is desired, so we use normpath+absolute to resolve both.
        """
        return Path(os.path.normpath((self.anchor / path).absolute()))

    def walk(self, token: str) -> Iterable[Path]:
        start = self.resolve(token)
        if start.is_file():
            yield start
            return
        if not start.is_dir():
            raise HeaderReadError(f"No such file or directory: {token!r}")

        engine = GitIgnoreEngine(start, extra=self.exclusions, use_vcs_ignores=not self.no_ignore)
        stack: list[Path] = [start]
        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as it:
                    dirs: list[os.DirEntry] = []
                    files: list[os.DirEntry] = []
                    for entry in it:
                        try:
                            if entry.is_dir(follow_symlinks=False):
                                dirs.append(entry)
                            elif entry.is_file(follow_symlinks=False):
                                files.append(entry)
                        except PermissionError:
                            continue
            except (FileNotFoundError, NotADirectoryError, PermissionError):
                continue

            dirs.sort(key=lambda e: e.name.casefold())
            files.sort(key=lambda e: e.name.casefold())

            # Reverse so the stack pops directories in sorted order
            for d in reversed(dirs):
                path = Path(d.path)
                if self._skip(start, path, is_dir=True, engine=engine):
                    continue
                stack.append(path)

            for f in files:
                path = Path(f.path)
                if not self._skip(start, path, is_dir=False, engine=engine):
                    yield path

    def _skip(self, root: Path, path: Path, *, is_dir: bool, engine: GitIgnoreEngine) -> bool:
        rel = PurePosixPath(path.relative_to(root).as_posix())
        if not self.include_hidden and is_hidden(rel):
            return True
        return engine.is_ignored(path, is_dir=is_dir)
