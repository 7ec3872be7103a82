from __future__ import annotations


class MimeDetectError(Exception):
    """Base class for every error raised by mimedetect."""


class UnreadableContainerError(MimeDetectError, OSError):
    """The ZIP signature matched but the archive could not be opened or enumerated."""


class EntryNotFoundError(MimeDetectError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"No entry named {self.name!r} in container"


class EntryDecodeError(MimeDetectError, ValueError):
    def __init__(self, name: str, reason: str = "") -> None:
        super().__init__(name, reason)
        self.name = name
        self.reason = reason

    def __str__(self) -> str:
        suffix = f": {self.reason}" if self.reason else ""
        return f"Could not decode entry {self.name!r} as text{suffix}"


class HeaderReadError(MimeDetectError, OSError):
    """A byte source could not produce its leading bytes (missing file, closed stream, HTTP error...)."""


class CatalogFormatError(MimeDetectError, ValueError):
    """A persisted catalog document is malformed."""
