from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

SignaturePattern = tuple[Optional[int], ...]
"""
Ordered byte pattern. An `int` (0..255) must match the buffer byte exactly; `None` is a wildcard
that matches any byte.
"""


def pattern_from_hex(text: str) -> SignaturePattern:
    """
    Build a pattern from space-separated hex tokens, where `??` is a wildcard.
    >>> pattern_from_hex("47 49 46 38 ?? 61")
    (71, 73, 70, 56, None, 97)
    """
    return tuple(None if tok == "??" else int(tok, 16) for tok in text.split())


def pattern_to_hex(pattern: SignaturePattern) -> str:
    return " ".join("??" if b is None else f"{b:02X}" for b in pattern)


@dataclass(frozen=True, slots=True)
class SignatureRecord:
    pattern: SignaturePattern
    header_offset: int = 0
    # Possibly a comma-separated list, e.g. "gz, tgz". Kept verbatim for display.
    extension: str = ""
    mime_type: str = ""

    @property
    def extensions(self) -> tuple[str, ...]:
        """The extension field split on commas, stripped and lower-cased, empties dropped."""
        return tuple(ext for part in self.extension.split(",") if (ext := part.strip().lower()))

    @property
    def end(self) -> int:
        """Exclusive end of the window this record inspects."""
        return self.header_offset + len(self.pattern)

    def validate(self) -> None:
        if not isinstance(self.header_offset, int) or isinstance(self.header_offset, bool):
            raise ValueError(f"header_offset must be an int, got {self.header_offset!r}")
        if self.header_offset < 0:
            raise ValueError(f"header_offset must be non-negative, got {self.header_offset}")
        for index, value in enumerate(self.pattern):
            if value is None:
                continue
            if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 0xFF:
                raise ValueError(
                    f"Pattern byte #{index} of {self.extension or '<no extension>'!r} must be "
                    f"None or an int in 0..255, got {value!r}"
                )
        if not isinstance(self.extension, str) or not isinstance(self.mime_type, str):
            raise ValueError(f"extension and mime_type must be strings: {self!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern": [None if b is None else f"{b:02X}" for b in self.pattern],
            "header_offset": self.header_offset,
            "extension": self.extension,
            "mime_type": self.mime_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignatureRecord:
        raw_pattern = data.get("pattern", [])
        pattern = tuple(
            None if b is None else (int(b, 16) if isinstance(b, str) else b) for b in raw_pattern
        )
        return cls(
            pattern=pattern,
            header_offset=data.get("header_offset", 0),
            extension=data.get("extension", ""),
            mime_type=data.get("mime_type", ""),
        )

    def __repr__(self) -> str:
        return (
            f"SignatureRecord({pattern_to_hex(self.pattern)!r}, header_offset={self.header_offset}, "
            f"extension={self.extension!r}, mime_type={self.mime_type!r})"
        )


class MatchKind(Enum):
    NO_MATCH = auto()
    PLAIN_TEXT = auto()
    IDENTIFIED = auto()
    UNREADABLE_CONTAINER = auto()


@dataclass(frozen=True, slots=True)
class MatchResult:
    """
    Outcome of a single lookup. Exactly one kind per call:

    - NO_MATCH: nothing in the catalog matched. Not an error.
    - PLAIN_TEXT: the buffer contains no zero byte. `record` is the TXT record.
    - IDENTIFIED: `record` is the matched record, or a synthetic docx/xlsx/odt/ods record.
    - UNREADABLE_CONTAINER: the ZIP signature matched but its entries could not be listed.
      `record` is the plain ZIP record so callers may fall back to it; `error` says why.
    """

    kind: MatchKind
    record: SignatureRecord | None = None
    error: str | None = None

    @property
    def extension(self) -> str:
        return self.record.extension if self.record is not None else ""

    @property
    def mime_type(self) -> str:
        return self.record.mime_type if self.record is not None else ""

    @property
    def identified(self) -> bool:
        return self.kind is MatchKind.IDENTIFIED

    def __bool__(self) -> bool:
        return self.kind is not MatchKind.NO_MATCH
