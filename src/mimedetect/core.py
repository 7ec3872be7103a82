from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Protocol, Self

from mimedetect import defaults
from mimedetect.catalog import SignatureCatalog, default_catalog
from mimedetect.errors import EntryDecodeError, EntryNotFoundError
from mimedetect.types import MatchKind, MatchResult, SignatureRecord

if TYPE_CHECKING:
    from mimedetect.containers import ContainerOpener, ZipAccessor

NO_MATCH = MatchResult(MatchKind.NO_MATCH)
PLAIN_TEXT = MatchResult(MatchKind.PLAIN_TEXT, defaults.TXT)

MIMETYPE_ENTRY = "mimetype"
WORDX_PREFIX = "word/"
EXCELX_PREFIX = "xl/"


class ByteSource(Protocol):
    """
    Where the leading bytes come from: a file, a stream, a buffer, a URL.

    - Responsibilities: read_header, read_header_async, open_container.
    - Non-responsibilities: matching (see Matcher).
    """

    def read_header(self: Self, max_size: int = defaults.MAX_HEADER_SIZE) -> bytes: ...
    async def read_header_async(self: Self, max_size: int = defaults.MAX_HEADER_SIZE) -> bytes: ...
    def open_container(self: Self) -> AbstractContextManager[ZipAccessor]: ...


def is_text(buffer: bytes) -> bool:
    """
    Cheap, deliberately imprecise text check: a buffer with no zero byte is text.
    UTF-16/UTF-32 text contains zeros, so it is routed to the signature scan where BOM records live.
    """
    return 0 not in buffer


def matching_count(buffer: bytes, record: SignatureRecord) -> int:
    """
    Number of pattern bytes matched at the record's offset; 0 as soon as one byte mismatches.
    A record matches only when this equals its pattern length. Wildcards (None) always match.
    A window running past the end of the buffer counts as a mismatch.
    """
    offset = record.header_offset
    if record.end > len(buffer):
        return 0
    count = 0
    for i, expected in enumerate(record.pattern):
        if expected is not None and expected != buffer[offset + i]:
            return 0
        count += 1
    return count


def is_full_match(buffer: bytes, record: SignatureRecord) -> bool:
    if record.end > len(buffer):
        return False
    return matching_count(buffer, record) == len(record.pattern)


class Matcher:
    """
    Identifies a buffer against a catalog.

    Stateless apart from the (immutable) catalog, so one instance can serve concurrent callers.
    """

    catalog: SignatureCatalog

    def __init__(self, catalog: SignatureCatalog | None = None) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()

    def __repr__(self) -> str:
        return f"Matcher(catalog={self.catalog!r})"

    def best_match(self, buffer: bytes) -> SignatureRecord | None:
        """First record, in catalog order, whose whole pattern matches. No text check."""
        for record in self.catalog:
            if is_full_match(buffer, record):
                return record
        return None

    def identify(self, buffer: bytes, open_container: ContainerOpener | None = None) -> MatchResult:
        """
        Identify `buffer` (at most MAX_HEADER_SIZE leading bytes of the source).

        `open_container` is called only when the plain ZIP signature matched; it must return a
        context manager yielding a ZipAccessor. Without it, a ZIP match stays plain ZIP.
        Never raises.
        """
        buffer = bytes(buffer)
        if is_text(buffer):
            logging.getLogger(__name__).debug("No zero byte in %d bytes: plain text", len(buffer))
            return PLAIN_TEXT

        candidate = self.best_match(buffer)
        if candidate is None:
            logging.getLogger(__name__).debug("No signature matched %d bytes", len(buffer))
            return NO_MATCH

        logging.getLogger(__name__).debug("Matched %r", candidate)
        if candidate != defaults.ZIP:
            return MatchResult(MatchKind.IDENTIFIED, candidate)
        if open_container is None:
            return MatchResult(MatchKind.IDENTIFIED, candidate)
        return self._disambiguate_container(candidate, open_container)

    def _disambiguate_container(
        self, zip_record: SignatureRecord, open_container: ContainerOpener
    ) -> MatchResult:
        # Accessors may be caller-supplied; any failure to open or enumerate is an unreadable container.
        try:
            with open_container() as accessor:
                try:
                    entries = list(accessor.list_entries())
                except Exception as e:
                    return self._unreadable(zip_record, e)
                record = self._resolve_zip_subtype(zip_record, accessor, entries)
        except Exception as e:
            return self._unreadable(zip_record, e)
        return MatchResult(MatchKind.IDENTIFIED, record)

    @staticmethod
    def _unreadable(zip_record: SignatureRecord, error: Exception) -> MatchResult:
        logging.getLogger(__name__).warning("ZIP signature matched but container is unreadable: %s", error)
        return MatchResult(MatchKind.UNREADABLE_CONTAINER, zip_record, error=str(error))

    @staticmethod
    def _resolve_zip_subtype(
        zip_record: SignatureRecord, accessor: ZipAccessor, entries: list[str]
    ) -> SignatureRecord:
        if any(name.startswith(WORDX_PREFIX) for name in entries):
            return defaults.WORDX
        if any(name.startswith(EXCELX_PREFIX) for name in entries):
            return defaults.EXCELX
        if MIMETYPE_ENTRY not in entries:
            return zip_record

        try:
            mime_type = accessor.read_entry_text(MIMETYPE_ENTRY)
        except (EntryNotFoundError, EntryDecodeError) as e:
            logging.getLogger(__name__).warning("Falling back to plain ZIP: %s", e)
            return zip_record
        except Exception as e:
            logging.getLogger(__name__).warning(
                "Falling back to plain ZIP: reading %r failed: %r", MIMETYPE_ENTRY, e
            )
            return zip_record
        if mime_type == defaults.ODT.mime_type:
            return defaults.ODT
        if mime_type == defaults.ODS.mime_type:
            return defaults.ODS
        return zip_record


def identify(
    buffer: bytes,
    open_container: ContainerOpener | None = None,
    *,
    catalog: SignatureCatalog | None = None,
) -> MatchResult:
    return Matcher(catalog).identify(buffer, open_container)


def identify_source(source: ByteSource, *, catalog: SignatureCatalog | None = None) -> MatchResult:
    """Read the head of `source` and identify it. Read failures propagate as HeaderReadError."""
    return Matcher(catalog).identify(source.read_header(), source.open_container)


async def identify_source_async(
    source: ByteSource, *, catalog: SignatureCatalog | None = None
) -> MatchResult:
    """
    Same as identify_source, but awaits the header read. Matching itself is synchronous and never
    suspends; a ZIP container is still opened synchronously.
    """
    header = await source.read_header_async()
    return Matcher(catalog).identify(header, source.open_container)
