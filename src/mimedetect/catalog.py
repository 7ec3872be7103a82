from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Iterator, Sequence, overload

from mimedetect.defaults import DEFAULT_SIGNATURES
from mimedetect.types import SignatureRecord


class SignatureCatalog(Sequence[SignatureRecord]):
    """
    Ordered, immutable collection of signature records.

    Order is priority: the matcher stops at the first record that fully matches, so a record placed
    earlier wins over any later record that would match the same bytes.
    Records are validated once, here; the matcher never re-checks them.
    """

    __slots__ = ("_records",)

    _records: tuple[SignatureRecord, ...]

    def __init__(self, records: Iterable[SignatureRecord] = ()) -> None:
        records = tuple(records)
        for record in records:
            if not isinstance(record, SignatureRecord):
                raise ValueError(f"Catalog entries must be SignatureRecord, got {type(record).__name__}")
            record.validate()
        self._records = records

    @classmethod
    def default(cls) -> SignatureCatalog:
        """The built-in catalog."""
        return cls(DEFAULT_SIGNATURES)

    def extend(self, records: Iterable[SignatureRecord]) -> SignatureCatalog:
        """
        Return a new catalog with `records` appended after the existing ones.
        Existing records keep their priority over the appended ones. `self` is left untouched.
        """
        return type(self)((*self._records, *records))

    def by_extensions(self, csv: str) -> list[SignatureRecord]:
        """
        Records (in catalog order) listing at least one of the comma-separated extensions in `csv`.
        Case-insensitive; spaces are ignored.
        >>> [r.mime_type for r in SignatureCatalog.default().by_extensions("PDF, gif")]
        ['application/pdf', 'image/gif']
        """
        wanted = {ext for part in csv.replace(" ", "").split(",") if (ext := part.lower())}
        if not wanted:
            return []
        return [record for record in self._records if wanted.intersection(record.extensions)]

    @overload
    def __getitem__(self, index: int) -> SignatureRecord: ...
    @overload
    def __getitem__(self, index: slice) -> tuple[SignatureRecord, ...]: ...
    def __getitem__(self, index):
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SignatureRecord]:
        return iter(self._records)

    def __contains__(self, record: object) -> bool:
        return record in self._records

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignatureCatalog):
            return NotImplemented
        return self._records == other._records

    def __hash__(self) -> int:
        return hash(self._records)

    def __repr__(self) -> str:
        return f"SignatureCatalog({len(self._records)} records)"


@lru_cache(maxsize=1)
def default_catalog() -> SignatureCatalog:
    """Process-wide built-in catalog. Safe to share: the catalog is immutable."""
    return SignatureCatalog.default()
