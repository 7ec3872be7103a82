"""
Saving and loading signature catalogs as JSON.

Document shape:

    {"version": 1,
     "signatures": [{"pattern": ["25", "50", null, "46"], "header_offset": 0,
                     "extension": "pdf", "mime_type": "application/pdf"}, ...]}

Pattern bytes are two-digit hex strings; `null` is a wildcard. Loading appends to an existing catalog,
so loaded records never outrank the ones already there.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable

from mimedetect.catalog import SignatureCatalog
from mimedetect.errors import CatalogFormatError
from mimedetect.types import SignatureRecord

FORMAT_VERSION = 1


def dump_catalog(catalog: Iterable[SignatureRecord]) -> dict[str, Any]:
    return {"version": FORMAT_VERSION, "signatures": [record.to_dict() for record in catalog]}


def save_catalog(catalog: Iterable[SignatureRecord], path: str | os.PathLike[str]) -> None:
    document = dump_catalog(catalog)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
        f.write("\n")


def parse_records(document: Any, *, source: str = "<document>") -> list[SignatureRecord]:
    if not isinstance(document, dict) or not isinstance(document.get("signatures"), list):
        raise CatalogFormatError(f"{source}: expected an object with a 'signatures' list")
    version = document.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise CatalogFormatError(f"{source}: unsupported catalog version {version!r}")

    records: list[SignatureRecord] = []
    for index, raw in enumerate(document["signatures"]):
        if not isinstance(raw, dict) or not isinstance(raw.get("pattern", []), list):
            raise CatalogFormatError(f"{source}: signature #{index} is not a valid object")
        try:
            record = SignatureRecord.from_dict(raw)
            record.validate()
        except (TypeError, ValueError) as e:
            raise CatalogFormatError(f"{source}: signature #{index}: {e}") from e
        records.append(record)
    return records


def load_records(path: str | os.PathLike[str]) -> list[SignatureRecord]:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogFormatError(f"Could not read catalog {str(path)!r}: {e}") from e
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise CatalogFormatError(f"{path}: invalid JSON: {e}") from e
    records = parse_records(document, source=str(path))
    logging.getLogger(__name__).debug("Loaded %d signatures from %s", len(records), path)
    return records


def load_catalog(
    path: str | os.PathLike[str], base: SignatureCatalog | None = None
) -> SignatureCatalog:
    """Append the records stored at `path` to `base` (the built-in catalog when omitted)."""
    if base is None:
        base = SignatureCatalog.default()
    return base.extend(load_records(path))
