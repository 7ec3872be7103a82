from __future__ import annotations

import json
from pathlib import Path

import pytest

from mimedetect import defaults
from mimedetect.catalog import SignatureCatalog
from mimedetect.core import identify
from mimedetect.errors import CatalogFormatError
from mimedetect.persistence import (
    FORMAT_VERSION,
    dump_catalog,
    load_catalog,
    load_records,
    parse_records,
    save_catalog,
)
from mimedetect.types import SignatureRecord, pattern_from_hex
from tests.utils import write_file

CUSTOM = SignatureRecord(pattern_from_hex("CA FE 00 01"), 0, "mdt", "application/x-made-up")


def test_saved_document_shape(md_tmp_path: Path):
    path = md_tmp_path / "catalog.json"
    save_catalog([defaults.GIF, defaults.WORD], path)
    document = json.loads(path.read_text(encoding="utf-8"))

    assert document["version"] == FORMAT_VERSION
    assert document["signatures"][0] == {
        "pattern": ["47", "49", "46", "38", None, "61"],
        "header_offset": 0,
        "extension": "gif",
        "mime_type": "image/gif",
    }
    assert document["signatures"][1]["header_offset"] == 512


def test_saved_default_catalog_loads_back_identically(md_tmp_path: Path):
    path = md_tmp_path / "catalog.json"
    save_catalog(SignatureCatalog.default(), path)
    assert tuple(load_records(path)) == defaults.DEFAULT_SIGNATURES


def test_load_appends_after_base(md_tmp_path: Path):
    path = md_tmp_path / "custom.json"
    save_catalog([CUSTOM], path)
    catalog = load_catalog(path)

    assert len(catalog) == len(defaults.DEFAULT_SIGNATURES) + 1
    assert catalog[-1] == CUSTOM
    assert identify(b"\xca\xfe\x00\x01\x02", catalog=catalog).record == CUSTOM


def test_load_onto_explicit_base(md_tmp_path: Path):
    path = md_tmp_path / "custom.json"
    save_catalog([CUSTOM], path)
    catalog = load_catalog(path, base=SignatureCatalog([defaults.PDF]))
    assert list(catalog) == [defaults.PDF, CUSTOM]


def test_loaded_records_never_outrank_builtins(md_tmp_path: Path):
    impostor = SignatureRecord(defaults.PNG.pattern, 0, "fake", "application/x-fake")
    path = md_tmp_path / "impostor.json"
    save_catalog([impostor], path)
    catalog = load_catalog(path)
    assert identify(b"\x89PNG\r\n\x1a\n\x00", catalog=catalog).record == defaults.PNG


def test_integer_pattern_bytes_are_accepted():
    records = parse_records({"signatures": [{"pattern": [202, 254, None], "extension": "x", "mime_type": "x/y"}]})
    assert records == [SignatureRecord((0xCA, 0xFE, None), 0, "x", "x/y")]


def test_missing_optional_fields_take_defaults():
    (record,) = parse_records({"version": 1, "signatures": [{"pattern": ["AB"]}]})
    assert record == SignatureRecord((0xAB,), 0, "", "")


@pytest.mark.parametrize(
    "document",
    [
        [],
        {},
        {"signatures": {}},
        {"version": 2, "signatures": []},
        {"signatures": ["not an object"]},
        {"signatures": [{"pattern": "25 50"}]},
        {"signatures": [{"pattern": ["ZZ"]}]},
        {"signatures": [{"pattern": ["100"]}]},
        {"signatures": [{"pattern": ["25"], "header_offset": -1}]},
        {"signatures": [{"pattern": ["25"], "header_offset": "0"}]},
        {"signatures": [{"pattern": ["25"], "extension": 7}]},
    ],
)
def test_malformed_documents_raise_catalog_format_error(document):
    with pytest.raises(CatalogFormatError):
        parse_records(document, source="test.json")


def test_error_message_names_source_and_index():
    with pytest.raises(CatalogFormatError) as excinfo:
        parse_records({"signatures": [{"pattern": ["25"]}, {"pattern": ["1FF"]}]}, source="mine.json")
    assert "mine.json" in str(excinfo.value)
    assert "#1" in str(excinfo.value)


def test_invalid_json_raises_catalog_format_error(md_tmp_path: Path):
    path = write_file(md_tmp_path / "broken.json", "{not json")
    with pytest.raises(CatalogFormatError):
        load_records(path)


def test_missing_file_raises_catalog_format_error(md_tmp_path: Path):
    with pytest.raises(CatalogFormatError):
        load_catalog(md_tmp_path / "absent.json")


def test_dump_is_json_serializable():
    document = dump_catalog(SignatureCatalog.default())
    assert json.loads(json.dumps(document)) == document
    assert len(document["signatures"]) == 43
