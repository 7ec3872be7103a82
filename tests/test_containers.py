from __future__ import annotations

import io
import zipfile

import pytest

from mimedetect.containers import ZipFileAccessor
from mimedetect.errors import EntryDecodeError, EntryNotFoundError, MimeDetectError, UnreadableContainerError
from tests.utils import make_zip, write_file


def test_lists_entries_in_archive_order(docx_bytes: bytes):
    with ZipFileAccessor.from_bytes(docx_bytes) as accessor:
        assert accessor.list_entries() == ["[Content_Types].xml", "_rels/.rels", "word/document.xml"]


def test_reads_entry_text(odt_bytes: bytes):
    with ZipFileAccessor.from_bytes(odt_bytes) as accessor:
        assert accessor.read_entry_text("mimetype") == "application/vnd.oasis.opendocument.text"


def test_missing_entry_raises_entry_not_found(plain_zip_bytes: bytes):
    with ZipFileAccessor.from_bytes(plain_zip_bytes) as accessor:
        with pytest.raises(EntryNotFoundError) as excinfo:
            accessor.read_entry_text("mimetype")
    assert excinfo.value.name == "mimetype"
    assert isinstance(excinfo.value, KeyError)
    assert "mimetype" in str(excinfo.value)


def test_non_utf8_entry_raises_entry_decode_error():
    data = make_zip({"mimetype": b"\xff\xfe\xfa"})
    with ZipFileAccessor.from_bytes(data) as accessor:
        with pytest.raises(EntryDecodeError) as excinfo:
            accessor.read_entry_text("mimetype")
    assert excinfo.value.name == "mimetype"


def test_encoding_is_configurable():
    data = make_zip({"mimetype": "café".encode("latin-1")})
    with ZipFileAccessor.from_bytes(data, encoding="latin-1") as accessor:
        assert accessor.read_entry_text("mimetype") == "café"


@pytest.mark.parametrize("data", [b"", b"PK\x03\x04", b"PK\x03\x04" + bytes(100), b"not a zip at all"])
def test_corrupt_archives_raise_unreadable_container(data: bytes):
    with pytest.raises(UnreadableContainerError):
        ZipFileAccessor.from_bytes(data)


def test_unreadable_container_is_a_mimedetect_error():
    with pytest.raises(MimeDetectError):
        ZipFileAccessor.from_bytes(b"garbage")
    # Also an OSError, like the other I/O-side errors.
    with pytest.raises(OSError):
        ZipFileAccessor.from_bytes(b"garbage")


def test_missing_file_raises_unreadable_container(md_tmp_path):
    with pytest.raises(UnreadableContainerError):
        ZipFileAccessor(md_tmp_path / "nope.zip")


def test_opens_archive_from_path(md_tmp_path, xlsx_bytes: bytes):
    path = write_file(md_tmp_path / "book.bin", xlsx_bytes)
    with ZipFileAccessor(path) as accessor:
        assert "xl/workbook.xml" in accessor.list_entries()


def test_rewinds_seekable_file_objects(plain_zip_bytes: bytes):
    stream = io.BytesIO(plain_zip_bytes)
    stream.read(10)
    with ZipFileAccessor(stream) as accessor:
        assert "readme.txt" in accessor.list_entries()


def test_closing_accessor_leaves_caller_stream_open(plain_zip_bytes: bytes):
    stream = io.BytesIO(plain_zip_bytes)
    with ZipFileAccessor(stream):
        pass
    assert not stream.closed


def test_bad_crc_raises_entry_decode_error():
    data = bytearray(make_zip({"mimetype": "application/vnd.oasis.opendocument.text"}))
    # Stored entry: its payload follows the 30-byte local header and the 8-byte name.
    data[30 + len("mimetype")] ^= 0xFF
    with ZipFileAccessor.from_bytes(bytes(data)) as accessor:
        with pytest.raises(EntryDecodeError):
            accessor.read_entry_text("mimetype")


def test_corrupt_deflate_stream_raises_entry_decode_error(corrupt_deflated_odt_bytes: bytes):
    with ZipFileAccessor.from_bytes(corrupt_deflated_odt_bytes) as accessor:
        assert accessor.list_entries() == ["mimetype", "content.xml"]
        with pytest.raises(EntryDecodeError) as excinfo:
            accessor.read_entry_text("mimetype")
    assert excinfo.value.name == "mimetype"


def test_encrypted_entry_raises_entry_decode_error():
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        info = zipfile.ZipInfo("mimetype")
        zf.writestr(info, b"application/vnd.oasis.opendocument.text")
    data = bytearray(buf.getvalue())
    # Set the "encrypted" general-purpose flag in both the local and central headers.
    data[6] |= 0x01
    central = data.index(b"PK\x01\x02")
    data[central + 8] |= 0x01
    with ZipFileAccessor.from_bytes(bytes(data)) as accessor:
        with pytest.raises(EntryDecodeError):
            accessor.read_entry_text("mimetype")
