import shutil
import tempfile
import zipfile
from pathlib import Path

import pytest

from tests.utils import make_zip

ODT_MIME = "application/vnd.oasis.opendocument.text"
ODS_MIME = "application/vnd.oasis.opendocument.spreadsheet"


@pytest.fixture
def md_tmp_path():
    """Create a temporary directory with a neutral prefix (no dot-segments, nothing gitignored)."""
    temp_dir = Path(tempfile.mkdtemp(prefix="mimedetect_")).resolve()
    try:
        yield temp_dir
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(scope="session")
def docx_bytes() -> bytes:
    return make_zip(
        {
            "[Content_Types].xml": "<Types/>",
            "_rels/.rels": "<Relationships/>",
            "word/document.xml": "<w:document/>",
        }
    )


@pytest.fixture(scope="session")
def xlsx_bytes() -> bytes:
    return make_zip(
        {
            "[Content_Types].xml": "<Types/>",
            "xl/workbook.xml": "<workbook/>",
            "xl/worksheets/sheet1.xml": "<worksheet/>",
        }
    )


@pytest.fixture(scope="session")
def odt_bytes() -> bytes:
    return make_zip({"mimetype": ODT_MIME, "content.xml": "<office:document-content/>"})


@pytest.fixture(scope="session")
def ods_bytes() -> bytes:
    return make_zip({"mimetype": ODS_MIME, "content.xml": "<office:document-content/>"})


@pytest.fixture(scope="session")
def plain_zip_bytes() -> bytes:
    return make_zip({"readme.txt": "hello", "data/values.csv": "a,b\n1,2\n"})


@pytest.fixture(scope="session")
def corrupt_deflated_odt_bytes() -> bytes:
    """An ODT-like archive whose deflated 'mimetype' stream starts with an invalid block type."""
    data = bytearray(make_zip({"mimetype": ODT_MIME, "content.xml": "<x/>"}, compression=zipfile.ZIP_DEFLATED))
    # First entry's payload follows the 30-byte local header and its 8-byte name.
    data[30 + len("mimetype")] = 0xFF
    return bytes(data)
