import io
import re
import zipfile
from pathlib import Path

from mimedetect.defaults import MAX_HEADER_SIZE
from mimedetect.types import SignatureRecord


def write_file(path: Path, content: bytes | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        path.write_text(content, encoding="utf-8")
    else:
        path.write_bytes(content)
    return path


def make_zip(entries: dict[str, bytes | str], compression: int = zipfile.ZIP_STORED) -> bytes:
    """Entries are written in the given order, uncompressed by default (as ODF requires for 'mimetype')."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=compression) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


def header_for(record: SignatureRecord, size: int = MAX_HEADER_SIZE) -> bytes:
    """A zero-filled buffer carrying `record`'s pattern at its offset. Wildcards become 0x00."""
    buf = bytearray(size)
    for i, value in enumerate(record.pattern):
        buf[record.header_offset + i] = 0 if value is None else value
    return bytes(buf)


class FakeResponse:
    def __init__(self, body: bytes, status_code: int = 200) -> None:
        self._body = body
        self.status_code = status_code
        self.closed = False

    @property
    def content(self) -> bytes:
        return self._body

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start : start + chunk_size]

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Stands in for requests.Session: serves `routes` and records every call."""

    def __init__(self, routes: dict[str, bytes], *, honor_range: bool = True, error: Exception | None = None):
        self.routes = routes
        self.honor_range = honor_range
        self.error = error
        self.calls: list[tuple[str, dict | None]] = []
        self.responses: list[FakeResponse] = []

    def get(self, url, headers=None, timeout=None, stream=False):
        self.calls.append((url, headers))
        if self.error is not None:
            raise self.error
        body = self.routes.get(url)
        if body is None:
            resp = FakeResponse(b"Not Found", 404)
        elif headers and "Range" in headers and self.honor_range:
            m = re.fullmatch(r"bytes=(\d+)-(\d+)", headers["Range"])
            assert m, headers["Range"]
            resp = FakeResponse(body[int(m.group(1)) : int(m.group(2)) + 1], 206)
        else:
            resp = FakeResponse(body, 200)
        self.responses.append(resp)
        return resp
