from __future__ import annotations

import asyncio
import logging
from urllib.parse import urlparse

import requests

from mimedetect.containers import ZipFileAccessor
from mimedetect.core import ByteSource
from mimedetect.defaults import DEFAULT_HTTP_TIMEOUT, MAX_HEADER_SIZE
from mimedetect.errors import HeaderReadError

CHUNK_SIZE = 64 * 1024


def is_http_url(token: str) -> bool:
    tok = token.strip().lower()
    return tok.startswith("http://") or tok.startswith("https://")


class HttpSource(ByteSource):
    """
    A resource behind an http(s) URL.

    The header is fetched with a `Range: bytes=0-N` request and streamed, so servers that ignore
    ranges still only cost `max_size` bytes of reading. The full body is downloaded only when a
    ZIP container has to be opened, and kept for the lifetime of the instance.
    """

    url: str
    timeout: float | None

    def __init__(
        self,
        url: str,
        *,
        session: requests.Session | None = None,
        timeout: float | None = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        if not is_http_url(url) or not urlparse(url.strip()).netloc:
            raise ValueError(f"Not an http(s) URL: {url!r}")
        self.url = url.strip()
        self.timeout = timeout
        self._session = session or requests.Session()
        self._body: bytes | None = None

    def __repr__(self) -> str:
        return f"HttpSource(url={self.url!r})"

    def _get(self, headers: dict[str, str] | None = None) -> requests.Response:
        try:
            resp = self._session.get(self.url, headers=headers, timeout=self.timeout, stream=True)
        except requests.RequestException as e:
            raise HeaderReadError(f"Could not fetch {self.url}: {e}") from e
        if not 200 <= resp.status_code < 300:
            resp.close()
            raise HeaderReadError(f"Could not fetch {self.url}: HTTP {resp.status_code}")
        return resp

    def read_header(self, max_size: int = MAX_HEADER_SIZE) -> bytes:
        if self._body is not None:
            return self._body[:max_size]
        if max_size <= 0:
            return b""
        resp = self._get({"Range": f"bytes=0-{max_size - 1}"})
        if resp.status_code != 206:
            logging.getLogger(__name__).debug(
                "%s ignored the Range header (HTTP %d); truncating client-side", self.url, resp.status_code
            )
        chunks: list[bytes] = []
        remaining = max_size
        try:
            for chunk in resp.iter_content(chunk_size=min(CHUNK_SIZE, max_size)):
                if not chunk:
                    continue
                chunks.append(chunk[:remaining])
                remaining -= len(chunks[-1])
                if remaining <= 0:
                    break
        except requests.RequestException as e:
            raise HeaderReadError(f"Could not read {self.url}: {e}") from e
        finally:
            resp.close()
        return b"".join(chunks)

    async def read_header_async(self, max_size: int = MAX_HEADER_SIZE) -> bytes:
        return await asyncio.to_thread(self.read_header, max_size)

    def read_body(self) -> bytes:
        if self._body is None:
            resp = self._get()
            try:
                self._body = resp.content
            except requests.RequestException as e:
                raise HeaderReadError(f"Could not read {self.url}: {e}") from e
            finally:
                resp.close()
        return self._body

    def open_container(self) -> ZipFileAccessor:
        return ZipFileAccessor.from_bytes(self.read_body())
