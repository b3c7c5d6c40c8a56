"""
L4 Execution — HTTP transport.

Thin urllib wrapper used by the resolver stages (JSON metadata, HEAD
probes) and the phar fetch (streamed download).  Every transport
failure, including a body cut short mid-stream, is raised as
``NetworkError``; callers decide whether that ends the run
(download) or just the current stage (resolution).
"""

from __future__ import annotations

import http.client
import json
import logging
import os
import tempfile
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any

from phpx import __version__
from phpx.core.errors import CacheError, NetworkError

logger = logging.getLogger(__name__)

_USER_AGENT = f"phpx/{__version__}"
_CHUNK = 8192

# Transport failures below HTTP status level: refused, reset, truncated body, bad URL
_TRANSPORT_ERRORS = (urllib.error.URLError, http.client.HTTPException, OSError, ValueError)


class HttpClient:
    """Blocking HTTP client with a fixed per-request timeout."""

    def __init__(self, timeout: int = 30) -> None:
        self.timeout = timeout

    def _request(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
    ) -> urllib.request.Request:
        all_headers = {"User-Agent": _USER_AGENT}
        if headers:
            all_headers.update(headers)
        return urllib.request.Request(url, method=method, headers=all_headers)

    def get_json(self, url: str, *, headers: dict[str, str] | None = None) -> Any:
        """GET ``url`` and decode the body as JSON."""
        logger.debug("GET %s", url)
        try:
            req = self._request(url, headers={"Accept": "application/json", **(headers or {})})
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            raise NetworkError(f"GET {url} returned HTTP {e.code}") from e
        except _TRANSPORT_ERRORS as e:
            raise NetworkError(f"GET {url} failed: {e}") from e

        try:
            return json.loads(body)
        except ValueError as e:
            raise NetworkError(f"GET {url} returned invalid JSON: {e}") from e

    def get_text(self, url: str) -> str:
        """GET ``url`` and return the body as text."""
        logger.debug("GET %s", url)
        try:
            with urllib.request.urlopen(self._request(url), timeout=self.timeout) as resp:
                return resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            raise NetworkError(f"GET {url} returned HTTP {e.code}") from e
        except _TRANSPORT_ERRORS as e:
            raise NetworkError(f"GET {url} failed: {e}") from e

    def exists(self, url: str) -> bool:
        """HEAD probe — True on a 2xx response (redirects followed)."""
        logger.debug("HEAD %s", url)
        try:
            req = self._request(url, method="HEAD")
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return 200 <= resp.getcode() < 300
        except _TRANSPORT_ERRORS as e:
            logger.debug("HEAD %s failed: %s", url, e)
            return False

    def download(self, url: str, dest: Path) -> int:
        """Stream ``url`` into ``dest`` and return the byte count.

        The body is written to a temp file beside ``dest`` and renamed
        into place, so an interrupted download never leaves a truncated
        artifact at the cached path.

        Raises:
            NetworkError: the request failed or the body was cut short.
            CacheError: the destination directory is not writable.
        """
        logger.info("Downloading %s → %s", url, dest)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=".download_", suffix=".tmp")
        except OSError as e:
            raise CacheError(f"Cannot write to {dest.parent}: {e}") from e

        tmp = Path(tmp_name)
        size = 0
        try:
            with os.fdopen(fd, "wb") as out:
                with urllib.request.urlopen(self._request(url), timeout=self.timeout) as resp:
                    while True:
                        chunk = resp.read(_CHUNK)
                        if not chunk:
                            break
                        out.write(chunk)
                        size += len(chunk)
            tmp.replace(dest)
        except urllib.error.HTTPError as e:
            raise NetworkError(f"Download of {url} returned HTTP {e.code}") from e
        except _TRANSPORT_ERRORS as e:
            raise NetworkError(f"Download of {url} failed: {e}") from e
        finally:
            tmp.unlink(missing_ok=True)

        logger.info("Downloaded %d bytes", size)
        return size
