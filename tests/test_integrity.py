"""
Tests for hashing, checksum verification and the HTTP transport.
"""

import hashlib
import http.client
import io
import urllib.error
from pathlib import Path

import pytest

from phpx.core.errors import CacheError, NetworkError, SecurityError
from phpx.core.services.tool_runner.execution import http as http_mod
from phpx.core.services.tool_runner.execution.http import HttpClient
from phpx.core.services.tool_runner.execution.integrity import (
    compute_hash,
    verify_hash,
    verify_release_signature,
)


@pytest.fixture
def artifact(tmp_path: Path) -> Path:
    path = tmp_path / "tool.phar"
    path.write_bytes(b"<?php __HALT_COMPILER();")
    return path


class TestHashes:
    def test_compute_default_sha256(self, artifact):
        expected = hashlib.sha256(artifact.read_bytes()).hexdigest()
        assert compute_hash(artifact) == f"sha256:{expected}"

    def test_verify_prefixed(self, artifact):
        verify_hash(artifact, compute_hash(artifact, "sha512"))

    def test_verify_bare_md5(self, artifact):
        verify_hash(artifact, hashlib.md5(artifact.read_bytes()).hexdigest())

    def test_mismatch(self, artifact):
        with pytest.raises(SecurityError):
            verify_hash(artifact, "sha256:" + "0" * 64)

    def test_unknown_format(self, artifact):
        with pytest.raises(SecurityError):
            verify_hash(artifact, "abc")

    def test_unknown_algorithm(self, artifact):
        with pytest.raises(SecurityError):
            verify_hash(artifact, "nope:abc")


class TestReleaseSignature:
    def test_no_signature(self, artifact, fake_http):
        assert verify_release_signature(artifact, None, fake_http) == "none"

    def test_checksum_verified(self, artifact, fake_http):
        url = "https://dl.test/tool.phar.sha256"
        fake_http.texts[url] = hashlib.sha256(artifact.read_bytes()).hexdigest() + "  tool.phar\n"
        assert verify_release_signature(artifact, url, fake_http) == "verified"

    def test_checksum_mismatch(self, artifact, fake_http):
        url = "https://dl.test/tool.phar.sha512"
        fake_http.texts[url] = "0" * 128
        with pytest.raises(SecurityError):
            verify_release_signature(artifact, url, fake_http)

    def test_pgp_signature_is_unverified(self, artifact, fake_http):
        status = verify_release_signature(artifact, "https://dl.test/tool.phar.asc", fake_http)
        assert status == "unverified"
        assert fake_http.requests == []


class _Response(io.BytesIO):
    def __init__(self, body: bytes, status: int = 200):
        super().__init__(body)
        self.status = status

    def getcode(self):
        return self.status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class TestHttpClient:
    def test_get_json(self, monkeypatch):
        seen = {}

        def urlopen(req, timeout):
            seen["ua"] = req.get_header("User-agent")
            seen["timeout"] = timeout
            return _Response(b'{"ok": true}')

        monkeypatch.setattr(http_mod.urllib.request, "urlopen", urlopen)
        assert HttpClient(timeout=5).get_json("https://x.test/a.json") == {"ok": True}
        assert seen["ua"].startswith("phpx/")
        assert seen["timeout"] == 5

    def test_get_json_invalid(self, monkeypatch):
        monkeypatch.setattr(http_mod.urllib.request, "urlopen", lambda req, timeout: _Response(b"<html>"))
        with pytest.raises(NetworkError):
            HttpClient().get_json("https://x.test/a.json")

    def test_http_error(self, monkeypatch):
        def urlopen(req, timeout):
            raise urllib.error.HTTPError(req.full_url, 404, "Not Found", {}, None)

        monkeypatch.setattr(http_mod.urllib.request, "urlopen", urlopen)
        with pytest.raises(NetworkError, match="404"):
            HttpClient().get_json("https://x.test/missing.json")

    def test_exists(self, monkeypatch):
        def urlopen(req, timeout):
            assert req.get_method() == "HEAD"
            if "missing" in req.full_url:
                raise urllib.error.URLError("nope")
            return _Response(b"")

        monkeypatch.setattr(http_mod.urllib.request, "urlopen", urlopen)
        client = HttpClient()
        assert client.exists("https://x.test/tool.phar") is True
        assert client.exists("https://x.test/missing.phar") is False

    def test_download(self, tmp_path, monkeypatch):
        monkeypatch.setattr(http_mod.urllib.request, "urlopen",
                            lambda req, timeout: _Response(b"x" * 20000))
        dest = tmp_path / "cache" / "tool.phar"

        assert HttpClient().download("https://x.test/tool.phar", dest) == 20000
        assert dest.read_bytes() == b"x" * 20000
        assert [p.name for p in dest.parent.iterdir()] == ["tool.phar"]

    def test_failed_download_leaves_nothing(self, tmp_path, monkeypatch):
        def urlopen(req, timeout):
            raise urllib.error.HTTPError(req.full_url, 500, "Server Error", {}, None)

        monkeypatch.setattr(http_mod.urllib.request, "urlopen", urlopen)
        dest = tmp_path / "tool.phar"
        with pytest.raises(NetworkError):
            HttpClient().download("https://x.test/tool.phar", dest)
        assert list(tmp_path.iterdir()) == []

    def test_truncated_download_is_network_error(self, tmp_path, monkeypatch):
        class Truncated(_Response):
            def read(self, size=-1):
                if self.tell() >= 100:
                    raise http.client.IncompleteRead(b"", 900)
                return super().read(size)

        monkeypatch.setattr(http_mod.urllib.request, "urlopen",
                            lambda req, timeout: Truncated(b"x" * 1000))
        dest = tmp_path / "tool.phar"

        with pytest.raises(NetworkError, match="failed"):
            HttpClient().download("https://x.test/tool.phar", dest)
        assert list(tmp_path.iterdir()) == []

    def test_truncated_json_is_network_error(self, monkeypatch):
        class Truncated(_Response):
            def read(self, size=-1):
                raise http.client.IncompleteRead(b'{"package"', 500)

        monkeypatch.setattr(http_mod.urllib.request, "urlopen",
                            lambda req, timeout: Truncated(b""))
        with pytest.raises(NetworkError):
            HttpClient().get_json("https://x.test/a.json")

    def test_malformed_url_is_network_error(self):
        with pytest.raises(NetworkError):
            HttpClient().get_text("not a url")

    def test_unwritable_destination_is_cache_error(self, tmp_path, monkeypatch):
        blocker = tmp_path / "cache"
        blocker.write_text("a file, not a directory")
        monkeypatch.setattr(http_mod.urllib.request, "urlopen",
                            lambda req, timeout: pytest.fail("must not request"))

        with pytest.raises(CacheError):
            HttpClient().download("https://x.test/tool.phar", blocker / "tool.phar")
