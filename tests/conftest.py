"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from phpx.core.context import RunContext
from phpx.core.errors import NetworkError


class FakeClock:
    """Settable clock for RunContext / ArtifactCache."""

    def __init__(self, now: int = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class FakeHttp:
    """In-memory stand-in for HttpClient.

    Populate ``json`` / ``texts`` / ``files`` (url → payload) and
    ``existing`` (urls answering HEAD); every call is recorded in
    ``requests``.
    """

    def __init__(self) -> None:
        self.json: dict = {}
        self.texts: dict[str, str] = {}
        self.files: dict[str, bytes] = {}
        self.existing: set[str] = set()
        self.requests: list[tuple[str, str, dict | None]] = []

    def get_json(self, url, *, headers=None):
        self.requests.append(("GET", url, headers))
        if url not in self.json:
            raise NetworkError(f"GET {url} returned HTTP 404")
        return self.json[url]

    def get_text(self, url):
        self.requests.append(("GET", url, None))
        if url not in self.texts:
            raise NetworkError(f"GET {url} returned HTTP 404")
        return self.texts[url]

    def exists(self, url):
        self.requests.append(("HEAD", url, None))
        return url in self.existing

    def download(self, url, dest: Path) -> int:
        self.requests.append(("DOWNLOAD", url, None))
        if url not in self.files:
            raise NetworkError(f"Download of {url} returned HTTP 404")
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(self.files[url])
        return len(self.files[url])


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def run_ctx(tmp_path: Path, clock: FakeClock) -> RunContext:
    """RunContext rooted in tmp_path with an empty PATH."""
    cwd = tmp_path / "project"
    home = tmp_path / "home"
    cwd.mkdir()
    home.mkdir()
    return RunContext(
        cache_dir=tmp_path / "cache",
        cwd=cwd,
        home=home,
        clock=clock,
        env={"PATH": ""},
    )


@pytest.fixture
def fake_http() -> FakeHttp:
    return FakeHttp()
