"""
Cache models — entries of ``cache.json`` and decoded override installs.

The cache document maps ``"<tool>:<version>"`` to a CacheEntry.
Timestamps are integer UNIX seconds; paths are platform-native strings
so the document stays readable across platforms.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


def cache_key(tool_name: str, version: str) -> str:
    """Build the ``name:version`` key used by the cache document."""
    return f"{tool_name}:{version}"


class CacheEntry(BaseModel):
    """One cached artifact.

    ``is_composer`` marks directory-backed entries (an isolated install,
    removed recursively); otherwise the entry is a single .phar file.
    """

    tool_name: str
    version: str
    file_path: str
    download_url: str = ""
    file_hash: str | None = None
    created_at: int = 0
    last_accessed: int = 0
    size: int = 0
    bin_name: str | None = None
    is_composer: bool = False

    @property
    def key(self) -> str:
        return cache_key(self.tool_name, self.version)

    @property
    def path(self) -> Path:
        return Path(self.file_path)

    @property
    def binary_path(self) -> Path:
        """Executable to run for this entry."""
        if self.is_composer:
            return self.path / "vendor" / "bin" / (self.bin_name or "tool")
        return self.path


class OverrideInstall(BaseModel):
    """A library-only install found under ``<cache_dir>/override``."""

    package: str
    version: str
    path: str

    @property
    def autoload_path(self) -> Path:
        return Path(self.path) / "vendor" / "autoload.php"
