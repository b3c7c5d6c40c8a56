"""
L4 Execution — Artifact cache.

Key-value store of fetched phars and isolated installs, keyed by
``"name:version"`` and persisted to ``<cache_dir>/cache.json`` through
``phpx.core.persistence.cache_file`` (whole-document atomic rewrite on
every mutation).

Lookups verify before they hit:
    - the backing file or directory must exist
    - file entries: recorded size must match, recorded hash must match
    - directory entries: ``vendor/bin/<bin_name>`` must exist
An entry recorded under ``latest`` never answers a request for a
concrete version or range; running whatever "latest" happened to be
when it was cached would silently run the wrong version.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable

from phpx.core.context import RunContext, now_seconds
from phpx.core.errors import CacheError, PhpxError
from phpx.core.models.cache import CacheEntry, cache_key
from phpx.core.models.identifier import LATEST
from phpx.core.persistence.cache_file import default_cache_path, load_cache, save_cache
from phpx.core.services.tool_runner.execution.integrity import verify_hash

logger = logging.getLogger(__name__)


class ArtifactCache:
    """The ``cache.json`` map plus the files and directories it points at."""

    def __init__(self, cache_dir: Path, clock: Callable[[], int] = now_seconds) -> None:
        self.cache_dir = cache_dir
        self.path = default_cache_path(cache_dir)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = load_cache(self.path)

    @classmethod
    def from_context(cls, ctx: RunContext) -> ArtifactCache:
        return cls(ctx.cache_dir, clock=ctx.now)

    # ── Read ────────────────────────────────────────────────────

    def get(self, tool_name: str, version: str) -> CacheEntry | None:
        """Raw lookup: no verification, no access-time update."""
        return self._entries.get(cache_key(tool_name, version))

    def entries(self, tool_name: str | None = None) -> list[CacheEntry]:
        """All entries (or one tool's), sorted by key."""
        return [
            entry
            for _key, entry in sorted(self._entries.items())
            if tool_name is None or entry.tool_name == tool_name
        ]

    def total_size(self) -> int:
        return sum(entry.size for entry in self._entries.values())

    # ── Write ───────────────────────────────────────────────────

    def add(self, entry: CacheEntry) -> CacheEntry:
        """Insert or overwrite by key, then persist."""
        self._entries[entry.key] = entry
        self._save()
        logger.debug("Cached %s → %s", entry.key, entry.file_path)
        return entry

    def record_file(
        self,
        tool_name: str,
        version: str,
        file_path: Path,
        *,
        download_url: str,
        file_hash: str | None,
        size: int,
    ) -> CacheEntry:
        """Add a single-file (phar) entry stamped with the current time."""
        now = self._clock()
        return self.add(CacheEntry(
            tool_name=tool_name,
            version=version,
            file_path=str(file_path),
            download_url=download_url,
            file_hash=file_hash,
            created_at=now,
            last_accessed=now,
            size=size,
        ))

    def record_directory(
        self,
        tool_name: str,
        version: str,
        install_dir: Path,
        *,
        bin_name: str,
    ) -> CacheEntry:
        """Add a directory-backed (isolated install) entry."""
        now = self._clock()
        return self.add(CacheEntry(
            tool_name=tool_name,
            version=version,
            file_path=str(install_dir),
            created_at=now,
            last_accessed=now,
            bin_name=bin_name,
            is_composer=True,
        ))

    def remove(self, tool_name: str, version: str | None = None) -> list[CacheEntry]:
        """Remove one version, or every version of ``tool_name``.

        Backing storage is deleted before the map entry is dropped.

        Raises:
            CacheError: backing storage exists but cannot be deleted.
        """
        if version is not None:
            keys = [cache_key(tool_name, version)]
        else:
            prefix = f"{tool_name}:"
            keys = [key for key in self._entries if key.startswith(prefix)]

        removed: list[CacheEntry] = []
        try:
            for key in keys:
                entry = self._entries.get(key)
                if entry is None:
                    continue
                _delete_storage(entry)
                del self._entries[key]
                removed.append(entry)
        finally:
            if removed:
                self._save()

        logger.info("Removed %d cache entr%s for %s", len(removed),
                    "y" if len(removed) == 1 else "ies", tool_name)
        return removed

    def clear(self) -> list[CacheEntry]:
        """Remove every entry and its storage."""
        removed: list[CacheEntry] = []
        for entry in self.entries():
            removed.extend(self.remove(entry.tool_name, entry.version))
        return removed

    def evict_expired(self, ttl: int) -> list[CacheEntry]:
        """TTL sweep: drop entries idle for more than ``ttl`` seconds.

        Storage deletion is best-effort — a file that cannot be removed
        never keeps a stale entry in the map.
        """
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items()
            if now - entry.last_accessed > ttl
        ]
        if not expired:
            return []

        evicted: list[CacheEntry] = []
        for key in expired:
            entry = self._entries.pop(key)
            try:
                _delete_storage(entry)
            except CacheError as e:
                logger.debug("Ignoring %s", e)
            evicted.append(entry)

        self._save()
        logger.info("Evicted %d expired cache entr%s", len(evicted),
                    "y" if len(evicted) == 1 else "ies")
        return evicted

    # ── Verified lookup ─────────────────────────────────────────

    def verify(self, entry: CacheEntry, *, skip_verify: bool = False) -> None:
        """Raise CacheError / SecurityError unless ``entry`` is usable."""
        if not entry.path.exists():
            raise CacheError(f"Cached path not found: {entry.file_path}")

        if skip_verify:
            return

        if entry.is_composer:
            if not entry.binary_path.is_file():
                raise CacheError(f"Cached install is missing vendor/bin/{entry.bin_name}")
            return

        actual_size = entry.path.stat().st_size
        if actual_size != entry.size:
            raise CacheError(
                f"Cached file size mismatch for {entry.key}: "
                f"expected {entry.size}, found {actual_size}"
            )

        if entry.file_hash:
            verify_hash(entry.path, entry.file_hash)

    def lookup_and_verify(
        self,
        tool_name: str,
        version: str,
        *,
        wants_specific_version: bool = False,
        skip_verify: bool = False,
    ) -> CacheEntry | None:
        """Return a verified entry (access time updated) or None on miss."""
        entry = self.get(tool_name, version)
        if entry is None:
            return None

        if wants_specific_version and entry.version == LATEST:
            logger.debug("Ignoring %s: a specific version was requested", entry.key)
            return None

        try:
            self.verify(entry, skip_verify=skip_verify)
        except PhpxError as e:
            logger.info("Cache entry %s rejected: %s", entry.key, e)
            return None

        entry.last_accessed = self._clock()
        self._save()
        return entry

    def _save(self) -> None:
        save_cache(self._entries, self.path)


def _delete_storage(entry: CacheEntry) -> None:
    path = entry.path
    try:
        if entry.is_composer:
            if path.exists():
                shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError as e:
        raise CacheError(f"Cannot delete {path}: {e}") from e
