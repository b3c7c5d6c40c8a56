"""
Cache document persistence — atomic read/write of ``cache.json``.

The document is one JSON object mapping ``"<tool>:<version>"`` to a
CacheEntry.  It is rewritten wholesale on every mutation; writes go to
a temp file in the same directory and are then renamed over the target,
so a crash never leaves a half-written document behind and concurrent
phpx processes only ever observe complete documents.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from phpx.core.models.cache import CacheEntry

logger = logging.getLogger(__name__)

CACHE_FILE = "cache.json"


def default_cache_path(cache_dir: Path) -> Path:
    """Get the cache document path for a cache directory."""
    return cache_dir / CACHE_FILE


def load_cache(path: Path) -> dict[str, CacheEntry]:
    """Load the cache map from a JSON file.

    Returns:
        Mapping of key → CacheEntry.  A missing, corrupt or unreadable
        document yields an empty map (the artifacts it described are
        simply re-fetched).  Individual invalid entries are dropped.
    """
    if not path.is_file():
        logger.debug("No cache document at %s — starting empty", path)
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Corrupt cache document %s: %s — starting empty", path, e)
        return {}
    except OSError as e:
        logger.warning("Cannot read cache document %s: %s — starting empty", path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Cache document %s is not a mapping — starting empty", path)
        return {}

    entries: dict[str, CacheEntry] = {}
    for key, raw in data.items():
        try:
            entries[key] = CacheEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning("Dropping invalid cache entry %s: %s", key, e)
    logger.debug("Loaded %d cache entries from %s", len(entries), path)
    return entries


def save_cache(entries: dict[str, CacheEntry], path: Path) -> None:
    """Save the cache map to a JSON file (atomic write)."""
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {key: entry.model_dump(mode="json") for key, entry in sorted(entries.items())}
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    try:
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".cache_", suffix=".tmp")
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(path)
            logger.debug("Cache document saved to %s (%d entries)", path, len(entries))
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except Exception as e:
        logger.error("Failed to save cache document to %s: %s", path, e)
        raise
