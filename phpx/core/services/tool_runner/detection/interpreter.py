"""
L3 Detection — PHP interpreter discovery and project requirements.

Read-only probes:
    - find a working ``php`` (explicit path, else a fixed search list)
    - ask it for ``PHP_VERSION``
    - walk up from the working directory to the nearest composer.json
      and read the PHP requirement it declares
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from pathlib import Path

from phpx.core.errors import ExecutionError
from phpx.core.services.tool_runner.domain.php_constraint import interpreter_version_core

logger = logging.getLogger(__name__)

PHP_CANDIDATES: tuple[str, ...] = ("php", "/usr/bin/php", "/usr/local/bin/php")
PROJECT_MANIFEST = "composer.json"


def _probe(binary: str) -> bool:
    try:
        result = subprocess.run(
            [binary, "--version"], capture_output=True, text=True, timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def find_php_binary(explicit: Path | None = None) -> Path:
    """Resolve the interpreter to run tools with.

    An explicit path is used when it exists; a missing one is reported
    and the search list is tried instead.

    Raises:
        ExecutionError: no candidate in ``PHP_CANDIDATES`` answers
            ``--version``.
    """
    if explicit is not None:
        if explicit.exists():
            return explicit
        logger.warning("PHP path %s does not exist — searching PATH instead", explicit)

    for candidate in PHP_CANDIDATES:
        resolved = shutil.which(candidate) or candidate
        if _probe(resolved):
            logger.debug("Using PHP interpreter %s", resolved)
            return Path(resolved)

    raise ExecutionError(
        "PHP executable not found. Install PHP or pass its path with --php"
    )


def get_php_version(php_binary: Path) -> str | None:
    """Return the interpreter's numeric version (``8.2.1``), or None."""
    try:
        result = subprocess.run(
            [str(php_binary), "-r", "echo PHP_VERSION;"],
            capture_output=True, text=True, timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return interpreter_version_core(result.stdout.strip())


def find_project_manifest(start_dir: Path) -> Path | None:
    """Nearest composer.json at or above ``start_dir``."""
    current = start_dir.resolve()
    for _ in range(64):  # safety limit
        candidate = current / PROJECT_MANIFEST
        if candidate.is_file():
            return candidate
        if current.parent == current:
            break
        current = current.parent
    return None


def detect_project_php_requirement(start_dir: Path) -> str | None:
    """PHP requirement of the surrounding project, if it declares one.

    ``require.php`` wins; ``config.platform.php`` (a plain version that
    acts as a minimum) is the fallback.  Unreadable manifests are ignored.
    """
    manifest = find_project_manifest(start_dir)
    if manifest is None:
        return None

    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug("Ignoring unreadable %s: %s", manifest, e)
        return None
    if not isinstance(data, dict):
        return None

    require = data.get("require") or {}
    platform = (data.get("config") or {}).get("platform") or {}
    for value in (require.get("php"), platform.get("php")):
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
