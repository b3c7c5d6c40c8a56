"""
L4 Execution — Captured subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called with captured
output (Composer installs, interpreter probes).  Running the user's
tool itself is NOT done here: that inherits stdio and lives in
``process.py``.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _run_subprocess(
    cmd: list[str],
    *,
    timeout: int | None = 600,
    base_env: dict[str, str] | None = None,
    env_overrides: dict[str, str] | None = None,
    env_remove: tuple[str, ...] = (),
    cwd: Path | None = None,
) -> dict[str, Any]:
    """Run a command and capture its output.

    Args:
        cmd: Command list for ``subprocess.run()``.
        timeout: Seconds before ``TimeoutExpired`` (None = no limit).
        base_env: Environment to start from (default: ``os.environ``).
        env_overrides: Variables to set on top of ``base_env``.
        env_remove: Variables to drop from the child environment.
        cwd: Working directory for the command.

    Returns:
        ``{"ok": True, "stdout": "...", "elapsed_ms": N}`` on success,
        ``{"ok": False, "error": "...", ...}`` on failure.
    """
    env = dict(os.environ if base_env is None else base_env)
    if env_overrides:
        env.update(env_overrides)
    for key in env_remove:
        env.pop(key, None)

    logger.debug("Running %s (cwd=%s)", cmd, cwd)
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
            cwd=str(cwd) if cwd else None,
        )
    except subprocess.TimeoutExpired:
        return {"ok": False, "error": f"Command timed out ({timeout}s)"}
    except OSError as e:
        return {"ok": False, "error": f"Cannot run {cmd[0]}: {e}"}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout[-2000:] if result.stdout else ""
    stderr = result.stderr[-2000:] if result.stderr else ""

    if result.returncode == 0:
        return {"ok": True, "stdout": stdout, "elapsed_ms": elapsed_ms}

    return {
        "ok": False,
        "error": f"Command failed (exit {result.returncode})",
        "returncode": result.returncode,
        "stderr": stderr,
        "stdout": stdout,
        "elapsed_ms": elapsed_ms,
    }
