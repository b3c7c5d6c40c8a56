"""
L5 Orchestration — Override (library) installs.

``phpx add``, ``phpx remove`` and ``phpx list`` manage Composer
packages installed only for their autoloader, outside any project.  A
project opts in by prepending the generated bootstrap file (for example
``php -d auto_prepend_file=phpx-bootstrap.php``).
"""

from __future__ import annotations

import logging
from pathlib import Path

from phpx.core.errors import InstallerError
from phpx.core.models.cache import OverrideInstall
from phpx.core.services.tool_runner.execution.installer import write_override_bootstrap
from phpx.core.services.tool_runner.orchestration.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

BOOTSTRAP_FILE = "phpx-bootstrap.php"


def add_override(
    orchestrator: Orchestrator,
    raw_identifier: str,
    *,
    bootstrap: bool = False,
) -> tuple[Path, Path | None]:
    """Install an override package; optionally write the bootstrap file.

    Returns:
        (install_dir, bootstrap_path or None)
    """
    install_dir = orchestrator.install_override_package(raw_identifier)
    logger.info("Override installed at %s", install_dir)

    bootstrap_path = None
    if bootstrap:
        target = orchestrator.ctx.cwd / BOOTSTRAP_FILE
        bootstrap_path = write_override_bootstrap(install_dir, target)
        logger.info("Wrote %s", bootstrap_path)
    return install_dir, bootstrap_path


def list_overrides(orchestrator: Orchestrator) -> list[OverrideInstall]:
    return orchestrator.installer.list_overrides()


def remove_override(
    orchestrator: Orchestrator,
    package: str,
    version: str | None = None,
) -> list[Path]:
    """Delete override installs of ``package``.

    Raises:
        InstallerError: nothing matched.
    """
    removed = orchestrator.installer.remove_override(package, version)
    if not removed:
        target = f"{package}:{version}" if version else package
        raise InstallerError(f"No override installed for {target}")
    return removed
