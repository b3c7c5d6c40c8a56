"""
L4 Execution — Isolated Composer installs.

Each (package, version) gets its own throwaway Composer project:

    <cache_dir>/composer/<vendor-package>-<version>/   tool installs (need vendor/bin/<bin>)
    <cache_dir>/override/<vendor-package>-<version>/   library installs (need vendor/autoload.php)

Isolation rules for every ``composer install``:
    - cwd is the install directory, whose composer.json requires only
      ``{package: version}``
    - COMPOSER_HOME / COMPOSER_CACHE_DIR point inside the phpx cache,
      never at the user's own Composer state
    - an inherited ``COMPOSER`` (manifest path override) is removed, so
      the result depends only on registry state

Installs are idempotent: an existing directory with its expected entry
point is returned as-is without running Composer again.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
from pathlib import Path
from typing import Callable

from phpx.core.context import RunContext
from phpx.core.errors import InstallerError
from phpx.core.models.cache import OverrideInstall
from phpx.core.models.tool import ComposerPackage
from phpx.core.services.tool_runner.detection.interpreter import find_php_binary
from phpx.core.services.tool_runner.execution.artifact_cache import ArtifactCache
from phpx.core.services.tool_runner.execution.subprocess_runner import _run_subprocess

logger = logging.getLogger(__name__)

COMPOSER = "composer"
COMPOSER_INSTALL_ARGS = ("install", "--no-interaction", "--no-dev")

# Version part of an override directory name: 1.2.3, v1.2.3, 2.x-dev, dev-main
_VERSION_START = re.compile(r"v?\d|dev-")
_DOTTED_SEGMENT = re.compile(r"v?\d+\.")


def package_slug(package: str) -> str:
    """``vendor/name`` → ``vendor-name``."""
    return package.replace("/", "-")


def _split_slug(parts: list[str], i: int) -> tuple[str, str]:
    return "-".join(parts[:i]).replace("-", "/", 1), "-".join(parts[i:])


def decode_override_dir(name: str) -> tuple[str, str]:
    """Split ``vendor-package-1.2.3`` into (``vendor/package``, ``1.2.3``).

    Best effort, for listing only: the slug loses the ``/``.  The version
    starts at the first segment after ``vendor-package`` that is dotted
    (``1.0.0-beta-2``) or a ``dev-`` branch, else at the last segment
    that begins with a digit; without one the version is empty.
    """
    parts = name.split("-")
    for i in range(2, len(parts)):
        if _DOTTED_SEGMENT.match(parts[i]) or (parts[i] == "dev" and i < len(parts) - 1):
            return _split_slug(parts, i)
    for i in range(len(parts) - 1, 0, -1):
        if parts[i][:1].isdigit():
            return _split_slug(parts, i)
    return name.replace("-", "/", 1), ""


class ComposerInstaller:
    """Builds isolated installs with an external ``composer``."""

    def __init__(
        self,
        ctx: RunContext,
        cache: ArtifactCache,
        *,
        composer_path: Path | None = None,
        php_path: Path | None = None,
        bootstrap_composer: Callable[[], Path] | None = None,
    ) -> None:
        self.ctx = ctx
        self.cache = cache
        self.composer_path = composer_path
        self.php_path = php_path
        self.bootstrap_composer = bootstrap_composer

    # ── Composer binary ─────────────────────────────────────────

    def resolve_composer_binary(self) -> Path:
        """Find Composer: config path, cached phar, PATH, then bootstrap.

        Raises:
            InstallerError: Composer is nowhere to be found and cannot be
                bootstrapped.
        """
        if self.composer_path is not None and self.composer_path.exists():
            return self.composer_path

        for version in ("latest", "stable"):
            entry = self.cache.get(COMPOSER, version)
            if entry is not None and not entry.is_composer and entry.path.is_file():
                return entry.path

        for name in ("composer", "composer.phar"):
            found = shutil.which(name, path=self.ctx.env.get("PATH"))
            if found:
                return Path(found)

        if self.bootstrap_composer is not None:
            logger.info("Composer not found — fetching composer.phar")
            return self.bootstrap_composer()

        raise InstallerError(
            "Composer not found. Install it, set composer_path, or run 'phpx composer' once"
        )

    def _composer_command(self) -> list[str]:
        composer = self.resolve_composer_binary()
        if composer.suffix == ".phar":
            php = find_php_binary(self.php_path)
            return [str(php), str(composer)]
        return [str(composer)]

    # ── Install mechanics ───────────────────────────────────────

    def _prepare_install_dir(self, install_dir: Path, package: str, version: str) -> None:
        manifest = {"require": {package: version}}
        try:
            install_dir.mkdir(parents=True, exist_ok=True)
            (install_dir / "composer.json").write_text(
                json.dumps(manifest, indent=4) + "\n", encoding="utf-8",
            )
            self.ctx.composer_home.mkdir(parents=True, exist_ok=True)
            self.ctx.composer_cache.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallerError(f"Cannot prepare {install_dir}: {e}") from e

    def _run_install(self, install_dir: Path, package: str, version: str) -> None:
        self._prepare_install_dir(install_dir, package, version)

        cmd = self._composer_command() + list(COMPOSER_INSTALL_ARGS)
        logger.info("Installing %s:%s into %s", package, version, install_dir)

        result = _run_subprocess(
            cmd,
            cwd=install_dir,
            base_env=self.ctx.env,
            env_overrides={
                "COMPOSER_HOME": str(self.ctx.composer_home),
                "COMPOSER_CACHE_DIR": str(self.ctx.composer_cache),
            },
            env_remove=("COMPOSER",),
        )
        if not result["ok"]:
            detail = (result.get("stderr") or result.get("stdout") or "").strip()
            raise InstallerError(
                f"composer install of {package}:{version} failed: {result['error']}"
                + (f"\n{detail}" if detail else "")
            )

    def install_tool(self, pkg: ComposerPackage) -> tuple[Path, Path]:
        """Install a tool package; return (install_dir, vendor/bin binary).

        Raises:
            InstallerError: Composer failed or the binary is missing afterwards.
        """
        install_dir = self.ctx.composer_dir / f"{pkg.slug}-{pkg.version}"
        binary = install_dir / "vendor" / "bin" / pkg.bin_name

        if install_dir.is_dir() and binary.is_file():
            logger.debug("Reusing isolated install %s", install_dir)
        else:
            self._run_install(install_dir, pkg.package, pkg.version)
            if not binary.is_file():
                raise InstallerError(
                    f"vendor/bin/{pkg.bin_name} not found after installing "
                    f"{pkg.package}:{pkg.version}"
                )
        return install_dir, binary

    # ── Overrides ───────────────────────────────────────────────

    def install_override(self, package: str, version: str) -> Path:
        """Install a library package for autoload prepending; return its dir.

        Never recorded in the cache map — overrides are found by
        scanning the override directory.
        """
        install_dir = self.ctx.override_dir / f"{package_slug(package)}-{version}"
        autoload = install_dir / "vendor" / "autoload.php"

        if install_dir.is_dir() and autoload.is_file():
            logger.debug("Reusing override install %s", install_dir)
            return install_dir

        self._run_install(install_dir, package, version)

        if not autoload.is_file():
            raise InstallerError(
                f"vendor/autoload.php not found after installing {package}:{version}"
            )
        return install_dir

    def list_overrides(self) -> list[OverrideInstall]:
        """Override installs on disk, sorted by (package, version)."""
        root = self.ctx.override_dir
        if not root.is_dir():
            return []

        found = []
        for path in root.iterdir():
            if not path.is_dir():
                continue
            package, version = decode_override_dir(path.name)
            found.append(OverrideInstall(package=package, version=version, path=str(path)))
        found.sort(key=lambda o: (o.package, o.version))
        return found

    def remove_override(self, package: str, version: str | None = None) -> list[Path]:
        """Delete one override version, or all versions of ``package``.

        Matches ``<slug>-<version>`` directory names directly rather than
        the decoded listing, so ``dev-main`` and ``1.0.0-beta-2`` installs
        are found too.

        Raises:
            InstallerError: a matching directory could not be deleted.
        """
        root = self.ctx.override_dir
        if not root.is_dir():
            return []

        prefix = f"{package_slug(package)}-"
        removed = []
        for path in sorted(root.iterdir()):
            if not path.is_dir() or not path.name.startswith(prefix):
                continue
            rest = path.name[len(prefix):]
            if version is not None:
                if rest != version:
                    continue
            elif not _VERSION_START.match(rest):
                continue  # another package sharing the prefix, e.g. vendor/name-extra
            try:
                shutil.rmtree(path)
            except OSError as e:
                raise InstallerError(f"Cannot delete {path}: {e}") from e
            logger.info("Removed override %s", path)
            removed.append(path)
        return removed


def write_override_bootstrap(install_dir: Path, target: Path) -> Path:
    """Write a PHP prepend file: override autoload first, then the project's."""
    autoload = install_dir.resolve() / "vendor" / "autoload.php"
    escaped = str(autoload).replace("\\", "\\\\").replace("'", "\\'")
    content = (
        "<?php\n"
        "// Generated by phpx add --bootstrap. Load override vendor first, then project vendor.\n"
        f"require '{escaped}';\n"
        "require __DIR__ . '/vendor/autoload.php';\n"
    )
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target
