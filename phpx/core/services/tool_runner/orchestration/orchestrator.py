"""
L5 Orchestration — Top-level coordinator.

One ``Orchestrator`` per invocation ties the layers together:

    parse → local vendor/bin → cache lookup + verify → resolve
          → phar download | isolated Composer install → cache write → run

The resolver is consulted at most once per ``run_tool`` call: when no
explicit version was requested, the resolved version is both the cache
key to look up and, on a miss, the artifact to fetch.
"""

from __future__ import annotations

import logging
from pathlib import Path

from phpx.core.context import RunContext
from phpx.core.errors import ExecutionError, PhpxError
from phpx.core.models.cache import CacheEntry
from phpx.core.models.config import PhpxConfig
from phpx.core.models.identifier import LATEST, ToolIdentifier
from phpx.core.models.options import ToolOptions
from phpx.core.models.tool import ComposerArtifact, PharArtifact, ResolvedTool, ToolInfo
from phpx.core.services.tool_runner.detection.local_tools import find_local_tool
from phpx.core.services.tool_runner.domain.identifier import parse_identifier
from phpx.core.services.tool_runner.domain.version_select import (
    normalize_version_label,
    parse_version,
)
from phpx.core.services.tool_runner.execution.artifact_cache import ArtifactCache
from phpx.core.services.tool_runner.execution.http import HttpClient
from phpx.core.services.tool_runner.execution.installer import ComposerInstaller
from phpx.core.services.tool_runner.execution.integrity import (
    compute_hash,
    verify_hash,
    verify_release_signature,
)
from phpx.core.services.tool_runner.execution.process import ProcessExecutor
from phpx.core.services.tool_runner.resolver.pipeline import SourceResolver, composer_artifact

logger = logging.getLogger(__name__)


def phar_cache_path(cache_dir: Path, tool_name: str, version: str) -> Path:
    """``<cache_dir>/<name>-<version>.phar`` with ``/`` in names turned into ``-``."""
    return cache_dir / f"{tool_name.replace('/', '-')}-{version}.phar"


def explicit_version(identifier: ToolIdentifier) -> str | None:
    """Version that can be looked up without resolving first.

    A literal (``dev-main``, ``v1.2.3``) or a range that names one exact
    version (``1.2.3``); None for ranges and latest.
    """
    if identifier.version not in (None, LATEST):
        return normalize_version_label(identifier.version)
    if identifier.version_constraint is not None:
        exact = parse_version(identifier.version_constraint.lstrip("="))
        if exact is not None:
            return str(exact)
    return None


class Orchestrator:
    """Runs tools and manages the cache and override installs."""

    def __init__(
        self,
        ctx: RunContext,
        config: PhpxConfig,
        *,
        http: HttpClient | None = None,
        resolver: SourceResolver | None = None,
        executor: ProcessExecutor | None = None,
    ) -> None:
        self.ctx = ctx
        self.config = config
        self.http = http or HttpClient(timeout=config.http_timeout)
        self.resolver = resolver or SourceResolver.default(
            self.http, config, github_token=ctx.env.get("GITHUB_TOKEN"),
        )
        self.executor = executor or ProcessExecutor(ctx)
        self.cache = ArtifactCache.from_context(ctx)
        self.installer = ComposerInstaller(
            ctx,
            self.cache,
            composer_path=config.composer_path,
            php_path=config.default_php_path,
            bootstrap_composer=self._bootstrap_composer,
        )

        self.cache.evict_expired(config.cache_ttl)

    # ── Run ─────────────────────────────────────────────────────

    def run_tool(self, raw_identifier: str, args: list[str], options: ToolOptions) -> None:
        """Resolve, fetch if needed, and run a tool.

        Raises:
            PhpxError: any resolution, fetch, install or launch failure.
            ExecutionExit: the tool itself exited non-zero.
        """
        args = list(args)
        if options.no_interaction:
            args.append("--no-interaction")
        php = options.php or self.config.default_php_path
        skip_verify = options.skip_verify or self.config.skip_verify

        identifier = parse_identifier(raw_identifier)
        logger.debug("Running %s with %d argument(s)", identifier, len(args))

        if not options.no_local:
            local = find_local_tool(identifier.name, self.ctx.cwd, self.ctx.home)
            if local is not None:
                logger.info("Using locally installed %s", local)
                self.executor.run(local, args, php)
                return

        if options.clear_cache:
            self.cache.remove(identifier.name)

        resolved: ResolvedTool | None = None
        if not options.no_cache:
            target = explicit_version(identifier)
            if target is None:
                resolved = self.resolver.resolve(identifier)
                target = resolved.version

            entry = self.cache.lookup_and_verify(
                identifier.name,
                target,
                wants_specific_version=identifier.wants_specific_version,
                skip_verify=skip_verify,
            )
            if entry is not None:
                logger.info("Cache hit: %s", entry.key)
                self.executor.run(entry.binary_path, args, php)
                return

        if resolved is None:
            resolved = self.resolver.resolve(identifier)

        artifact = self._materialize(identifier, resolved, skip_verify=skip_verify)
        self.executor.run(artifact, args, php)

    def _materialize(
        self, identifier: ToolIdentifier, resolved: ResolvedTool, *, skip_verify: bool,
    ) -> Path:
        """Make ``resolved`` runnable on disk and record it in the cache."""
        if isinstance(resolved, PharArtifact):
            return self.fetch_phar(identifier.name, resolved.info, skip_verify=skip_verify)

        if isinstance(resolved, ComposerArtifact):
            pkg = resolved.package
            install_dir, binary = self.installer.install_tool(pkg)
            self.cache.record_directory(
                identifier.name, pkg.version, install_dir, bin_name=pkg.bin_name,
            )
            return binary

        raise ExecutionError(f"Unsupported artifact for {identifier}")

    def fetch_phar(self, tool_name: str, info: ToolInfo, *, skip_verify: bool = False) -> Path:
        """Download, verify and cache a single-file artifact.

        A file that fails verification is deleted before the error
        propagates, so nothing unverified is left at the cached path.
        """
        dest = phar_cache_path(self.ctx.cache_dir, tool_name, info.version)
        size = self.http.download(info.download_url, dest)

        file_hash = None
        if not skip_verify:
            try:
                verify_release_signature(dest, info.signature_url, self.http)
                if info.hash:
                    verify_hash(dest, info.hash)
                file_hash = compute_hash(dest)
            except PhpxError:
                dest.unlink(missing_ok=True)
                raise

        self.cache.record_file(
            tool_name,
            info.version,
            dest,
            download_url=info.download_url,
            file_hash=file_hash,
            size=size,
        )
        return dest

    def _bootstrap_composer(self) -> Path:
        artifact = composer_artifact()
        return self.fetch_phar(
            artifact.info.name, artifact.info, skip_verify=self.config.skip_verify,
        )

    # ── Cache management ────────────────────────────────────────

    def clean_cache(self, tool_name: str | None = None) -> list[CacheEntry]:
        """Remove one tool's entries, or everything when no tool is given."""
        if tool_name is None:
            return self.cache.clear()
        return self.cache.remove(tool_name)

    # ── Overrides ───────────────────────────────────────────────

    def install_override_package(self, raw_identifier: str) -> Path:
        """Install a library package into the override directory.

        Raises:
            ExecutionError: the identifier resolves to a phar, which has
                no autoloadable vendor tree.
        """
        identifier = parse_identifier(raw_identifier)
        resolved = self.resolver.resolve(identifier)
        if isinstance(resolved, PharArtifact):
            raise ExecutionError(
                f"{identifier.name} is distributed as a phar and cannot be used as an "
                f"override; run it with 'phpx {identifier.name}' instead"
            )
        pkg = resolved.package
        return self.installer.install_override(pkg.package, pkg.version)
