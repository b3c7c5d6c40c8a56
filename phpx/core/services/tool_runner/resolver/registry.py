"""
L2 Resolver — Packagist registry stage.

    GET <registry_url>/packages/<vendor>/<package>.json
    → {"package": {"versions": {"1.2.3": {"dist": {...}, "bin": [...]}}}}

The selected version's ``dist.type`` decides the artifact shape:
    phar       → PharArtifact (download the dist URL directly)
    zip / tar  → ComposerArtifact (needs an isolated ``composer install``)
Anything else is skipped and the next candidate name is tried.
"""

from __future__ import annotations

import logging
from typing import Any

from phpx.core.errors import PhpxError
from phpx.core.models.identifier import ToolIdentifier
from phpx.core.models.tool import ComposerArtifact, ComposerPackage, PharArtifact, ToolInfo
from phpx.core.services.tool_runner.domain.version_select import select_version
from phpx.core.services.tool_runner.execution.http import HttpClient
from phpx.core.services.tool_runner.resolver.base import ResolutionStrategy, ResolvedTool

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://packagist.org"
_SOURCE_DIST_TYPES = ("zip", "tar")


def candidate_package_names(tool_name: str) -> list[str]:
    """``phpstan`` → ``phpstan/phpstan``, ``phpstan``; scoped names as-is."""
    if "/" in tool_name:
        return [tool_name]
    return [f"{tool_name}/{tool_name}", tool_name]


def declared_bin_names(descriptor: dict[str, Any]) -> list[str]:
    """``bin`` entries with their leading directory stripped."""
    raw = descriptor.get("bin") or []
    if isinstance(raw, str):
        raw = [raw]
    names = []
    for entry in raw:
        if isinstance(entry, str) and entry.strip():
            names.append(entry.strip().rsplit("/", 1)[-1])
    return names


class PackagistStrategy(ResolutionStrategy):
    """Resolve through the Composer package registry."""

    name = "packagist"

    def __init__(self, http: HttpClient, registry_url: str = DEFAULT_REGISTRY_URL) -> None:
        self.http = http
        self.registry_url = registry_url.rstrip("/")

    def resolve(self, identifier: ToolIdentifier) -> ResolvedTool | None:
        for package in candidate_package_names(identifier.name):
            try:
                resolved = self._resolve_package(package, identifier)
            except PhpxError as e:
                logger.debug("Registry lookup of %s failed: %s", package, e)
                continue
            if resolved is not None:
                return resolved
        return None

    def _resolve_package(self, package: str, identifier: ToolIdentifier) -> ResolvedTool | None:
        url = f"{self.registry_url}/packages/{package}.json"
        data = self.http.get_json(url)

        versions = ((data or {}).get("package") or {}).get("versions") or {}
        if not isinstance(versions, dict) or not versions:
            logger.debug("No versions published for %s", package)
            return None

        selection = select_version(versions.keys(), identifier)
        descriptor = versions[selection.label] or {}
        dist = descriptor.get("dist") or {}
        dist_type = dist.get("type")

        if dist_type == "phar":
            logger.debug("Registry: %s %s is a phar", package, selection.version)
            return PharArtifact(info=ToolInfo(
                name=identifier.name,
                version=selection.version,
                download_url=dist.get("url", ""),
                hash=_dist_hash(dist),
            ))

        if dist_type in _SOURCE_DIST_TYPES:
            logger.debug("Registry: %s %s needs a Composer install", package, selection.version)
            return ComposerArtifact(package=ComposerPackage(
                package=package,
                version=selection.version,
                bin_names=declared_bin_names(descriptor),
            ))

        logger.debug("Registry: %s has unsupported dist type %r", package, dist_type)
        return None


def _dist_hash(dist: dict[str, Any]) -> str | None:
    """Packagist publishes a sha1 ``shasum`` for some dists (often empty)."""
    shasum = dist.get("shasum")
    if isinstance(shasum, str) and shasum.strip():
        return f"sha1:{shasum.strip().lower()}"
    return None
