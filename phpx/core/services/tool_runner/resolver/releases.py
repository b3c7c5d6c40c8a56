"""
L2 Resolver — GitHub release-listing stage.

Probes repository name candidates in order:

    GET <github_api_url>/repos/<owner>/<repo>/releases
    → [{"tag_name": "v1.2.3", "assets": [{"name", "browser_download_url"}]}]

and accepts the first selected release that ships a ``.phar`` asset.
"""

from __future__ import annotations

import logging
from typing import Any

from phpx.core.errors import PhpxError
from phpx.core.models.identifier import ToolIdentifier
from phpx.core.models.tool import PharArtifact, ToolInfo
from phpx.core.services.tool_runner.domain.repo_variants import repo_candidates
from phpx.core.services.tool_runner.domain.version_select import select_version
from phpx.core.services.tool_runner.execution.http import HttpClient
from phpx.core.services.tool_runner.resolver.base import ResolutionStrategy, ResolvedTool

logger = logging.getLogger(__name__)

DEFAULT_GITHUB_API_URL = "https://api.github.com"
SIGNATURE_SUFFIXES = (".asc", ".sig", ".sha256", ".sha512")


def find_phar_asset(assets: list[dict[str, Any]]) -> dict[str, Any] | None:
    for asset in assets:
        if str(asset.get("name", "")).lower().endswith(".phar"):
            return asset
    return None


def find_signature_asset(assets: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Signature or checksum companion of the phar, if the release has one."""
    for asset in assets:
        if str(asset.get("name", "")).lower().endswith(SIGNATURE_SUFFIXES):
            return asset
    return None


class GitHubReleasesStrategy(ResolutionStrategy):
    """Resolve through release listings of likely GitHub repositories."""

    name = "github-releases"

    def __init__(
        self,
        http: HttpClient,
        api_url: str = DEFAULT_GITHUB_API_URL,
        token: str | None = None,
    ) -> None:
        self.http = http
        self.api_url = api_url.rstrip("/")
        self.token = token

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def resolve(self, identifier: ToolIdentifier) -> ResolvedTool | None:
        for owner, repo in repo_candidates(identifier.name):
            try:
                resolved = self._resolve_repo(owner, repo, identifier)
            except PhpxError as e:
                logger.debug("Releases of %s/%s: %s", owner, repo, e)
                continue
            if resolved is not None:
                return resolved
        return None

    def _resolve_repo(
        self, owner: str, repo: str, identifier: ToolIdentifier,
    ) -> ResolvedTool | None:
        url = f"{self.api_url}/repos/{owner}/{repo}/releases"
        releases = self.http.get_json(url, headers=self._headers())
        if not isinstance(releases, list) or not releases:
            return None

        by_tag = {
            str(release.get("tag_name")): release
            for release in releases
            if isinstance(release, dict) and release.get("tag_name")
        }
        selection = select_version(by_tag.keys(), identifier)
        assets = by_tag[selection.label].get("assets") or []

        phar = find_phar_asset(assets)
        if phar is None:
            logger.debug("%s/%s %s has no .phar asset", owner, repo, selection.label)
            return None

        signature = find_signature_asset(assets)
        logger.debug("Releases: %s/%s %s → %s", owner, repo, selection.version, phar.get("name"))
        return PharArtifact(info=ToolInfo(
            name=identifier.name,
            version=selection.version,
            download_url=phar["browser_download_url"],
            signature_url=signature.get("browser_download_url") if signature else None,
        ))
