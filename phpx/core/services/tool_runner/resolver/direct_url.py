"""
L2 Resolver — Conventional "latest release" URL stage.

Last resort for ``name`` / ``name@latest`` only:

    https://github.com/<o>/<r>/releases/latest/download/<name>.phar

probed with HEAD for (name, name), (name, php-name), (php-name, name).
"""

from __future__ import annotations

import logging

from phpx.core.models.identifier import LATEST, ToolIdentifier
from phpx.core.models.tool import PharArtifact, ToolInfo
from phpx.core.services.tool_runner.execution.http import HttpClient
from phpx.core.services.tool_runner.resolver.base import ResolutionStrategy, ResolvedTool

logger = logging.getLogger(__name__)

LATEST_DOWNLOAD_URL = "https://github.com/{owner}/{repo}/releases/latest/download/{name}.phar"


def direct_url_candidates(tool_name: str) -> list[str]:
    name = tool_name.rsplit("/", 1)[-1]
    pairs = [(name, name), (name, f"php-{name}"), (f"php-{name}", name)]
    return [
        LATEST_DOWNLOAD_URL.format(owner=owner, repo=repo, name=name)
        for owner, repo in pairs
    ]


class DirectUrlStrategy(ResolutionStrategy):
    name = "direct-url"

    def __init__(self, http: HttpClient) -> None:
        self.http = http

    def resolve(self, identifier: ToolIdentifier) -> ResolvedTool | None:
        if not identifier.is_latest:
            return None

        for url in direct_url_candidates(identifier.name):
            if self.http.exists(url):
                logger.debug("Direct URL hit: %s", url)
                return PharArtifact(info=ToolInfo(
                    name=identifier.name,
                    version=LATEST,
                    download_url=url,
                    signature_url=f"{url}.asc",
                ))
        return None
