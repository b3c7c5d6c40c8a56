"""
L2 Resolver — Source resolution pipeline.

Runs the strategies strictly in order; the first non-None result wins.
A strategy that raises is logged and skipped, so one unreachable source
never hides another.  ``composer`` itself is special-cased to the
official latest-stable phar.
"""

from __future__ import annotations

import logging

from phpx.core.errors import ToolNotFoundError
from phpx.core.models.config import PhpxConfig
from phpx.core.models.identifier import LATEST, ToolIdentifier
from phpx.core.models.tool import PharArtifact, ToolInfo
from phpx.core.services.tool_runner.execution.http import HttpClient
from phpx.core.services.tool_runner.resolver.base import ResolutionStrategy, ResolvedTool
from phpx.core.services.tool_runner.resolver.direct_url import DirectUrlStrategy
from phpx.core.services.tool_runner.resolver.registry import PackagistStrategy
from phpx.core.services.tool_runner.resolver.releases import GitHubReleasesStrategy

logger = logging.getLogger(__name__)

COMPOSER_TOOL = "composer"
COMPOSER_PHAR_URL = "https://getcomposer.org/download/latest-stable/composer.phar"


def composer_artifact() -> PharArtifact:
    return PharArtifact(info=ToolInfo(
        name=COMPOSER_TOOL,
        version=LATEST,
        download_url=COMPOSER_PHAR_URL,
    ))


class SourceResolver:
    """Ordered list of resolution strategies."""

    def __init__(self, strategies: list[ResolutionStrategy]) -> None:
        self.strategies = strategies

    @classmethod
    def default(
        cls,
        http: HttpClient,
        config: PhpxConfig,
        github_token: str | None = None,
    ) -> SourceResolver:
        return cls([
            PackagistStrategy(http, config.registry_url),
            GitHubReleasesStrategy(http, config.github_api_url, token=github_token),
            DirectUrlStrategy(http),
        ])

    def resolve(self, identifier: ToolIdentifier) -> ResolvedTool:
        """Resolve ``identifier`` to a phar or a Composer package.

        Raises:
            ToolNotFoundError: every strategy came back empty.
        """
        if identifier.name == COMPOSER_TOOL:
            return composer_artifact()

        for strategy in self.strategies:
            try:
                resolved = strategy.resolve(identifier)
            except Exception as e:
                logger.debug("Resolver stage %s failed for %s: %s", strategy.name, identifier, e)
                continue
            if resolved is not None:
                logger.info("Resolved %s via %s → %s %s",
                            identifier, strategy.name, resolved.kind, resolved.version)
                return resolved
            logger.debug("Resolver stage %s found nothing for %s", strategy.name, identifier)

        raise ToolNotFoundError(f"Tool '{identifier}' not found in any source")
