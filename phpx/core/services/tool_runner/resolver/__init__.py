"""
L2 Resolver — ``__init__.py`` re-exports the resolution pipeline.

Stages talk to the network through ``HttpClient`` but never touch the
cache or the filesystem.
"""

from phpx.core.services.tool_runner.resolver.base import (  # noqa: F401
    ResolutionStrategy,
    ResolvedTool,
)
from phpx.core.services.tool_runner.resolver.direct_url import DirectUrlStrategy  # noqa: F401
from phpx.core.services.tool_runner.resolver.pipeline import (  # noqa: F401
    COMPOSER_PHAR_URL,
    SourceResolver,
)
from phpx.core.services.tool_runner.resolver.registry import PackagistStrategy  # noqa: F401
from phpx.core.services.tool_runner.resolver.releases import GitHubReleasesStrategy  # noqa: F401
