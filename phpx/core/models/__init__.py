"""
Domain models — Pydantic types for phpx.

All models are re-exported here for convenient access:

    from phpx.core.models import ToolIdentifier, CacheEntry, PharArtifact
"""

from phpx.core.models.cache import CacheEntry, OverrideInstall, cache_key
from phpx.core.models.config import PhpxConfig
from phpx.core.models.identifier import LATEST, ToolIdentifier
from phpx.core.models.options import ToolOptions
from phpx.core.models.tool import (
    ComposerArtifact,
    ComposerPackage,
    PharArtifact,
    ResolvedTool,
    ToolInfo,
)

__all__ = [
    # cache.py
    "CacheEntry",
    "OverrideInstall",
    "cache_key",
    # config.py
    "PhpxConfig",
    # identifier.py
    "LATEST",
    "ToolIdentifier",
    # options.py
    "ToolOptions",
    # tool.py
    "ComposerArtifact",
    "ComposerPackage",
    "PharArtifact",
    "ResolvedTool",
    "ToolInfo",
]
