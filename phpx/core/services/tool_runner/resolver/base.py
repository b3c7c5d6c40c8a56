"""
L2 Resolver — Strategy contract.

Every resolution stage implements ``resolve``: return a ``ResolvedTool``
when the stage can satisfy the identifier, ``None`` to let the next
stage try.  Raising is also allowed — the pipeline treats any exception
as ``None``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from phpx.core.models.identifier import ToolIdentifier
from phpx.core.models.tool import ResolvedTool


class ResolutionStrategy(ABC):
    """One source of tools (registry, release listing, direct URL)."""

    name: str = "strategy"

    @abstractmethod
    def resolve(self, identifier: ToolIdentifier) -> ResolvedTool | None:
        """Resolve ``identifier`` or return None to continue."""
