"""
ToolIdentifier — what the user asked to run.

``phpstan``, ``phpstan@^1.10``, ``phpstan@1.10.50``, ``phpstan@latest``
or a tag-like literal such as ``phpunit@dev-main``.
"""

from __future__ import annotations

from pydantic import BaseModel
from semantic_version import SimpleSpec

LATEST = "latest"


class ToolIdentifier(BaseModel):
    """Structured tool identifier.

    At most one of ``version_constraint`` / ``version`` is set.  Neither
    set means "latest available".
    """

    name: str
    version_constraint: str | None = None  # range expression, known parseable
    version: str | None = None             # "latest" or an exact literal

    @property
    def spec(self) -> SimpleSpec | None:
        """The parsed range, or None when no constraint was given."""
        if self.version_constraint is None:
            return None
        return SimpleSpec(self.version_constraint)

    @property
    def is_latest(self) -> bool:
        """True for ``name`` and ``name@latest``."""
        return self.version_constraint is None and self.version in (None, LATEST)

    @property
    def wants_specific_version(self) -> bool:
        """True when a range or a concrete (non-latest) version was requested."""
        return not self.is_latest

    def __str__(self) -> str:
        if self.version_constraint is not None:
            return f"{self.name}@{self.version_constraint}"
        if self.version is not None:
            return f"{self.name}@{self.version}"
        return self.name
