"""
L1 Domain — Tool identifier parsing (pure).

    name | name@constraint | name@version | name@latest

A second segment that does not parse as a range is kept as a literal
exact version: many real tags (``dev-main``, ``v1.0.0-beta``,
``2023.01``) are not valid ranges, and that is not an error.
"""

from __future__ import annotations

from semantic_version import SimpleSpec

from phpx.core.errors import InvalidToolIdentifierError
from phpx.core.models.identifier import LATEST, ToolIdentifier


def is_valid_range(text: str) -> bool:
    """True when ``text`` parses as a version range."""
    try:
        SimpleSpec(text)
    except ValueError:
        return False
    return True


def parse_identifier(raw: str) -> ToolIdentifier:
    """Parse a raw identifier string.

    Raises:
        InvalidToolIdentifierError: more than one ``@``, or an empty
            name or version segment.
    """
    parts = raw.strip().split("@")

    if len(parts) > 2:
        raise InvalidToolIdentifierError(f"Invalid tool identifier format: {raw!r}")

    name = parts[0].strip()
    if not name:
        raise InvalidToolIdentifierError(f"Missing tool name in {raw!r}")

    if len(parts) == 1:
        return ToolIdentifier(name=name)

    version_str = parts[1].strip()
    if not version_str:
        raise InvalidToolIdentifierError(f"Missing version after '@' in {raw!r}")

    if version_str == LATEST:
        return ToolIdentifier(name=name, version=LATEST)

    if is_valid_range(version_str):
        return ToolIdentifier(name=name, version_constraint=version_str)

    return ToolIdentifier(name=name, version=version_str)
