"""
L1 Domain — Version selection policy (pure).

Shared by the registry stage (Packagist version keys) and the
release-listing stage (GitHub tag names).  Candidates are the labels
exactly as the source publishes them; the policy returns both the
chosen label (to look the descriptor up again) and the normalized
version string phpx records and installs.

Policy:
    - only labels parseable as semantic versions (one leading ``v``
      stripped) take part in ordering, highest first
    - range      → highest version satisfying it
    - latest / — → highest stable version; highest pre-release only
                   when nothing stable is published
    - literal    → returned only if it equals a parsed version or is an
                   exact label (``tag`` or ``v<tag>``) in the source list
"""

from __future__ import annotations

from typing import Iterable, NamedTuple

from semantic_version import Version

from phpx.core.errors import VersionConstraintError
from phpx.core.models.identifier import ToolIdentifier


class Selection(NamedTuple):
    label: str    # key/tag as published
    version: str  # normalized version string


def parse_version(label: str) -> Version | None:
    """Parse a published label as a strict semantic version, or None."""
    text = label.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    try:
        return Version(text)
    except ValueError:
        return None


def normalize_version_label(label: str) -> str:
    """``v1.2.3`` → ``1.2.3``; unparseable labels are returned unchanged."""
    parsed = parse_version(label)
    return str(parsed) if parsed is not None else label


def sorted_candidates(labels: Iterable[str]) -> list[tuple[Version, str]]:
    """Parseable labels as (version, label), highest version first."""
    parsed: list[tuple[Version, str]] = []
    for label in labels:
        version = parse_version(label)
        if version is not None:
            parsed.append((version, label))
    parsed.sort(key=lambda item: item[0], reverse=True)
    return parsed


def select_version(labels: Iterable[str], identifier: ToolIdentifier) -> Selection:
    """Pick a label from ``labels`` for ``identifier``.

    Raises:
        VersionConstraintError: nothing in ``labels`` satisfies the request.
    """
    labels = list(labels)
    candidates = sorted_candidates(labels)

    spec = identifier.spec
    if spec is not None:
        for version, label in candidates:
            if spec.match(version):
                return Selection(label, str(version))
        raise VersionConstraintError(
            f"No version of {identifier.name} matches {identifier.version_constraint}"
        )

    if identifier.is_latest:
        stable = [(v, lbl) for v, lbl in candidates if not v.prerelease]
        pool = stable or candidates
        if pool:
            version, label = pool[0]
            return Selection(label, str(version))
        raise VersionConstraintError(f"No released version of {identifier.name} found")

    literal = identifier.version or ""
    wanted = parse_version(literal)
    if wanted is not None:
        for version, label in candidates:
            if version == wanted:
                return Selection(label, str(version))

    for label in (literal, f"v{literal}"):
        if label in labels:
            return Selection(label, normalize_version_label(literal))

    raise VersionConstraintError(f"Version {literal} of {identifier.name} not found")
