"""
L1 Domain — PHP version vs. project requirement (pure).

A project's composer.json may pin PHP as a real Composer constraint
(``^8.1``, ``>=7.4 <8.3``, ``^8.1 || ^8.2``) or, under
``config.platform.php``, as a plain version that acts as a minimum.
Composer writes AND as whitespace or comma and OR as ``||`` (or a
single ``|``); these are rewritten into the range grammar before
matching.
"""

from __future__ import annotations

import re

from semantic_version import SimpleSpec, Version

_OR_SPLIT = re.compile(r"\s*\|\|?\s*")
_AND_SPLIT = re.compile(r"\s*,\s*|\s+")
_OPERATOR_GAP = re.compile(r"(>=|<=|!=|==|>|<|=|\^|~)\s+")


def interpreter_version_core(raw: str) -> str | None:
    """Keep only the leading numeric core (``8.2.1-ubuntu`` → ``8.2.1``)."""
    match = re.match(r"\s*(\d+(?:\.\d+)*)", raw or "")
    return match.group(1) if match else None


def _coerce(version: str) -> Version | None:
    try:
        return Version.coerce(version)
    except ValueError:
        return None


def _composer_tilde(part: str) -> str:
    # Composer's ~8.1 means >=8.1,<9.0 (the last given segment may move).
    match = re.fullmatch(r"~(\d+)\.(\d+)", part)
    if not match:
        return part
    major = int(match.group(1))
    return f">={major}.{match.group(2)}.0,<{major + 1}.0.0"


def _to_simple_spec(constraint: str) -> SimpleSpec | None:
    alternatives = []
    for alternative in _OR_SPLIT.split(constraint.strip()):
        alternative = _OPERATOR_GAP.sub(r"\1", alternative.strip())
        parts = [_composer_tilde(p) for p in _AND_SPLIT.split(alternative) if p]
        if not parts:
            return None
        alternatives.append(",".join(parts))
    try:
        return SimpleSpec("||".join(alternatives))
    except ValueError:
        return None


def php_version_satisfies(version: str, constraint: str) -> bool:
    """True when ``version`` satisfies ``constraint``.

    An empty constraint is always satisfied.  An unparseable interpreter
    version or constraint is reported as *not* satisfied so the caller
    can warn about it.
    """
    constraint = (constraint or "").strip()
    if not constraint:
        return True

    actual = _coerce(interpreter_version_core(version) or "")
    if actual is None:
        return False

    # Plain version (config.platform.php) → minimum version.
    if re.fullmatch(r"v?\d+(\.\d+)*", constraint):
        minimum = _coerce(constraint.lstrip("v"))
        return minimum is not None and actual >= minimum

    spec = _to_simple_spec(constraint)
    if spec is None:
        return False
    return spec.match(actual)
