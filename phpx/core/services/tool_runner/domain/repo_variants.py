"""
L1 Domain — GitHub repository name candidates (pure).

Tool repositories are capitalized inconsistently (``phpstan/phpstan``,
``PHP-CS-Fixer/PHP-CS-Fixer``, ``vimeo/psalm``) and often carry a
``php-`` prefix or ``-php`` suffix.  This module turns a tool name into
an ordered, de-duplicated list of ``(owner, repo)`` pairs to probe.

    casing variants:  exact | Title-Case | Title-Case with short (≤3) segments ALL-CAPS
    repo shapes:      name  | php-name   | name-php
"""

from __future__ import annotations

from typing import Iterator

_SHORT_SEGMENT = 3


def _title_segments(token: str, *, upper_short: bool) -> str:
    out = []
    for segment in token.split("-"):
        if upper_short and 0 < len(segment) <= _SHORT_SEGMENT:
            out.append(segment.upper())
        else:
            out.append(segment[:1].upper() + segment[1:].lower())
    return "-".join(out)


def casing_variants(token: str) -> list[str]:
    """Exact, Title-Case and short-segments-upper forms of ``token``."""
    variants = [
        token,
        _title_segments(token, upper_short=False),
        _title_segments(token, upper_short=True),
    ]
    return list(dict.fromkeys(variants))


def repo_shapes(name: str) -> list[str]:
    """Bare, ``php-``-prefixed and ``-php``-suffixed repository names."""
    shapes = [name]
    if not name.lower().startswith("php-"):
        shapes.append(f"php-{name}")
    if not name.lower().endswith("-php"):
        shapes.append(f"{name}-php")
    return shapes


def repo_candidates(tool_name: str) -> Iterator[tuple[str, str]]:
    """Yield ``(owner, repo)`` pairs to probe, most likely first.

    ``vendor/package`` uses the vendor as owner; a bare ``name`` is
    tried as its own owner (``name/name``) and as ``php-name/name``.
    """
    if "/" in tool_name:
        owner_base, repo_base = tool_name.split("/", 1)
    else:
        owner_base, repo_base = tool_name, tool_name

    seen: set[tuple[str, str]] = set()

    owner_casings = casing_variants(owner_base)
    repo_casings = casing_variants(repo_base)
    for i, repo_cased in enumerate(repo_casings):
        owner = owner_casings[min(i, len(owner_casings) - 1)]
        for repo in repo_shapes(repo_cased):
            pair = (owner, repo)
            if pair not in seen:
                seen.add(pair)
                yield pair

    if "/" not in tool_name:
        pair = (f"php-{tool_name}", tool_name)
        if pair not in seen:
            yield pair
