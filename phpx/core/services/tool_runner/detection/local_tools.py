"""
L3 Detection — Already-installed tools.

A tool the project (``vendor/bin``) or the user's global Composer
(``~/.composer/vendor/bin``, ``~/.config/composer/vendor/bin``) already
provides wins over anything phpx would fetch.
"""

from __future__ import annotations

from pathlib import Path


def local_tool_locations(tool_name: str, cwd: Path, home: Path) -> list[Path]:
    """Candidate paths, in precedence order."""
    bin_name = tool_name.rsplit("/", 1)[-1]
    return [
        cwd / "vendor" / "bin" / bin_name,
        home / ".composer" / "vendor" / "bin" / bin_name,
        home / ".config" / "composer" / "vendor" / "bin" / bin_name,
    ]


def find_local_tool(tool_name: str, cwd: Path, home: Path) -> Path | None:
    """First existing local installation of ``tool_name``, or None."""
    for path in local_tool_locations(tool_name, cwd, home):
        if path.is_file():
            return path
    return None
