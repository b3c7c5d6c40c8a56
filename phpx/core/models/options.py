"""
ToolOptions — per-invocation switches for running a tool.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class ToolOptions(BaseModel):
    """Flags that shape one ``run_tool`` call."""

    clear_cache: bool = False      # drop this tool's cache entries first
    no_cache: bool = False         # skip the cache lookup (still writes after fetch)
    skip_verify: bool = False      # skip size/hash/checksum verification
    php: Path | None = None        # explicit interpreter, overrides config
    no_local: bool = False         # ignore vendor/bin and global Composer bin
    no_interaction: bool = False   # append --no-interaction to the tool's args
