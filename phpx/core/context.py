"""
Run context — the explicit environment of one phpx invocation.

Cache directory, working directory, home directory, wall clock and
environment variables are carried here and handed to each component;
tests point a whole pipeline at ``tmp_path`` with a frozen clock.

    - CLI:    main.py builds one from the loaded config
    - Tests:  RunContext(cache_dir=tmp_path / "cache", cwd=tmp_path, ...)
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable


def now_seconds() -> int:
    """Current UNIX time in whole seconds."""
    return int(time.time())


@dataclass
class RunContext:
    """Paths, clock and environment for one invocation."""

    cache_dir: Path
    cwd: Path = field(default_factory=Path.cwd)
    home: Path = field(default_factory=Path.home)
    clock: Callable[[], int] = now_seconds
    env: dict[str, str] = field(default_factory=lambda: dict(os.environ))

    @property
    def composer_dir(self) -> Path:
        """Root of per-(package, version) isolated tool installs."""
        return self.cache_dir / "composer"

    @property
    def override_dir(self) -> Path:
        """Root of library-only override installs."""
        return self.cache_dir / "override"

    @property
    def composer_home(self) -> Path:
        """COMPOSER_HOME used for every isolated install."""
        return self.cache_dir / "composer_home"

    @property
    def composer_cache(self) -> Path:
        """COMPOSER_CACHE_DIR used for every isolated install."""
        return self.cache_dir / "composer_cache"

    def now(self) -> int:
        return int(self.clock())
