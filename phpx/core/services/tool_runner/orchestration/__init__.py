"""
L5 Orchestration — ``__init__.py`` re-exports top-level coordinators.

These are the entry points that external code calls.
"""

from phpx.core.services.tool_runner.orchestration.orchestrator import (  # noqa: F401
    Orchestrator,
    phar_cache_path,
)
from phpx.core.services.tool_runner.orchestration.overrides import (  # noqa: F401
    add_override,
    list_overrides,
    remove_override,
)
