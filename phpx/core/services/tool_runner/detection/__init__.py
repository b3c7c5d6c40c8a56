"""
L3 Detection — ``__init__.py`` re-exports read-only system probes.

These functions READ the system (filesystem, interpreter) but never
change it.
"""

from phpx.core.services.tool_runner.detection.interpreter import (  # noqa: F401
    detect_project_php_requirement,
    find_php_binary,
    find_project_manifest,
    get_php_version,
)
from phpx.core.services.tool_runner.detection.local_tools import (  # noqa: F401
    find_local_tool,
    local_tool_locations,
)
