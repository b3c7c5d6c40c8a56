"""
L1 Domain — ``__init__.py`` re-exports all pure domain functions.

These functions have NO subprocess calls, NO filesystem access,
NO network calls. Pure input→output.
"""

from phpx.core.services.tool_runner.domain.identifier import (  # noqa: F401
    is_valid_range,
    parse_identifier,
)
from phpx.core.services.tool_runner.domain.php_constraint import (  # noqa: F401
    interpreter_version_core,
    php_version_satisfies,
)
from phpx.core.services.tool_runner.domain.repo_variants import (  # noqa: F401
    casing_variants,
    repo_candidates,
    repo_shapes,
)
from phpx.core.services.tool_runner.domain.version_select import (  # noqa: F401
    Selection,
    normalize_version_label,
    parse_version,
    select_version,
)
