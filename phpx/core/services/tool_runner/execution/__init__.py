"""
L4 Execution — ``__init__.py`` re-exports components that change state.

Downloads, installs, cache writes and child processes all live here.
"""

from phpx.core.services.tool_runner.execution.artifact_cache import ArtifactCache  # noqa: F401
from phpx.core.services.tool_runner.execution.http import HttpClient  # noqa: F401
from phpx.core.services.tool_runner.execution.installer import (  # noqa: F401
    ComposerInstaller,
    decode_override_dir,
    write_override_bootstrap,
)
from phpx.core.services.tool_runner.execution.integrity import (  # noqa: F401
    compute_hash,
    verify_hash,
    verify_release_signature,
)
from phpx.core.services.tool_runner.execution.process import ProcessExecutor  # noqa: F401
