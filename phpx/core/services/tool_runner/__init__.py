"""
Tool runner service — package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate onion layer (domain → resolver → detection → execution →
orchestration)::

    from phpx.core.services.tool_runner import Orchestrator
"""

# ── L1: Domain ──
from phpx.core.services.tool_runner.domain.identifier import parse_identifier  # noqa: F401
from phpx.core.services.tool_runner.domain.version_select import select_version  # noqa: F401

# ── L2: Resolver ──
from phpx.core.services.tool_runner.resolver.pipeline import SourceResolver  # noqa: F401

# ── L4: Execution ──
from phpx.core.services.tool_runner.execution.artifact_cache import ArtifactCache  # noqa: F401
from phpx.core.services.tool_runner.execution.installer import ComposerInstaller  # noqa: F401
from phpx.core.services.tool_runner.execution.process import ProcessExecutor  # noqa: F401

# ── L5: Orchestration ──
from phpx.core.services.tool_runner.orchestration.orchestrator import Orchestrator  # noqa: F401
