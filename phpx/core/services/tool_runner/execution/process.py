"""
L4 Execution — Running the tool.

``php <artifact> args...`` with the parent's environment and standard
streams.  The child's exit status is the result: zero returns normally,
anything else is raised as ``ExecutionExit`` so the CLI can exit with
the same status and add nothing to the tool's own output.

While the child runs, phpx does not react to Ctrl-C.  The terminal
delivers SIGINT to the whole foreground process group, so the tool
receives it directly and decides what it means (a REPL keeps running,
a linter exits); phpx then reports whatever status the tool exits with.
"""

from __future__ import annotations

import logging
import signal
import subprocess
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from phpx.core.context import RunContext
from phpx.core.errors import ExecutionError, ExecutionExit
from phpx.core.services.tool_runner.detection.interpreter import (
    detect_project_php_requirement,
    find_php_binary,
    get_php_version,
)
from phpx.core.services.tool_runner.domain.php_constraint import php_version_satisfies

logger = logging.getLogger(__name__)

_CHILD_OWNED_SIGNALS = (signal.SIGINT,)


def _ignore_in_parent(signum, frame) -> None:
    """No-op handler.  Must not be SIG_IGN, which exec would pass on to the tool."""


@contextmanager
def _signals_left_to_child() -> Iterator[None]:
    """Keep the parent alive through Ctrl-C for the duration of the block."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = {sig: signal.signal(sig, _ignore_in_parent) for sig in _CHILD_OWNED_SIGNALS}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


def exit_status(returncode: int) -> int:
    """Map a ``Popen`` return code to a shell-style exit status."""
    if returncode < 0:
        return 128 - returncode  # killed by signal N → 128 + N
    return returncode


class ProcessExecutor:
    """Resolves the interpreter and runs one artifact as a child process."""

    def __init__(self, ctx: RunContext) -> None:
        self.ctx = ctx

    def check_project_php(self, php_binary: Path) -> bool:
        """Warn when the project's composer.json wants a different PHP.

        Never blocks execution.  Returns False only on a detected mismatch.
        """
        requirement = detect_project_php_requirement(self.ctx.cwd)
        if not requirement:
            return True

        actual = get_php_version(php_binary)
        if actual is None:
            logger.debug("Could not determine the version of %s", php_binary)
            return True

        if php_version_satisfies(actual, requirement):
            return True

        logger.warning(
            "Project composer.json requires PHP %s, but %s is PHP %s",
            requirement, php_binary, actual,
        )
        return False

    def run(
        self,
        artifact_path: Path,
        args: list[str],
        interpreter_override: Path | None = None,
    ) -> None:
        """Execute ``artifact_path`` (a .phar or a vendor/bin script).

        Raises:
            ExecutionError: no interpreter, or the child cannot be started.
            ExecutionExit: the child exited non-zero.
        """
        php_binary = find_php_binary(interpreter_override)
        if interpreter_override is None:
            self.check_project_php(php_binary)

        cmd = [str(php_binary), str(artifact_path), *args]
        logger.info("Executing %s with %s", artifact_path, php_binary)

        with _signals_left_to_child():
            try:
                proc = subprocess.Popen(cmd, env=self.ctx.env, cwd=str(self.ctx.cwd))
            except OSError as e:
                raise ExecutionError(f"Cannot start {php_binary}: {e}") from e
            returncode = proc.wait()

        code = exit_status(returncode)
        if code != 0:
            raise ExecutionExit(code)
