"""
Tests for running a tool through the PHP interpreter.
"""

import json
import logging
import os
import signal
import sys
from pathlib import Path

import pytest

from phpx.core.errors import ExecutionError, ExecutionExit
from phpx.core.services.tool_runner.execution import process as process_mod
from phpx.core.services.tool_runner.execution.process import ProcessExecutor, exit_status

PHP = Path("/usr/bin/php")


@pytest.fixture
def executor(run_ctx, monkeypatch) -> ProcessExecutor:
    monkeypatch.setattr(process_mod, "find_php_binary", lambda explicit=None: explicit or PHP)
    return ProcessExecutor(run_ctx)


class FakePopen:
    """Stands in for ``subprocess.Popen``; ``on_wait`` runs while the child is 'alive'."""

    def __init__(self, returncode: int, calls: list, on_wait=None):
        self.returncode = returncode
        self.calls = calls
        self.on_wait = on_wait

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        return self

    def wait(self):
        if self.on_wait is not None:
            self.on_wait()
        return self.returncode


class TestRun:
    def test_success(self, executor, run_ctx, monkeypatch):
        calls = []
        monkeypatch.setattr(process_mod.subprocess, "Popen", FakePopen(0, calls))

        executor.run(Path("/cache/phpstan.phar"), ["analyse", "src"])

        cmd, kwargs = calls[0]
        assert cmd == [str(PHP), "/cache/phpstan.phar", "analyse", "src"]
        assert kwargs["cwd"] == str(run_ctx.cwd)
        assert kwargs["env"] is run_ctx.env
        assert "stdout" not in kwargs

    def test_nonzero_exit_propagates(self, executor, monkeypatch):
        monkeypatch.setattr(process_mod.subprocess, "Popen", FakePopen(3, []))
        with pytest.raises(ExecutionExit) as exc:
            executor.run(Path("tool.phar"), [])
        assert exc.value.code == 3

    def test_signal_exit(self, executor, monkeypatch):
        monkeypatch.setattr(process_mod.subprocess, "Popen", FakePopen(-9, []))
        with pytest.raises(ExecutionExit) as exc:
            executor.run(Path("tool.phar"), [])
        assert exc.value.code == 137

    def test_cannot_start(self, executor, monkeypatch):
        def boom(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])
        monkeypatch.setattr(process_mod.subprocess, "Popen", boom)
        with pytest.raises(ExecutionError):
            executor.run(Path("tool.phar"), [])

    def test_explicit_interpreter_skips_project_check(self, executor, monkeypatch):
        calls = []
        monkeypatch.setattr(process_mod.subprocess, "Popen", FakePopen(0, calls))
        monkeypatch.setattr(executor, "check_project_php",
                            lambda php: pytest.fail("project check must be skipped"))

        executor.run(Path("tool.phar"), [], interpreter_override=Path("/opt/php83"))
        assert calls[0][0][0] == "/opt/php83"


class TestInterrupt:
    def test_parent_ignores_sigint_while_child_runs(self, executor, monkeypatch):
        seen = {}

        def during_wait():
            seen["handler"] = signal.getsignal(signal.SIGINT)

        monkeypatch.setattr(process_mod.subprocess, "Popen", FakePopen(0, [], during_wait))
        before = signal.getsignal(signal.SIGINT)

        executor.run(Path("tool.phar"), [])

        assert seen["handler"] is process_mod._ignore_in_parent
        assert seen["handler"] is not signal.SIG_IGN
        assert signal.getsignal(signal.SIGINT) is before

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signal delivery")
    def test_ctrl_c_keeps_child_exit_code(self, executor, monkeypatch):
        def interrupted_wait():
            os.kill(os.getpid(), signal.SIGINT)

        monkeypatch.setattr(process_mod.subprocess, "Popen", FakePopen(3, [], interrupted_wait))

        with pytest.raises(ExecutionExit) as exc:
            executor.run(Path("psysh.phar"), [])
        assert exc.value.code == 3

    def test_handler_restored_after_failure_to_start(self, executor, monkeypatch):
        def boom(cmd, **kwargs):
            raise PermissionError(cmd[0])
        monkeypatch.setattr(process_mod.subprocess, "Popen", boom)
        before = signal.getsignal(signal.SIGINT)

        with pytest.raises(ExecutionError):
            executor.run(Path("tool.phar"), [])
        assert signal.getsignal(signal.SIGINT) is before


class TestExitStatus:
    @pytest.mark.parametrize("returncode,expected", [(0, 0), (3, 3), (-2, 130), (-15, 143)])
    def test_mapping(self, returncode, expected):
        assert exit_status(returncode) == expected


class TestProjectCheck:
    def test_mismatch_warns(self, executor, run_ctx, monkeypatch, caplog):
        caplog.set_level(logging.WARNING)
        (run_ctx.cwd / "composer.json").write_text(json.dumps({"require": {"php": "^8.3"}}))
        monkeypatch.setattr(process_mod, "get_php_version", lambda php: "8.1.2")

        assert executor.check_project_php(PHP) is False
        assert "requires PHP ^8.3" in caplog.text

    def test_match(self, executor, run_ctx, monkeypatch):
        (run_ctx.cwd / "composer.json").write_text(json.dumps({"require": {"php": ">=8.1"}}))
        monkeypatch.setattr(process_mod, "get_php_version", lambda php: "8.2.0")
        assert executor.check_project_php(PHP) is True

    def test_no_manifest(self, executor):
        assert executor.check_project_php(PHP) is True
