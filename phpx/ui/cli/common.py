"""
Shared helpers for CLI commands.

Commands are thin: they build an ``Orchestrator`` from the loaded
configuration and translate phpx errors into one red line on stderr.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Iterator

import click

from phpx.core.errors import ExecutionExit, PhpxError

if TYPE_CHECKING:
    from phpx.core.models.config import PhpxConfig
    from phpx.core.services.tool_runner.orchestration.orchestrator import Orchestrator


@contextmanager
def report_errors() -> Iterator[None]:
    """Exit 1 with ``❌ message`` on PhpxError; pass a tool's exit status through."""
    try:
        yield
    except ExecutionExit as e:
        sys.exit(e.code)
    except PhpxError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


def load_cli_config(ctx: click.Context) -> PhpxConfig:
    from phpx.core.config.loader import load_config

    return load_config(ctx.obj.get("config_path"))


def build_orchestrator(ctx: click.Context) -> Orchestrator:
    """Orchestrator for this invocation (runs the TTL sweep)."""
    from phpx.core.context import RunContext
    from phpx.core.services.tool_runner.orchestration.orchestrator import Orchestrator

    config = load_cli_config(ctx)
    return Orchestrator(RunContext(cache_dir=config.cache_dir), config)


def human_size(size: int) -> str:
    value = float(size)
    if value < 1024:
        return f"{size} B"
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024 or unit == "GB":
            break
    return f"{value:.1f} {unit}"


def format_timestamp(seconds: int) -> str:
    if not seconds:
        return "—"
    return datetime.fromtimestamp(seconds).strftime("%Y-%m-%d %H:%M")
