"""
CLI commands for the artifact cache.

Thin wrappers over ``ArtifactCache`` via the orchestrator.
"""

from __future__ import annotations

import click

from phpx.ui.cli.common import (
    build_orchestrator,
    format_timestamp,
    human_size,
    report_errors,
)


@click.group()
def cache() -> None:
    """Cache — list, inspect and clean cached tools."""


@cache.command("clean")
@click.argument("tool", required=False)
@click.pass_context
def clean(ctx: click.Context, tool: str | None) -> None:
    """Remove cached artifacts (one TOOL, or everything)."""
    with report_errors():
        removed = build_orchestrator(ctx).clean_cache(tool)

    if not removed:
        target = f" for {tool}" if tool else ""
        click.secho(f"⚠️  Nothing cached{target}", fg="yellow")
        return
    click.secho(f"✅ Removed {len(removed)} cache entr{'y' if len(removed) == 1 else 'ies'}",
                fg="green")


@cache.command("list")
@click.pass_context
def list_entries(ctx: click.Context) -> None:
    """List cached tools."""
    with report_errors():
        orch = build_orchestrator(ctx)
    entries = orch.cache.entries()

    if not entries:
        click.echo("Cache is empty.")
        return

    click.secho("📦 Cached tools:", fg="cyan", bold=True)
    for entry in entries:
        kind = "composer" if entry.is_composer else "phar"
        size = human_size(entry.size) if entry.size else "—"
        click.echo(
            f"   • {entry.key:<40} {kind:<9} {size:>10}   "
            f"last used {format_timestamp(entry.last_accessed)}"
        )

    total = orch.cache.total_size()
    limit = orch.config.max_cache_size
    click.echo()
    click.echo(f"   Total: {human_size(total)} of {human_size(limit)}")
    if total > limit:
        click.secho(
            "⚠️  Cache exceeds max_cache_size — run 'phpx cache clean' to free space",
            fg="yellow",
        )


@cache.command("info")
@click.argument("tool")
@click.pass_context
def info(ctx: click.Context, tool: str) -> None:
    """Show cache details for TOOL."""
    with report_errors():
        orch = build_orchestrator(ctx)
    entries = orch.cache.entries(tool)

    if not entries:
        click.secho(f"⚠️  No cache entries for {tool}", fg="yellow")
        return

    for entry in entries:
        click.secho(f"\n📋 {entry.key}", fg="cyan", bold=True)
        click.echo(f"   Type:       {'composer install' if entry.is_composer else 'phar'}")
        click.echo(f"   Path:       {entry.file_path}")
        if entry.is_composer:
            click.echo(f"   Binary:     {entry.binary_path}")
        if entry.download_url:
            click.echo(f"   Source:     {entry.download_url}")
        if entry.file_hash:
            click.echo(f"   Hash:       {entry.file_hash}")
        if entry.size:
            click.echo(f"   Size:       {human_size(entry.size)}")
        click.echo(f"   Created:    {format_timestamp(entry.created_at)}")
        click.echo(f"   Last used:  {format_timestamp(entry.last_accessed)}")
    click.echo()
