"""
phpx — CLI entrypoint.

Usage:
    phpx phpstan analyse src
    phpx phpstan@^1.10 --version
    phpx --no-local php-cs-fixer fix
    phpx cache list
    phpx config set cache_ttl 3600
"""

from __future__ import annotations

from pathlib import Path

import click

from phpx import __version__
from phpx.core.models.options import ToolOptions
from phpx.core.observability.logging_config import configure_cli_logging
from phpx.ui.cli.common import build_orchestrator, report_errors

RUN_COMMAND = "run"


class ToolGroup(click.Group):
    """Group that treats an unknown first positional as a tool to run."""

    def resolve_command(self, ctx, args):
        if args and not args[0].startswith("-") and self.get_command(ctx, args[0]) is None:
            return RUN_COMMAND, self.get_command(ctx, RUN_COMMAND), args
        return super().resolve_command(ctx, args)


@click.group(cls=ToolGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="phpx")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to config.yml (default: ~/.config/phpx/config.yml).",
)
@click.option("--clear-cache", is_flag=True,
              help="Clear the tool's cache first (the whole cache without a tool).")
@click.option("--no-cache", is_flag=True, help="Ignore cached artifacts.")
@click.option("--skip-verify", is_flag=True, help="Skip size, hash and checksum checks.")
@click.option("--php", "php_path", type=click.Path(dir_okay=False), default=None,
              help="PHP interpreter to run the tool with.")
@click.option("--no-local", "-n", is_flag=True,
              help="Ignore tools installed in vendor/bin or global Composer.")
@click.option("--no-interaction", is_flag=True,
              help="Pass --no-interaction to the tool.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    clear_cache: bool,
    no_cache: bool,
    skip_verify: bool,
    php_path: str | None,
    no_local: bool,
    no_interaction: bool,
) -> None:
    """phpx — run PHP command-line tools without installing them.

    \b
    phpx [OPTIONS] TOOL[@VERSION] [ARGS]...
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path).expanduser() if config_path else None
    ctx.obj["options"] = ToolOptions(
        clear_cache=clear_cache,
        no_cache=no_cache,
        skip_verify=skip_verify,
        php=Path(php_path).expanduser() if php_path else None,
        no_local=no_local,
        no_interaction=no_interaction,
    )

    # ── Logging setup (once, at process start) ──────────────────
    configure_cli_logging(debug=debug, verbose=verbose, quiet=quiet)

    if ctx.invoked_subcommand is not None:
        return

    if clear_cache:
        with report_errors():
            removed = build_orchestrator(ctx).clean_cache()
        click.secho(f"✅ Cleared {len(removed)} cache entr{'y' if len(removed) == 1 else 'ies'}",
                    fg="green")
        return

    click.echo(ctx.get_help())


@cli.command(
    RUN_COMMAND,
    add_help_option=False,
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("tool")
@click.argument("tool_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx: click.Context, tool: str, tool_args: tuple[str, ...]) -> None:
    """Run TOOL with ARGS (the default when TOOL is not a sub-command)."""
    options: ToolOptions = ctx.obj["options"]
    with report_errors():
        build_orchestrator(ctx).run_tool(tool, list(tool_args), options)


# ── Register sub-command groups ─────────────────────────────────

from phpx.ui.cli.cache import cache  # noqa: E402
from phpx.ui.cli.config import config  # noqa: E402
from phpx.ui.cli.overrides import add, list_installed, remove  # noqa: E402

cli.add_command(cache)
cli.add_command(config)
cli.add_command(add)
cli.add_command(remove)
cli.add_command(list_installed)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
