"""
CLI commands for the user configuration file.
"""

from __future__ import annotations

import click

from phpx.ui.cli.common import load_cli_config, report_errors


def _config_path(ctx: click.Context):
    from phpx.core.config.loader import default_config_path

    return ctx.obj.get("config_path") or default_config_path()


@click.group()
def config() -> None:
    """Configuration — get, set and locate config.yml."""


@config.command("get")
@click.argument("key")
@click.pass_context
def get(ctx: click.Context, key: str) -> None:
    """Print the value of KEY."""
    from phpx.core.config.loader import get_config_value

    with report_errors():
        value = get_config_value(load_cli_config(ctx), key)
    click.echo("" if value is None else str(value))


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_value(ctx: click.Context, key: str, value: str) -> None:
    """Set KEY to VALUE and save config.yml."""
    from phpx.core.config.loader import save_config, set_config_value

    with report_errors():
        updated = set_config_value(load_cli_config(ctx), key, value)
        path = save_config(updated, _config_path(ctx))
    click.secho(f"✅ {key} = {getattr(updated, key)}", fg="green")
    click.echo(f"   Saved to {path}")


@config.command("path")
@click.pass_context
def path(ctx: click.Context) -> None:
    """Print the config file location."""
    click.echo(str(_config_path(ctx)))
