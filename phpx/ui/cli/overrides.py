"""
CLI commands for override (library-only) installs.

Thin wrappers over ``phpx.core.services.tool_runner.orchestration.overrides``.
"""

from __future__ import annotations

import click

from phpx.ui.cli.common import build_orchestrator, report_errors


@click.command("add")
@click.argument("package")
@click.option("--bootstrap", is_flag=True,
              help="Write phpx-bootstrap.php in the current directory.")
@click.pass_context
def add(ctx: click.Context, package: str, bootstrap: bool) -> None:
    """Install PACKAGE[@VERSION] as an override library."""
    from phpx.core.services.tool_runner.orchestration.overrides import add_override

    with report_errors():
        install_dir, bootstrap_path = add_override(
            build_orchestrator(ctx), package, bootstrap=bootstrap,
        )

    click.secho(f"✅ Installed {package}", fg="green")
    click.echo(f"   Autoload: {install_dir / 'vendor' / 'autoload.php'}")
    if bootstrap_path is not None:
        click.echo(f"   Bootstrap: {bootstrap_path}")
        click.echo(f"   Use with: php -d auto_prepend_file={bootstrap_path.name} ...")


@click.command("remove")
@click.argument("package")
@click.argument("version", required=False)
@click.pass_context
def remove(ctx: click.Context, package: str, version: str | None) -> None:
    """Remove override installs of PACKAGE (one VERSION, or all)."""
    from phpx.core.services.tool_runner.orchestration.overrides import remove_override

    with report_errors():
        removed = remove_override(build_orchestrator(ctx), package, version)

    for path in removed:
        click.echo(f"   🗑  {path.name}")
    click.secho(f"✅ Removed {len(removed)} override install(s)", fg="green")


@click.command("list")
@click.pass_context
def list_installed(ctx: click.Context) -> None:
    """List override installs."""
    from phpx.core.services.tool_runner.orchestration.overrides import list_overrides

    with report_errors():
        overrides = list_overrides(build_orchestrator(ctx))

    if not overrides:
        click.echo("No override packages installed.")
        return

    click.secho("📚 Override packages:", fg="cyan", bold=True)
    for override in overrides:
        version = override.version or "?"
        click.echo(f"   • {override.package} {version}  → {override.path}")
