"""Metadata source commands - list, add and remove listing URLs."""

from __future__ import annotations

from typing import cast

import click
from rich.table import Table

from ..console import console
from ..settings import ScopeType
from ..settings import SettingsManager
from ..utils.error_format import escape_markup

_SCOPE_OPTIONS = [
    click.option("--local", "scope_flag", flag_value="local", help="Just you, this project"),
    click.option("--project", "scope_flag", flag_value="project", help="Shared project settings"),
    click.option("--global", "scope_flag", flag_value="user", help="All projects"),
]


def _scope_options(func):
    for option in reversed(_SCOPE_OPTIONS):
        func = option(func)
    return func


@click.group(invoke_without_command=True)
@click.pass_context
def source(ctx: click.Context):
    """Manage metadata listing sources."""
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@source.command(name="list")
def source_list():
    """Show the effective source list and where each URL is configured."""
    manager = SettingsManager()
    effective = manager.get_sources()
    scoped = {scope: manager.get_sources(scope) for scope in ("local", "project", "user")}

    table = Table(title=f"Metadata Sources ({len(effective)})", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", justify="right")
    table.add_column("URL", style="green")
    table.add_column("Scope", style="yellow")

    for index, url in enumerate(effective, start=1):
        scope = next((name for name, urls in scoped.items() if url in urls), "default")
        table.add_row(str(index), escape_markup(url), scope)

    console.print(table)


@source.command(name="add")
@click.argument("url")
@_scope_options
def source_add(url: str, scope_flag: str | None):
    """Add a metadata listing URL."""
    scope = cast(ScopeType, scope_flag or "project")
    if SettingsManager().add_source(url, scope=scope):
        console.print(f"[green]✓ Added {escape_markup(url)} ({scope})[/green]")
    else:
        console.print(f"[yellow]{escape_markup(url)} is already configured ({scope})[/yellow]")


@source.command(name="remove")
@click.argument("url")
@_scope_options
def source_remove(url: str, scope_flag: str | None):
    """Remove a metadata listing URL."""
    scope = cast(ScopeType, scope_flag or "project")
    if not SettingsManager().remove_source(url, scope=scope):
        console.print(f"[red]Error:[/red] {escape_markup(url)} is not configured ({scope})")
        raise SystemExit(1)
    console.print(f"[green]✓ Removed {escape_markup(url)} ({scope})[/green]")
