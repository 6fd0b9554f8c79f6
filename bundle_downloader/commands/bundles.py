"""Bundle commands - sync metadata, inspect bundles, download payloads."""

from __future__ import annotations

import asyncio
import json
from datetime import UTC
from datetime import datetime
from pathlib import Path

import click
from rich.table import Table

from ..console import console
from ..downloader import BundleDownloader
from ..errors import BundleDownloaderError
from ..errors import BundleNotFoundError
from ..models import BundleMetadata
from ..models import dump_listing
from ..platform_key import detect_platform
from ..settings import DownloaderSettings
from ..settings import SettingsManager
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message


def _create_downloader(settings: DownloaderSettings) -> BundleDownloader:
    return BundleDownloader(settings=settings)


def _load_settings(sources: tuple[str, ...] = (), base_url: str | None = None) -> DownloaderSettings:
    settings = SettingsManager().load_settings()
    updates: dict[str, object] = {}
    if sources:
        updates["sources"] = list(sources)
    if base_url:
        updates["bundle_base_url"] = base_url
    return settings.model_copy(update=updates) if updates else settings


def _format_timestamp(value: int) -> str:
    try:
        return datetime.fromtimestamp(value, UTC).strftime("%Y-%m-%d %H:%M")
    except (OverflowError, OSError, ValueError):
        return str(value)


async def _sync(settings: DownloaderSettings) -> BundleDownloader:
    async with _create_downloader(settings) as downloader:
        await downloader.sync_all()
        return downloader


def _render_table(entries: list[tuple[str, BundleMetadata]], title: str, platform: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="green", no_wrap=True)
    table.add_column("Name")
    table.add_column("Author", style="magenta")
    table.add_column("Updated", style="cyan")
    table.add_column("Platforms", style="yellow")
    table.add_column("Tags", style="dim")

    for bundle_id, metadata in entries:
        platforms = ", ".join(
            f"[bold]{escape_markup(p)}[/bold]" if p == platform else escape_markup(p) for p in metadata.bundles
        )
        name = escape_markup(metadata.name)
        if metadata.error:
            name = f"{name} [red](error)[/red]"
        table.add_row(
            escape_markup(bundle_id),
            name,
            escape_markup(metadata.author),
            _format_timestamp(metadata.last_updated),
            platforms,
            escape_markup(", ".join(metadata.tags)),
        )
    return table


@click.command("sync")
@click.option("--source", "-s", "sources", multiple=True, help="Metadata listing URL (repeatable, overrides settings)")
@click.option("--all", "show_all", is_flag=True, help="Show bundles for every platform, not just this one")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def sync_command(sources: tuple[str, ...], show_all: bool, output_json: bool):
    """Fetch bundle metadata from all sources and list known bundles."""
    settings = _load_settings(sources)

    try:
        downloader = asyncio.run(_sync(settings))
    except BundleDownloaderError as e:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}")
        raise SystemExit(1) from e

    registry = downloader.registry
    if show_all:
        entries = list(registry.entries().items())
    else:
        entries = [(bundle_id, registry.lookup(bundle_id)) for bundle_id in registry.compatible_ids(downloader.platform)]

    if output_json:
        output = {
            "platform": downloader.platform,
            "total": len(entries),
            "bundles": dump_listing(dict(entries)),
        }
        print(json.dumps(output, indent=2))
        return

    if not entries:
        console.print(f"[yellow]No bundles found for platform {escape_markup(downloader.platform)}[/yellow]")
        if not show_all and len(registry):
            console.print("\nShow every platform: [cyan]bundle-downloader sync --all[/cyan]")
        return

    scope = "All Bundles" if show_all else f"{downloader.platform} Bundles"
    console.print(_render_table(entries, f"{scope} ({len(entries)})", downloader.platform))


@click.command("info")
@click.argument("bundle_id")
@click.option("--source", "-s", "sources", multiple=True, help="Metadata listing URL (repeatable, overrides settings)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info_command(bundle_id: str, sources: tuple[str, ...], output_json: bool):
    """Show metadata for a single bundle."""
    settings = _load_settings(sources)

    try:
        downloader = asyncio.run(_sync(settings))
        metadata = downloader.get_bundle_metadata(bundle_id)
    except BundleNotFoundError as e:
        console.print(f"[red]Error:[/red] Bundle '{escape_markup(bundle_id)}' not found")
        raise SystemExit(1) from e
    except BundleDownloaderError as e:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}")
        raise SystemExit(1) from e

    if output_json:
        print(json.dumps({bundle_id: metadata.to_dict()}, indent=2))
        return

    console.print(f"[bold]{escape_markup(metadata.name or bundle_id)}[/bold] [dim]({escape_markup(bundle_id)})[/dim]")
    if metadata.description:
        console.print(escape_markup(metadata.description))
    console.print(f"\n[cyan]Author:[/cyan]  {escape_markup(metadata.author)}")
    console.print(f"[cyan]Updated:[/cyan] {_format_timestamp(metadata.last_updated)}")
    if metadata.tags:
        console.print(f"[cyan]Tags:[/cyan]    {escape_markup(', '.join(metadata.tags))}")
    if metadata.error:
        console.print(f"[red]Source error:[/red] {escape_markup(metadata.error)}")

    console.print("\n[cyan]Files:[/cyan]")
    for platform, files in metadata.bundles.items():
        marker = " [green](this platform)[/green]" if platform == downloader.platform else ""
        console.print(f"  [bold]{escape_markup(platform)}[/bold]{marker}")
        for filename in files:
            console.print(f"    {escape_markup(filename)}")


@click.command("fetch")
@click.argument("filename")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Where to write the payload")
@click.option("--base-url", help="Base URL bundle filenames are resolved against")
def fetch_command(filename: str, output: Path | None, base_url: str | None):
    """Download a bundle payload."""
    settings = _load_settings(base_url=base_url)

    async def _fetch() -> bytes:
        async with _create_downloader(settings) as downloader:
            handle = await downloader.get_bundle(filename)
            return handle.data

    try:
        data = asyncio.run(_fetch())
    except BundleDownloaderError as e:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}")
        raise SystemExit(1) from e

    target = output or Path(Path(filename.split("?", 1)[0]).name or "bundle")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    console.print(f"[green]✓ Saved {escape_markup(filename)} to {escape_markup(target)}[/green] [dim]({len(data)} bytes)[/dim]")


@click.command("platform")
def platform_command():
    """Show the platform identifier used to select bundle variants."""
    settings = SettingsManager().load_settings()
    console.print(detect_platform(settings.platform))
