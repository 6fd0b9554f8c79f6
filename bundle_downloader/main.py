"""bundle-downloader command line entry point."""

import click

from .commands import fetch_command
from .commands import info_command
from .commands import platform_command
from .commands import source
from .commands import sync_command
from .logging_setup import init_json_logging


@click.group(invoke_without_command=True)
@click.version_option(package_name="bundle-downloader")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="JSONL log file path")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level",
)
@click.pass_context
def cli(ctx: click.Context, log_file: str | None, log_level: str | None):
    """Bundle downloader - sync bundle metadata and download bundle payloads."""
    init_json_logging(log_file, log_level)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(sync_command)
cli.add_command(info_command)
cli.add_command(fetch_command)
cli.add_command(platform_command)
cli.add_command(source)


def main():
    cli()


if __name__ == "__main__":
    main()
