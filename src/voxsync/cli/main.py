"""Main CLI entry point for voxsync."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from .. import __version__
from ..config.settings import VoxSyncConfig
from ..utils.logging import configure_logging
from .config import config_cmd
from .sync import delete_cmd, retry_cmd, status_cmd, sync_cmd, watch_cmd

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="voxsync")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to voxsync configuration file",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, config_path: Optional[Path]):
    """voxsync - Offline-first upload of local audio recordings."""

    ctx.ensure_object(dict)

    config = VoxSyncConfig.load(config_path)

    logger = configure_logging(config.logging, verbose=verbose, quiet=quiet)
    ctx.obj["logger"] = logger
    ctx.obj["config"] = config
    ctx.obj.setdefault("console", console)


cli.add_command(status_cmd)  # voxsync status
cli.add_command(sync_cmd)  # voxsync sync
cli.add_command(watch_cmd)  # voxsync watch
cli.add_command(retry_cmd)  # voxsync retry
cli.add_command(delete_cmd)  # voxsync delete
cli.add_command(config_cmd)  # voxsync config init/show/validate


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
