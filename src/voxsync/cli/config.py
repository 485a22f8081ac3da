"""Configuration CLI commands."""

from pathlib import Path
from typing import Optional

import click
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
import yaml

from ..config.settings import VoxSyncConfig
from ..config.validation import ConfigValidator
from ..utils.logging import get_logger
from .utils import get_config, get_console


@click.group("config")
@click.pass_context
def config_cmd(ctx):
    """Configuration management commands."""
    pass


@config_cmd.command("init")
@click.option(
    "--path",
    "-p",
    type=click.Path(path_type=Path),
    default="voxsync.yaml",
    help="Where to write the configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
@click.pass_context
def init_cmd(ctx, path: Path, force: bool):
    """Initialize a voxsync configuration file with defaults."""
    console = get_console(ctx)
    logger = get_logger()

    try:
        if path.exists() and not force:
            console.print(f"[yellow]Configuration already exists at {path}[/yellow]")
            console.print("Use --force to overwrite")
            return

        VoxSyncConfig.create_default_config(path)
        console.print(f"[green]✓ Configuration written to {path}[/green]")
        console.print("Edit server.base_url and storage.recordings_dir, then run 'voxsync sync'")

    except Exception as e:
        logger.error(f"Configuration initialization failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort()


@config_cmd.command("show")
@click.option("--raw", is_flag=True, help="Print the effective configuration as YAML")
@click.pass_context
def show_cmd(ctx, raw: bool):
    """Show the effective configuration."""
    console = get_console(ctx)
    config = get_config(ctx)

    if raw:
        text = yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False)
        console.print(Syntax(text, "yaml"))
        return

    console.print(Panel.fit("[bold blue]voxsync configuration[/bold blue]", border_style="blue"))

    table = Table(show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Upload URL", config.server.upload_url)
    table.add_row("Auth token", "set" if config.server.auth_token else "none")
    table.add_row("Upload timeout", f"{config.server.upload_timeout}s")
    table.add_row("Max retries", str(config.sync.max_retries))
    table.add_row("Retry delays", ", ".join(f"{d:g}s" for d in config.sync.retry_delays))
    table.add_row("Auto sync", "yes" if config.sync.auto_sync else "no")
    table.add_row("Recordings", str(config.storage.recordings_path))
    table.add_row("Metadata file", str(config.metadata_path))
    table.add_row("Preferred interfaces", ", ".join(config.network.preferred_interfaces))

    console.print(table)


@config_cmd.command("validate")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Config file to validate",
)
@click.pass_context
def validate_cmd(ctx, config_path: Optional[Path]):
    """Validate a configuration file."""
    console = get_console(ctx)

    config = VoxSyncConfig.load(config_path) if config_path else get_config(ctx)
    result = ConfigValidator(config).validate()

    for message in result.get_all_messages():
        color = "red" if message.startswith("[ERROR]") else "yellow"
        if message.startswith("[INFO]"):
            color = "dim"
        console.print(f"  [{color}]{message}[/{color}]")

    if result.is_valid:
        console.print(f"[green]{result.get_summary()}[/green]")
    else:
        console.print(f"[red]{result.get_summary()}[/red]")
        ctx.exit(1)
