"""CLI utility functions."""

from typing import Tuple

import click
from rich.console import Console

from ..config.settings import VoxSyncConfig
from ..core.engine import SyncEngine
from ..core.scheduler import RetryScheduler
from ..core.store import SyncMetadataStore
from ..network.monitor import InterfaceNetworkMonitor
from ..network.signal import NetworkSignal, StaticNetworkSignal
from ..storage.recordings import RecordingStore
from ..transport.http import HTTPUploadTransport


def get_config(ctx: click.Context) -> VoxSyncConfig:
    """Configuration loaded by the root command, or defaults."""
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        ctx.obj["config"] = VoxSyncConfig.load()
    return ctx.obj["config"]


def get_console(ctx: click.Context) -> Console:
    ctx.ensure_object(dict)
    return ctx.obj.setdefault("console", Console())


def open_stores(config: VoxSyncConfig) -> Tuple[SyncMetadataStore, RecordingStore]:
    """Open the metadata store and recording storage described by a config."""
    recordings = RecordingStore(config.storage.recordings_path, config.storage.extensions)
    store = SyncMetadataStore(config.metadata_path)
    return store, recordings


def create_network_signal(config: VoxSyncConfig, assume_preferred: bool = False) -> NetworkSignal:
    """Create the network signal for a CLI session.

    Args:
        config: Configuration with network detection settings
        assume_preferred: Treat the current network as preferred without probing
    """
    if assume_preferred:
        return StaticNetworkSignal(preferred=True)
    return InterfaceNetworkMonitor(
        patterns=config.network.preferred_interfaces,
        poll_interval=config.network.poll_interval,
    )


def build_engine(
    config: VoxSyncConfig, assume_preferred: bool = False
) -> Tuple[SyncEngine, HTTPUploadTransport, NetworkSignal]:
    """Wire a SyncEngine from configuration.

    Returns:
        The engine plus the transport and network signal it was built with,
        so the caller can close and start them.
    """
    store, recordings = open_stores(config)
    transport = HTTPUploadTransport(
        config.server.upload_url, timeout=config.server.upload_timeout
    )
    network = create_network_signal(config, assume_preferred)
    scheduler = RetryScheduler(
        max_retries=config.sync.max_retries, backoff_table=config.sync.retry_delays
    )

    engine = SyncEngine(
        store=store,
        transport=transport,
        recordings=recordings,
        network=network,
        scheduler=scheduler,
        auth_token=config.server.auth_token,
        auto_sync=config.sync.auto_sync,
    )
    return engine, transport, network


def confirm_action(message: str, default: bool = False) -> bool:
    """Prompt user for confirmation.

    Args:
        message: Confirmation message
        default: Default response if user just presses enter

    Returns:
        True if user confirms, False otherwise
    """
    console = Console()

    default_str = "[Y/n]" if default else "[y/N]"
    prompt = f"{message} {default_str}: "

    try:
        response = console.input(prompt).strip().lower()
        if not response:
            return default
        return response in ("y", "yes", "true", "1")
    except (KeyboardInterrupt, EOFError):
        console.print("\nCancelled.")
        return False
