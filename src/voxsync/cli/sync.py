"""Sync CLI commands."""

import asyncio
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..core.engine import SyncEvent, SyncEventType, SyncPassResult
from ..core.scheduler import RetryScheduler
from ..core.store import SyncStatus
from ..network.monitor import InterfaceNetworkMonitor
from ..utils.common import format_duration, format_size, format_timestamp
from ..utils.logging import get_logger
from .utils import build_engine, confirm_action, get_config, get_console, open_stores

STATUS_STYLES = {
    SyncStatus.NOT_SYNCED: "dim",
    SyncStatus.PENDING: "yellow",
    SyncStatus.SYNCING: "blue",
    SyncStatus.SYNCED: "green",
    SyncStatus.FAILED: "red",
}


@click.command("status")
@click.argument("artifact_id", required=False)
@click.pass_context
def status_cmd(ctx, artifact_id: Optional[str]):
    """Show sync status of local recordings."""
    console = get_console(ctx)
    config = get_config(ctx)

    try:
        store, recordings = open_stores(config)
        scheduler = RetryScheduler(config.sync.max_retries, config.sync.retry_delays)

        records = store.all_records()
        if artifact_id:
            records = [r for r in records if r.artifact_id == artifact_id]
            if not records:
                console.print(f"[yellow]{artifact_id}: Not synced (no sync record)[/yellow]")
                return

        if not records:
            console.print("[yellow]No recordings tracked[/yellow]")
            return

        table = Table(title="Recording Sync Status")
        table.add_column("Recording", style="cyan")
        table.add_column("Status")
        table.add_column("Attempts", justify="right")
        table.add_column("Last Attempt")
        table.add_column("Last Error", style="red")

        for record in records:
            style = STATUS_STYLES[record.status]
            status_text = record.status.display_text
            if scheduler.is_exhausted(record):
                status_text += " (retries exhausted)"
            table.add_row(
                record.artifact_id,
                f"[{style}]{status_text}[/{style}]",
                f"{record.attempt_count}/{scheduler.max_retries}",
                format_timestamp(record.last_attempt_at),
                record.last_error or "",
            )

        console.print(table)

        pending = sum(1 for r in store.all_records() if r.status != SyncStatus.SYNCED)
        console.print(f"\nPending: [bold]{pending}[/bold]")
        console.print(f"Storage used: [bold]{format_size(recordings.total_size())}[/bold]")

    except Exception as e:
        get_logger().error(f"Status failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort()


@click.command("sync")
@click.option(
    "--assume-preferred",
    is_flag=True,
    help="Treat the current network as the preferred network",
)
@click.pass_context
def sync_cmd(ctx, assume_preferred: bool):
    """Upload pending recordings now."""
    console = get_console(ctx)
    config = get_config(ctx)

    try:
        result = asyncio.run(_run_manual_sync(config, assume_preferred))
        _display_pass_result(console, result)
    except Exception as e:
        get_logger().error(f"Sync failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort()


@click.command("watch")
@click.option(
    "--assume-preferred",
    is_flag=True,
    help="Treat the current network as the preferred network",
)
@click.option("--sync-on-start", is_flag=True, help="Run a sync pass immediately")
@click.option(
    "--interval", "-i", type=float, help="Seconds between scans for new recordings"
)
@click.pass_context
def watch_cmd(ctx, assume_preferred: bool, sync_on_start: bool, interval: Optional[float]):
    """Keep running, syncing whenever the preferred network is available."""
    console = get_console(ctx)
    config = get_config(ctx)

    try:
        asyncio.run(
            _watch(
                console,
                config,
                assume_preferred,
                sync_on_start,
                interval or config.network.poll_interval,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Watching stopped[/yellow]")
    except Exception as e:
        get_logger().error(f"Watch failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort()


@click.command("retry")
@click.argument("artifact_id", required=False)
@click.pass_context
def retry_cmd(ctx, artifact_id: Optional[str]):
    """Reset failed recordings so they are retried."""
    console = get_console(ctx)
    config = get_config(ctx)

    try:
        engine, _, _ = build_engine(config, assume_preferred=True)
        reset = engine.retry_failed(artifact_id)

        if not reset:
            console.print("[yellow]No failed recordings to retry[/yellow]")
            return

        for item in reset:
            console.print(f"  [green]↻ {item}[/green]")
        console.print(f"[green]Reset {len(reset)} recordings; they sync on the next pass[/green]")
    except Exception as e:
        get_logger().error(f"Retry failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort()


@click.command("delete")
@click.argument("artifact_id")
@click.option("--force", "-f", is_flag=True, help="Delete without confirmation")
@click.pass_context
def delete_cmd(ctx, artifact_id: str, force: bool):
    """Delete a local recording and its sync state."""
    console = get_console(ctx)
    config = get_config(ctx)

    try:
        engine, _, _ = build_engine(config, assume_preferred=True)
        status = engine.get_status(artifact_id)

        if not force and status != SyncStatus.SYNCED:
            if not confirm_action(f"{artifact_id} is not synced ({status.display_text}). Delete?"):
                console.print("Cancelled.")
                return

        removed = engine.delete_artifact(artifact_id)
        if removed:
            console.print(f"[green]Deleted {artifact_id}[/green]")
        else:
            console.print(f"[yellow]{artifact_id} was not on disk; sync state removed[/yellow]")
    except Exception as e:
        get_logger().error(f"Delete failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort()


# Helper functions


async def _run_manual_sync(config, assume_preferred: bool) -> SyncPassResult:
    """Reconcile with disk and run one sync pass."""
    engine, transport, _ = build_engine(config, assume_preferred)
    try:
        engine.reconcile()
        get_logger(__name__).info("Manual sync triggered")
        return await engine.sync_pending()
    finally:
        await transport.close()


async def _watch(
    console: Console, config, assume_preferred: bool, sync_on_start: bool, interval: float
) -> None:
    """Run the engine until cancelled, scanning for new recordings."""
    engine, transport, network = build_engine(config, assume_preferred)
    engine.subscribe(lambda event: _print_event(console, event))

    if isinstance(network, InterfaceNetworkMonitor):
        await network.start()

    console.print(
        f"[bold blue]Watching {config.storage.recordings_path}[/bold blue] "
        f"(preferred network: {network.is_preferred_network})"
    )

    try:
        engine.start()
        if sync_on_start:
            engine.request_sync("startup")

        while True:
            await asyncio.sleep(interval)
            discovered = engine.reconcile()
            if discovered:
                engine.request_sync("registration")
    finally:
        if isinstance(network, InterfaceNetworkMonitor):
            await network.stop()
        await engine.stop()
        await transport.close()


def _print_event(console: Console, event: SyncEvent) -> None:
    if event.event_type == SyncEventType.RECORD_CHANGED and event.record is not None:
        style = STATUS_STYLES[event.record.status]
        console.print(
            f"  {event.artifact_id}: [{style}]{event.record.status.display_text}[/{style}]"
            + (f" - {event.record.last_error}" if event.record.last_error else "")
        )
    elif event.event_type == SyncEventType.RECORD_REMOVED:
        console.print(f"  {event.artifact_id}: [dim]removed[/dim]")


def _display_pass_result(console: Console, result: SyncPassResult) -> None:
    if result.skipped_reason == "not_preferred_network":
        console.print("[yellow]Not on the preferred network, nothing uploaded[/yellow]")
        console.print("Use --assume-preferred to sync over the current connection")
        return
    if result.skipped_reason == "already_syncing":
        console.print("[yellow]A sync is already running[/yellow]")
        return

    if not result.attempted:
        console.print("[green]Nothing to sync[/green]")
        return

    for artifact_id in result.synced:
        console.print(f"  [green]✓ {artifact_id}[/green]")
    for artifact_id in result.failed:
        console.print(f"  [red]✗ {artifact_id}[/red]")

    duration = format_duration(result.duration or 0.0)
    console.print(
        f"\nSynced {len(result.synced)}, failed {len(result.failed)} in {duration}"
    )
