"""Sync engine for opportunistic recording uploads.

The SyncEngine ties the metadata store, retry scheduler, upload transport
and network signal together. It runs single-flight sync passes that upload
eligible recordings one at a time, persists every attempt before making it,
and deletes a recording locally only after the server acknowledged it.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import logging
from typing import Awaitable, Callable, List, Optional, Set

from ..network.signal import NetworkSignal
from ..storage.recordings import RecordingStore
from ..transport.base import (
    AudioFormat,
    ServerRejected,
    Success,
    UploadError,
    UploadOutcome,
    UploadTransport,
)
from ..utils.common import truncate
from .scheduler import RetryScheduler
from .store import SyncMetadataStore, SyncRecord, SyncStatus

logger = logging.getLogger(__name__)

NETWORK_REQUIRED_ERROR = "WiFi required for sync"


class SyncEventType(Enum):
    """Kinds of change published to subscribers."""

    RECORD_CHANGED = "record_changed"
    RECORD_REMOVED = "record_removed"
    SYNCING_CHANGED = "syncing_changed"


@dataclass
class SyncEvent:
    """Change notification for the presentation layer."""

    event_type: SyncEventType
    artifact_id: Optional[str] = None
    record: Optional[SyncRecord] = None
    is_syncing: Optional[bool] = None


@dataclass
class SyncPassResult:
    """Summary of one sync pass."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    skipped_reason: Optional[str] = None
    attempted: List[str] = field(default_factory=list)
    synced: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def executed(self) -> bool:
        """True if the pass got past the single-flight and network checks."""
        return self.skipped_reason is None

    @property
    def duration(self) -> Optional[float]:
        """Pass duration in seconds."""
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None


SyncListener = Callable[[SyncEvent], None]


class SyncEngine:
    """Orchestrates uploads of locally recorded artifacts.

    Triggers (new recordings, transitions onto the preferred network and
    manual requests) all funnel into ``sync_pending``. At most one pass runs
    at a time; a trigger arriving while a pass is running is dropped rather
    than queued, and the next trigger picks up whatever is still eligible.
    """

    def __init__(
        self,
        store: SyncMetadataStore,
        transport: UploadTransport,
        recordings: RecordingStore,
        network: NetworkSignal,
        scheduler: Optional[RetryScheduler] = None,
        auth_token: str = "",
        auto_sync: bool = True,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the SyncEngine.

        Args:
            store: Durable per-recording sync state
            transport: Uploader used for every attempt
            recordings: Local payload storage
            network: Preferred-network signal
            scheduler: Retry policy (defaults to 3 attempts, 5/10/30s backoff)
            auth_token: Bearer credential; empty sends none
            auto_sync: Start a pass when the preferred network becomes available
            sleep: Coroutine used for backoff waits
            clock: Source of attempt timestamps
        """
        self.store = store
        self.transport = transport
        self.recordings = recordings
        self.network = network
        self.scheduler = scheduler or RetryScheduler()
        self.auth_token = auth_token
        self.auto_sync = auto_sync
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or datetime.now

        # Observable state
        self.last_sync_error: Optional[str] = None
        self.last_sync_time: Optional[datetime] = None
        self._syncing = False

        self._listeners: List[SyncListener] = []
        self._pass_tasks: Set[asyncio.Task] = set()
        self._unsubscribe_network: Optional[Callable[[], None]] = None

        logger.debug(
            f"SyncEngine initialized: max_retries={self.scheduler.max_retries}, "
            f"backoff={self.scheduler.backoff_table}, auto_sync={self.auto_sync}"
        )

    # Lifecycle

    def start(self) -> List[str]:
        """Reconcile with disk and begin listening for network transitions.

        Returns:
            Identifiers of recordings discovered without a sync record
        """
        if self._unsubscribe_network is None:
            self._unsubscribe_network = self.network.on_transition(self._on_network_transition)

        discovered = self.reconcile()
        if discovered:
            self.request_sync("registration")
        return discovered

    async def stop(self) -> None:
        """Stop listening for transitions and wait for in-flight passes."""
        if self._unsubscribe_network is not None:
            self._unsubscribe_network()
            self._unsubscribe_network = None
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait until every scheduled pass has finished."""
        while self._pass_tasks:
            await asyncio.gather(*list(self._pass_tasks), return_exceptions=True)

    def reconcile(self) -> List[str]:
        """Bring the metadata store in line with the recordings on disk.

        Recordings without a record are registered as not synced. Records
        left in ``syncing`` by an interrupted process become ``failed`` with
        their attempt count kept, and synced recordings still on disk get
        their local cleanup retried.

        Returns:
            Identifiers of newly registered recordings
        """
        discovered = []

        try:
            on_disk = self.recordings.list_artifacts()
        except OSError as e:
            logger.error(f"Could not list recordings: {e}")
            on_disk = []

        for artifact_id in on_disk:
            if artifact_id not in self.store:
                logger.info(f"Marking existing recording as not synced: {artifact_id}")
                self._save(SyncRecord(artifact_id=artifact_id))
                discovered.append(artifact_id)

        for record in self.store.all_records():
            if record.status == SyncStatus.SYNCING and not self._syncing:
                logger.warning(f"Upload of {record.artifact_id} was interrupted")
                record.status = SyncStatus.FAILED
                record.last_error = "Interrupted"
                self._save(record)
            elif record.status == SyncStatus.SYNCED and record.artifact_id in on_disk:
                self._delete_payload(record.artifact_id)

        return discovered

    # Recording subsystem notifications

    def register(self, artifact_id: str, reset: bool = False) -> SyncRecord:
        """Create the sync record for a recording.

        Registering a known recording again is a no-op unless ``reset`` is
        set, which starts it over as not synced with no attempts.
        """
        existing = self.store.get(artifact_id)
        if existing is not None and not reset:
            logger.debug(f"{artifact_id} already registered ({existing.status.value})")
            return existing

        logger.info(f"Marking {artifact_id} as not synced")
        record = SyncRecord(artifact_id=artifact_id)
        self._save(record)
        return record

    def on_artifact_created(self, artifact_id: str) -> None:
        """Register a new recording and try to sync it right away."""
        self.register(artifact_id)
        self.request_sync("registration")

    def on_artifact_deleted_by_user(self, artifact_id: str) -> None:
        """Forget a recording the user deleted."""
        if artifact_id not in self.store:
            return

        self.store.remove(artifact_id)
        logger.info(f"Removed sync metadata for {artifact_id}")
        self._notify(SyncEvent(SyncEventType.RECORD_REMOVED, artifact_id=artifact_id))

    def delete_artifact(self, artifact_id: str) -> bool:
        """Delete a recording locally and forget it.

        Returns:
            True if a local file was removed
        """
        removed = self._delete_payload(artifact_id)
        self.on_artifact_deleted_by_user(artifact_id)
        return removed

    def retry_failed(self, artifact_id: Optional[str] = None) -> List[str]:
        """Re-register failed recordings so automatic passes retry them.

        Args:
            artifact_id: Only reset this recording; all failed ones if None

        Returns:
            Identifiers that were reset
        """
        reset = []
        for record in self.store.all_records():
            if artifact_id is not None and record.artifact_id != artifact_id:
                continue
            if record.status != SyncStatus.FAILED:
                continue
            self.register(record.artifact_id, reset=True)
            reset.append(record.artifact_id)

        if reset:
            logger.info(f"Reset {len(reset)} failed recordings for retry")
        return reset

    # Triggers

    async def trigger_manual_sync(self) -> None:
        """Run a sync pass on user request."""
        logger.info("Manual sync triggered")
        await self.sync_pending()

    def _on_network_transition(self, preferred: bool) -> None:
        if not preferred:
            logger.debug("Left preferred network")
            return
        if not self.auto_sync:
            logger.debug("Preferred network available, auto sync disabled")
            return
        self.request_sync("network")

    def request_sync(self, reason: str = "manual") -> Optional[asyncio.Task]:
        """Schedule a sync pass on the running event loop without awaiting it.

        Returns:
            The scheduled task, or None when no loop is running
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop, {reason} sync deferred to next trigger")
            return None

        task = loop.create_task(self.sync_pending())
        self._pass_tasks.add(task)
        task.add_done_callback(self._pass_tasks.discard)
        logger.debug(f"Scheduled sync pass ({reason})")
        return task

    # Sync passes

    async def sync_pending(self) -> SyncPassResult:
        """Run one sync pass over every eligible recording.

        Returns:
            Summary of the pass; ``skipped_reason`` is set when the pass did
            not run because another one was active or the device is off the
            preferred network.
        """
        result = SyncPassResult(started_at=self._clock())

        if self._syncing:
            logger.info("Already syncing, skipping")
            result.skipped_reason = "already_syncing"
            return result

        if not self.network.is_preferred_network:
            logger.info("Not on preferred network, skipping sync")
            result.skipped_reason = "not_preferred_network"
            return result

        self._set_syncing(True)
        try:
            self.last_sync_error = None
            plan = self.scheduler.plan(self.store.all_records())
            logger.info(f"Found {len(plan)} pending recordings to sync")

            for item in plan:
                if item.delay > 0:
                    logger.info(
                        f"Waiting {item.delay}s before retry attempt "
                        f"{item.attempt_number} for {item.artifact_id}"
                    )
                    await self._sleep(item.delay)

                record = self.store.get(item.artifact_id)
                if record is None or not self.scheduler.is_eligible(record):
                    logger.debug(f"{item.artifact_id} no longer eligible, skipping")
                    continue

                result.attempted.append(item.artifact_id)
                if await self._attempt(record):
                    result.synced.append(item.artifact_id)
                else:
                    result.failed.append(item.artifact_id)

            self.last_sync_time = self._clock()
        finally:
            result.finished_at = self._clock()
            self._set_syncing(False)

        logger.info(
            f"Sync pass finished: {len(result.synced)} synced, {len(result.failed)} failed"
        )
        return result

    async def sync_artifact(self, artifact_id: str) -> Optional[SyncRecord]:
        """Upload a single recording outside a full pass.

        Honors the network gate, the single-flight guard, the retry ceiling
        and the backoff delay of a previously failed recording.

        Returns:
            The record after the attempt, or None if nothing was attempted
        """
        if not self.network.is_preferred_network:
            self.last_sync_error = NETWORK_REQUIRED_ERROR
            logger.info(f"Not on preferred network, not syncing {artifact_id}")
            return None

        if self._syncing:
            logger.info("Already syncing, skipping")
            return None

        record = self.store.get(artifact_id)
        if record is None:
            record = self.register(artifact_id)

        if not self.scheduler.is_eligible(record):
            logger.info(f"{artifact_id} is not eligible for upload ({record.status.value})")
            return None

        self._set_syncing(True)
        try:
            delay = self.scheduler.delay_for(record)
            if delay > 0:
                logger.info(f"Waiting {delay}s before retrying {artifact_id}")
                await self._sleep(delay)

                record = self.store.get(artifact_id)
                if record is None or not self.scheduler.is_eligible(record):
                    logger.debug(f"{artifact_id} no longer eligible, skipping")
                    return None

            await self._attempt(record)
        finally:
            self._set_syncing(False)
        return self.store.get(artifact_id)

    async def _attempt(self, record: SyncRecord) -> bool:
        """Make one upload attempt; the record is persisted before uploading."""
        artifact_id = record.artifact_id

        record.status = SyncStatus.SYNCING
        record.last_attempt_at = self._clock()
        record.attempt_count += 1
        self._save(record)

        logger.info(
            f"Uploading {artifact_id} (attempt {record.attempt_count}/{self.scheduler.max_retries})"
        )

        try:
            payload = self.recordings.read_payload(artifact_id)
        except FileNotFoundError:
            logger.error(f"File not found: {artifact_id}")
            self._mark_failed(artifact_id, "File not found")
            return False
        except (OSError, ValueError) as e:
            self._mark_failed(artifact_id, f"Could not read recording: {e}")
            return False

        audio_format = AudioFormat.from_filename(artifact_id)

        try:
            outcome: UploadOutcome = await self.transport.upload(
                artifact_id,
                payload,
                audio_format.mime_type,
                audio_format.file_extension,
                self.auth_token or None,
            )
        except UploadError as e:
            self._mark_failed(artifact_id, str(e))
            return False
        except Exception as e:
            logger.exception(f"Unexpected error uploading {artifact_id}")
            self._mark_failed(artifact_id, f"Upload error: {e}")
            return False

        if isinstance(outcome, Success):
            logger.info(f"✓ Successfully uploaded {artifact_id}")
            self._mark_synced(artifact_id)
            return True

        if isinstance(outcome, ServerRejected) and outcome.body:
            logger.debug(f"Response: {truncate(outcome.body)}")
        self._mark_failed(artifact_id, outcome.describe())
        return False

    def _mark_synced(self, artifact_id: str) -> None:
        record = self.store.get(artifact_id)
        if record is None:
            logger.info(f"{artifact_id} was deleted during upload")
        else:
            record.status = SyncStatus.SYNCED
            record.last_error = None
            self._save(record)

        # Upload is confirmed; a failed cleanup never reverts the status
        self._delete_payload(artifact_id)

    def _mark_failed(self, artifact_id: str, error: str) -> None:
        logger.warning(f"✗ Upload of {artifact_id} failed: {error}")
        self.last_sync_error = error

        record = self.store.get(artifact_id)
        if record is None:
            logger.info(f"{artifact_id} was deleted during upload")
            return

        record.status = SyncStatus.FAILED
        record.last_error = error
        self._save(record)

    def _delete_payload(self, artifact_id: str) -> bool:
        try:
            return self.recordings.delete(artifact_id)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to delete {artifact_id}: {e}")
            return False

    # Queries

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    def get_status(self, artifact_id: str) -> SyncStatus:
        """Current status of a recording; unknown ones are not synced."""
        record = self.store.get(artifact_id)
        return record.status if record else SyncStatus.NOT_SYNCED

    def get_pending_count(self) -> int:
        """Number of recordings not yet synced."""
        return sum(1 for record in self.store.all_records() if record.status != SyncStatus.SYNCED)

    def records(self) -> List[SyncRecord]:
        return self.store.all_records()

    def total_storage_used(self) -> int:
        """Bytes used by recordings still stored locally."""
        try:
            return self.recordings.total_size()
        except OSError as e:
            logger.error(f"Error calculating storage: {e}")
            return 0

    # Change notification

    def subscribe(self, listener: SyncListener) -> Callable[[], None]:
        """Register a listener for sync events.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: SyncEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Sync listener failed: {e}")

    def _save(self, record: SyncRecord) -> None:
        self.store.put(record)
        logger.debug(f"{record.artifact_id} -> {record.status.value}")
        self._notify(
            SyncEvent(SyncEventType.RECORD_CHANGED, artifact_id=record.artifact_id, record=record.copy())
        )

    def _set_syncing(self, value: bool) -> None:
        self._syncing = value
        self._notify(SyncEvent(SyncEventType.SYNCING_CHANGED, is_syncing=value))

    def __str__(self) -> str:
        return (
            f"SyncEngine(records={len(self.store)}, pending={self.get_pending_count()}, "
            f"syncing={self._syncing})"
        )
