"""Core sync orchestration components."""

from .engine import SyncEngine, SyncEvent, SyncEventType, SyncPassResult
from .scheduler import RetryScheduler, ScheduledUpload
from .store import SyncMetadataStore, SyncRecord, SyncStatus

__all__ = [
    # Engine components
    "SyncEngine",
    "SyncEvent",
    "SyncEventType",
    "SyncPassResult",
    # Scheduling
    "RetryScheduler",
    "ScheduledUpload",
    # Persistence
    "SyncMetadataStore",
    "SyncRecord",
    "SyncStatus",
]
