"""voxsync - offline-first sync of local audio recordings.

Recordings are kept on the device and uploaded to a server once the
preferred (unmetered) network is available:
- Per-recording sync state that survives restarts
- Bounded retry with 5s/10s/30s backoff
- Single-flight sync passes triggered by new recordings, network
  transitions or the user
- Local deletion only after the server acknowledged an upload
"""

__version__ = "1.0.0"

# Core components
from .core.engine import SyncEngine, SyncEvent, SyncEventType, SyncPassResult  # noqa: I001
from .core.scheduler import RetryScheduler
from .core.store import SyncMetadataStore, SyncRecord, SyncStatus

# Transports
from .transport.base import (
    AudioFormat,
    ServerRejected,
    Success,
    TransportFailure,
    UploadTransport,
)
from .transport.http import HTTPUploadTransport

# Network and storage collaborators
from .network.signal import NetworkSignal, StaticNetworkSignal
from .network.monitor import InterfaceNetworkMonitor
from .storage.recordings import RecordingStore

# Configuration
from .config.settings import VoxSyncConfig

# Utilities
from .utils.logging import configure_logging, setup_logging

__all__ = [
    # Core
    "SyncEngine",
    "SyncEvent",
    "SyncEventType",
    "SyncPassResult",
    "RetryScheduler",
    "SyncMetadataStore",
    "SyncRecord",
    "SyncStatus",
    # Transports
    "UploadTransport",
    "HTTPUploadTransport",
    "Success",
    "ServerRejected",
    "TransportFailure",
    "AudioFormat",
    # Collaborators
    "NetworkSignal",
    "StaticNetworkSignal",
    "InterfaceNetworkMonitor",
    "RecordingStore",
    # Configuration
    "VoxSyncConfig",
    # Utilities
    "setup_logging",
    "configure_logging",
]
