"""Durable per-recording sync state.

The SyncMetadataStore keeps one SyncRecord per artifact, reads the whole
mapping into memory at startup and rewrites it on every mutation so that a
process killed mid-sync never loses an attempt count.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    """Sync state of a single recording."""

    NOT_SYNCED = "not_synced"  # Never uploaded
    PENDING = "pending"  # Queued for upload
    SYNCING = "syncing"  # Currently uploading
    SYNCED = "synced"  # Upload acknowledged by the server
    FAILED = "failed"  # Last upload attempt failed

    @property
    def display_text(self) -> str:
        return {
            SyncStatus.NOT_SYNCED: "Not synced",
            SyncStatus.PENDING: "Pending",
            SyncStatus.SYNCING: "Syncing...",
            SyncStatus.SYNCED: "Synced",
            SyncStatus.FAILED: "Failed",
        }[self]


@dataclass
class SyncRecord:
    """Sync bookkeeping for one artifact."""

    artifact_id: str
    status: SyncStatus = SyncStatus.NOT_SYNCED
    last_attempt_at: Optional[datetime] = None
    attempt_count: int = 0
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "artifact_id": self.artifact_id,
            "status": self.status.value,
            "last_attempt_at": self.last_attempt_at.isoformat() if self.last_attempt_at else None,
            "attempt_count": self.attempt_count,
            "last_error": self.last_error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncRecord":
        """Create from dictionary."""
        attempt_count = int(data.get("attempt_count", 0))
        if attempt_count < 0:
            raise ValueError(f"negative attempt_count: {attempt_count}")

        return cls(
            artifact_id=data["artifact_id"],
            status=SyncStatus(data.get("status", SyncStatus.NOT_SYNCED.value)),
            last_attempt_at=datetime.fromisoformat(data["last_attempt_at"])
            if data.get("last_attempt_at")
            else None,
            attempt_count=attempt_count,
            last_error=data.get("last_error"),
        )

    def copy(self) -> "SyncRecord":
        return SyncRecord(
            artifact_id=self.artifact_id,
            status=self.status,
            last_attempt_at=self.last_attempt_at,
            attempt_count=self.attempt_count,
            last_error=self.last_error,
        )


class SyncMetadataStore:
    """Write-through mapping of artifact identifier to SyncRecord.

    Records are handed out as copies; callers mutate a copy and ``put`` it
    back, which persists the full mapping before returning. An unreadable
    file degrades to an empty store instead of raising.
    A file rewritten by another process (e.g. ``voxsync retry`` while
    ``voxsync watch`` runs) is reloaded before the next read or write.
    """

    def __init__(self, metadata_file: Path):
        """Initialize the store.

        Args:
            metadata_file: YAML file holding the persisted mapping
        """
        self.metadata_file = Path(metadata_file)
        self._records: Dict[str, SyncRecord] = {}
        self._signature: Optional[Tuple[int, int, int]] = None

        self._load_state()

    def _file_signature(self) -> Optional[Tuple[int, int, int]]:
        """Identity of the file on disk; every atomic save produces a new one."""
        try:
            stat = self.metadata_file.stat()
        except OSError:
            return None
        return (stat.st_ino, stat.st_mtime_ns, stat.st_size)

    def _load_state(self) -> None:
        """Load existing records from disk."""
        self._signature = self._file_signature()
        records = self._read_records()
        if records is not None:
            self._records = records
            logger.debug(f"Loaded {len(self._records)} sync records from {self.metadata_file}")

    def _refresh(self) -> None:
        """Reload the mapping if another process rewrote the file."""
        signature = self._file_signature()
        if signature is None or signature == self._signature:
            return
        logger.debug(f"Sync metadata changed on disk, reloading {self.metadata_file}")
        self._load_state()

    def _read_records(self) -> Optional[Dict[str, SyncRecord]]:
        """Parse the metadata file; None when it is missing or unusable."""
        if not self.metadata_file.exists():
            return None

        try:
            with open(self.metadata_file) as f:
                data = yaml.safe_load(f)
        except Exception as e:
            logger.warning(f"Could not load sync metadata, keeping current state: {e}")
            return None

        if data is None:
            return {}

        artifacts = data.get("artifacts") if isinstance(data, dict) else None
        if not isinstance(artifacts, dict):
            logger.warning(f"Sync metadata in {self.metadata_file} is malformed, ignoring it")
            return None

        records = {}
        for artifact_id, record_data in artifacts.items():
            try:
                record = SyncRecord.from_dict({**record_data, "artifact_id": str(artifact_id)})
            except Exception as e:
                logger.warning(f"Skipping malformed sync record for {artifact_id}: {e}")
                continue
            records[record.artifact_id] = record
        return records

    def get(self, artifact_id: str) -> Optional[SyncRecord]:
        """Get a copy of the record for an artifact, if any."""
        self._refresh()
        record = self._records.get(artifact_id)
        return record.copy() if record else None

    def put(self, record: SyncRecord) -> bool:
        """Store a record and flush the mapping to disk.

        Returns:
            True if the mapping was persisted
        """
        self._refresh()
        self._records[record.artifact_id] = record.copy()
        return self._save()

    def remove(self, artifact_id: str) -> bool:
        """Remove a record and flush the mapping to disk.

        Returns:
            True if a record existed and the mapping was persisted
        """
        self._refresh()
        if self._records.pop(artifact_id, None) is None:
            return False
        return self._save()

    def all_records(self) -> List[SyncRecord]:
        """Snapshot of every record, in registration order."""
        self._refresh()
        return [record.copy() for record in self._records.values()]

    def ids(self) -> List[str]:
        self._refresh()
        return list(self._records)

    def count_by_status(self) -> Dict[SyncStatus, int]:
        """Get number of records per status."""
        self._refresh()
        summary = {status: 0 for status in SyncStatus}
        for record in self._records.values():
            summary[record.status] += 1
        return summary

    def _save(self) -> bool:
        """Rewrite the mapping file atomically."""
        tmp_file = self.metadata_file.with_name(self.metadata_file.name + ".tmp")
        data = {
            "artifacts": {
                artifact_id: record.to_dict() for artifact_id, record in self._records.items()
            }
        }

        try:
            self.metadata_file.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_file, "w") as f:
                yaml.dump(data, f, default_flow_style=False, indent=2, sort_keys=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_file, self.metadata_file)
            self._signature = self._file_signature()
            return True
        except Exception as e:
            logger.error(f"Error saving sync metadata: {e}")
            return False

    def __contains__(self, artifact_id: object) -> bool:
        self._refresh()
        return artifact_id in self._records

    def __len__(self) -> int:
        self._refresh()
        return len(self._records)

    def __str__(self) -> str:
        summary = self.count_by_status()
        return (
            f"SyncMetadataStore({self.metadata_file}): "
            f"{summary[SyncStatus.SYNCED]} synced, "
            f"{summary[SyncStatus.FAILED]} failed, "
            f"{len(self._records)} total"
        )
