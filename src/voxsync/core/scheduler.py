"""Retry eligibility and backoff for sync passes."""

from dataclasses import dataclass
import logging
from typing import Iterable, List, Optional, Sequence

from .store import SyncRecord, SyncStatus

logger = logging.getLogger(__name__)

ELIGIBLE_STATUSES = frozenset({SyncStatus.NOT_SYNCED, SyncStatus.PENDING, SyncStatus.FAILED})


@dataclass(frozen=True)
class ScheduledUpload:
    """One planned upload attempt within a pass."""

    artifact_id: str
    delay: float  # Seconds to wait before the attempt
    attempt_number: int  # 1-based number of the attempt about to be made


class RetryScheduler:
    """Decides which records are eligible now and how long to back off.

    A record is eligible while its status is not_synced, pending or failed
    and it has been attempted fewer than ``max_retries`` times. The delay
    before an attempt is looked up in ``backoff_table`` by the number of
    previous attempts; first attempts are never delayed.
    """

    def __init__(self, max_retries: int = 3, backoff_table: Optional[Sequence[float]] = None):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        self.max_retries = max_retries
        self.backoff_table = list(backoff_table) if backoff_table is not None else [5.0, 10.0, 30.0]

        if not self.backoff_table:
            raise ValueError("backoff_table must not be empty")

    def is_eligible(self, record: SyncRecord) -> bool:
        return record.status in ELIGIBLE_STATUSES and record.attempt_count < self.max_retries

    def is_exhausted(self, record: SyncRecord) -> bool:
        """True for failed records that no automatic pass will retry."""
        return record.status == SyncStatus.FAILED and record.attempt_count >= self.max_retries

    def delay_for(self, record: SyncRecord) -> float:
        """Backoff to apply before the next attempt of a record."""
        if record.attempt_count <= 0:
            return 0.0
        index = min(record.attempt_count - 1, len(self.backoff_table) - 1)
        return float(self.backoff_table[index])

    def plan(self, records: Iterable[SyncRecord]) -> List[ScheduledUpload]:
        """Order eligible records for a pass.

        Records keep the order they are given in (registration order);
        nothing is re-sorted by priority or age.
        """
        planned = []
        for record in records:
            if not self.is_eligible(record):
                if self.is_exhausted(record):
                    logger.debug(f"Max retries exceeded for {record.artifact_id}")
                continue

            planned.append(
                ScheduledUpload(
                    artifact_id=record.artifact_id,
                    delay=self.delay_for(record),
                    attempt_number=record.attempt_count + 1,
                )
            )
        return planned
