"""
Retry sweep result models.

Dependencies: pydantic
System role: Return types for RetrySweeper and retry statistics
"""

import enum
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from incident_docs.boundary.db.models.document_model import ErrorCode


class RetryStatus(str, enum.Enum):
    """What happened to one record during a retry."""

    COMPLETED = "completed"
    FAILED = "failed"
    PERMANENTLY_FAILED = "permanently_failed"
    SKIPPED = "skipped"
    ALREADY_COMPLETED = "already_completed"


class RetryOutcome(BaseModel):
    """Result of retrying a single record."""

    document_id: UUID
    status: RetryStatus
    retry_count: int
    error_code: ErrorCode | None = None
    error_message: str | None = None


class SweepSummary(BaseModel):
    """Counts and per-record outcomes of one sweep."""

    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    permanently_failed: int = 0
    skipped: int = 0
    duration_ms: float = 0.0
    results: list[RetryOutcome] = Field(default_factory=list)

    def record(self, outcome: RetryOutcome) -> None:
        self.results.append(outcome)
        if outcome.status == RetryStatus.SKIPPED:
            self.skipped += 1
            return
        self.processed += 1
        if outcome.status == RetryStatus.COMPLETED:
            self.succeeded += 1
        elif outcome.status == RetryStatus.PERMANENTLY_FAILED:
            self.permanently_failed += 1
        elif outcome.status == RetryStatus.FAILED:
            self.failed += 1


class RetryCandidate(BaseModel):
    """A record a sweep would pick up (dry-run listing)."""

    document_id: UUID
    owner_id: str
    document_kind: str
    retry_count: int
    max_retries: int
    error_code: ErrorCode | None = None
    next_retry_at: datetime | None = None


class RetryStatistics(BaseModel):
    """Retry bookkeeping across all visible documents."""

    total: int
    by_status: dict[str, int]
    needing_retry: int
    permanently_failed: int
    average_retry_count: float
    error_codes: dict[str, int]
