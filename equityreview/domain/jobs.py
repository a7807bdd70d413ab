"""Domain entities for analysis job orchestration."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from equityreview.core.schema import AnalysisResult


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({JobStatus.DONE, JobStatus.ERROR})

ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.QUEUED, JobStatus.RUNNING, JobStatus.ERROR}),
    JobStatus.RUNNING: frozenset({JobStatus.RUNNING, JobStatus.DONE, JobStatus.ERROR}),
    JobStatus.DONE: frozenset(),
    JobStatus.ERROR: frozenset(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Job:
    """One asynchronous execution of the analysis pipeline over a review batch."""

    job_id: str
    review_batch: str
    status: JobStatus = JobStatus.QUEUED
    progress: int = 0
    message: str | None = None
    total_employees: int | None = None
    processed_employees: int | None = None
    result_file_name: str | None = None
    results: list[AnalysisResult] | None = None
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
