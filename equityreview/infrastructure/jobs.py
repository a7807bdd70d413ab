"""Infrastructure layer for job persistence."""
from __future__ import annotations

import threading
import uuid
from dataclasses import fields, replace
from typing import Any, Protocol

from equityreview.core.errors import JobStateError
from equityreview.domain import Job, JobStatus
from equityreview.domain.jobs import ALLOWED_TRANSITIONS

IMMUTABLE_FIELDS = frozenset({"job_id", "review_batch", "created_at"})
MUTABLE_FIELDS = frozenset(f.name for f in fields(Job)) - IMMUTABLE_FIELDS


class JobRepository(Protocol):
    """Persistence contract for analysis jobs."""

    def create_job(self, review_batch: str) -> Job: ...

    def get_job(self, job_id: str) -> Job | None: ...

    def update_job(self, job_id: str, /, **changes: Any) -> Job: ...

    def list_jobs(self) -> list[Job]: ...

    def reset(self) -> None: ...


def _snapshot(job: Job) -> Job:
    results = list(job.results) if job.results is not None else None
    return replace(job, results=results)


class InMemoryJobRepository:
    """In-memory job store with one lock per job.

    Reads and updates of different jobs never contend; the registry lock is
    only held while a job is added or looked up.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _lookup(self, job_id: str) -> tuple[Job, threading.Lock] | None:
        with self._registry_lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            return job, self._locks[job_id]

    @staticmethod
    def _validate(job: Job, changes: dict[str, Any]) -> None:
        if job.is_terminal:
            raise JobStateError(f"job {job.job_id} is already {job.status.value}")

        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise JobStateError(f"cannot update job fields: {', '.join(sorted(unknown))}")

        status = JobStatus(changes.get("status", job.status))
        if status not in ALLOWED_TRANSITIONS[job.status]:
            raise JobStateError(f"illegal transition {job.status.value} -> {status.value}")

        progress = changes.get("progress", job.progress)
        if not 0 <= progress <= 100:
            raise JobStateError(f"progress {progress} is outside 0..100")
        if progress < job.progress and status not in (JobStatus.DONE, JobStatus.ERROR):
            raise JobStateError(f"progress may not decrease ({job.progress} -> {progress})")

    # ------------------------------------------------------------------
    # CRUD operations
    # ------------------------------------------------------------------
    def create_job(self, review_batch: str) -> Job:
        job = Job(job_id=uuid.uuid4().hex, review_batch=review_batch)
        with self._registry_lock:
            self._jobs[job.job_id] = job
            self._locks[job.job_id] = threading.Lock()
        return _snapshot(job)

    def get_job(self, job_id: str) -> Job | None:
        found = self._lookup(job_id)
        if found is None:
            return None
        job, lock = found
        with lock:
            return _snapshot(job)

    def update_job(self, job_id: str, /, **changes: Any) -> Job:
        found = self._lookup(job_id)
        if found is None:
            raise KeyError(job_id)
        job, lock = found
        with lock:
            self._validate(job, changes)
            if "status" in changes:
                changes["status"] = JobStatus(changes["status"])
            for key, value in changes.items():
                setattr(job, key, value)
            return _snapshot(job)

    def list_jobs(self) -> list[Job]:
        with self._registry_lock:
            pairs = [(job, self._locks[job_id]) for job_id, job in self._jobs.items()]
        snapshots: list[Job] = []
        for job, lock in pairs:
            with lock:
                snapshots.append(_snapshot(job))
        return snapshots

    def reset(self) -> None:
        with self._registry_lock:
            self._jobs.clear()
            self._locks.clear()
