"""Domain layer definitions."""

from .jobs import TERMINAL_STATUSES, Job, JobStatus

__all__ = [
    "Job",
    "JobStatus",
    "TERMINAL_STATUSES",
]
