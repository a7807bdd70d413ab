"""Application services."""

from .jobs import JobService

__all__ = [
    "JobService",
]
