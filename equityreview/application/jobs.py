"""Application service layer for analysis jobs."""
from __future__ import annotations

from collections import Counter
from typing import Any

from equityreview.core.schema import FLAG_DISPLAY_TEXT, Recommendation
from equityreview.domain import Job, JobStatus
from equityreview.infrastructure import JobRepository


def _iso(job: Job) -> str:
    return job.created_at.isoformat()


class JobService:
    """Coordinates job-related use cases for the HTTP layer."""

    def __init__(self, repository: JobRepository) -> None:
        self._repository = repository

    # ------------------------------------------------------------------
    # job lifecycle
    # ------------------------------------------------------------------
    def submit(self, review_batch: str) -> Job:
        label = (review_batch or "").strip()
        if not label:
            raise ValueError("Review batch name is required")
        return self._repository.create_job(label)

    def get_job(self, job_id: str) -> Job | None:
        return self._repository.get_job(job_id)

    def list_jobs(self) -> list[Job]:
        jobs = self._repository.list_jobs()
        jobs.sort(key=lambda job: job.created_at, reverse=True)
        return jobs

    # ------------------------------------------------------------------
    # views
    # ------------------------------------------------------------------
    @staticmethod
    def status_view(job: Job) -> dict[str, Any]:
        return {
            "status": job.status.value,
            "progress": job.progress,
            "message": job.message,
            "resultFileName": job.result_file_name,
        }

    @staticmethod
    def summary_view(job: Job) -> dict[str, Any]:
        return {
            "id": job.job_id,
            "reviewBatch": job.review_batch,
            "status": job.status.value,
            "progress": job.progress,
            "message": job.message,
            "createdAt": _iso(job),
            "totalEmployees": job.total_employees,
            "resultFileName": job.result_file_name,
        }

    @staticmethod
    def results_view(job: Job) -> dict[str, Any] | None:
        if job.results is None:
            return None
        return {
            "job": {
                "id": job.job_id,
                "reviewBatch": job.review_batch,
                "createdAt": _iso(job),
                "totalEmployees": job.total_employees,
            },
            "results": [result.model_dump(mode="json", by_alias=True) for result in job.results],
            "flagDescriptions": {
                flag.value: FLAG_DISPLAY_TEXT[flag]
                for flag in dict.fromkeys(flag for result in job.results for flag in result.flags_triggered)
            },
        }

    def stats(self) -> dict[str, Any]:
        jobs = self._repository.list_jobs()
        by_status = Counter(job.status.value for job in jobs)
        analysed = [result for job in jobs if job.status is JobStatus.DONE for result in job.results or []]
        red = sum(1 for result in analysed if result.ai_recommendation is Recommendation.RED)
        return {
            "totalJobs": len(jobs),
            "jobsByStatus": {status.value: by_status.get(status.value, 0) for status in JobStatus},
            "employeesAnalyzed": len(analysed),
            "redCount": red,
            "greenCount": len(analysed) - red,
        }
