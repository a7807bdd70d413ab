from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from equityreview.application import JobService
from equityreview.domain import Job, JobStatus
from equityreview.exporters.review_results_xlsx import ReviewResultsWriter
from equityreview.routes.analyze import XLSX_MEDIA_TYPE
from equityreview.routes.deps import get_job_service, get_results_writer

router = APIRouter(tags=["jobs"])


def _require_job(service: JobService, job_id: str) -> Job:
    job = service.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.get("/jobs")
async def list_jobs(service: JobService = Depends(get_job_service)) -> list[dict]:
    return [service.summary_view(job) for job in service.list_jobs()]


@router.get("/jobs/{job_id}")
async def get_job_status(job_id: str, service: JobService = Depends(get_job_service)) -> dict:
    job = _require_job(service, job_id)
    return service.status_view(job)


@router.get("/jobs/{job_id}/results")
async def get_job_results(job_id: str, service: JobService = Depends(get_job_service)) -> dict:
    job = _require_job(service, job_id)
    view = service.results_view(job)
    if view is None:
        raise HTTPException(status_code=404, detail="Results not found")
    return view


@router.get("/jobs/{job_id}/download")
async def download_results(
    job_id: str,
    service: JobService = Depends(get_job_service),
    writer: ReviewResultsWriter = Depends(get_results_writer),
) -> FileResponse:
    job = _require_job(service, job_id)
    if job.status is not JobStatus.DONE:
        raise HTTPException(status_code=400, detail="Job is not complete yet")
    if not job.result_file_name:
        raise HTTPException(status_code=404, detail="Result file not found")

    path = writer.artifact_path(job.result_file_name)
    if not path.exists():
        raise HTTPException(status_code=404, detail="Result file not found on disk")
    return FileResponse(path, media_type=XLSX_MEDIA_TYPE, filename=job.result_file_name)


@router.get("/stats")
async def get_stats(service: JobService = Depends(get_job_service)) -> dict:
    return service.stats()
