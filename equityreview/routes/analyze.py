from __future__ import annotations

import asyncio
import uuid
from pathlib import Path

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile

from equityreview.application import JobService
from equityreview.core.config import Settings
from equityreview.core.errors import UploadTooLargeError
from equityreview.core.storage import save_upload
from equityreview.infrastructure import AuditLog
from equityreview.routes.deps import get_audit_log, get_job_service, get_settings, get_worker
from equityreview.workers.pipeline import AnalysisWorker, PipelineRequest

router = APIRouter(tags=["analysis"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _is_xlsx(upload: UploadFile) -> bool:
    filename = (upload.filename or "").lower()
    return upload.content_type == XLSX_MEDIA_TYPE or filename.endswith(".xlsx")


@router.post("/analyze")
async def analyze_upload(
    background_tasks: BackgroundTasks,
    file: UploadFile | None = File(default=None),
    review_batch: str | None = Form(default=None, alias="reviewBatch"),
    settings: Settings = Depends(get_settings),
    service: JobService = Depends(get_job_service),
    worker: AnalysisWorker = Depends(get_worker),
    audit_log: AuditLog = Depends(get_audit_log),
) -> dict:
    """Accept a review workbook and enqueue it for analysis."""
    review_batch = (review_batch or "").strip()
    if not review_batch:
        raise HTTPException(status_code=400, detail="Review batch name is required")
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="Excel file is required")

    try:
        if not _is_xlsx(file):
            raise HTTPException(status_code=400, detail="Only .xlsx files are allowed")

        safe_name = Path(file.filename).name
        try:
            raw_path = await asyncio.to_thread(
                save_upload,
                settings.data_root,
                uuid.uuid4().hex,
                safe_name,
                file.file,
                settings.max_upload_bytes,
            )
        except UploadTooLargeError as exc:
            raise HTTPException(status_code=413, detail=str(exc)) from exc
    finally:
        await file.close()

    job = service.submit(review_batch)
    audit_log.record(
        "FILE_UPLOADED",
        {
            "jobId": job.job_id,
            "fileName": safe_name,
            "size": raw_path.stat().st_size,
            "reviewBatch": review_batch,
        },
    )

    payload = PipelineRequest(
        job_id=job.job_id,
        review_batch=review_batch,
        filename=safe_name,
        file_path=raw_path,
    )
    background_tasks.add_task(worker.run, payload)
    return {"jobId": job.job_id}
