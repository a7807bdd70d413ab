from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Callable

from equityreview.core.errors import ParseError, PerRecordAnalysisError, WriteError
from equityreview.core.rules_v1 import analysis_failure
from equityreview.core.schema import AnalysisResult, EmployeeRecord, Recommendation, RunHistoryEntry
from equityreview.domain import Job, JobStatus
from equityreview.exporters.review_results_xlsx import ReviewResultsWriter
from equityreview.extractors import review_sheet
from equityreview.infrastructure import AnalysisProvider, AuditLog, HistorySink, JobRepository

logger = logging.getLogger(__name__)

PROGRESS_PARSING = 5
PROGRESS_PARSED = 10
PROGRESS_ANALYSIS_SPAN = 70
PROGRESS_WRITING = 85
PROGRESS_DONE = 100

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while processing the job"


@dataclass
class PipelineRequest:
    job_id: str
    review_batch: str
    filename: str
    file_path: Path


@dataclass
class RecordOutcome:
    """Result of analysing one record: either ``result`` or ``error`` is set."""

    index: int
    employee_id: str
    result: AnalysisResult | None = None
    error: PerRecordAnalysisError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def record_progress(processed: int, total: int) -> int:
    fraction = Decimal(processed) / Decimal(total) * PROGRESS_ANALYSIS_SPAN
    return int((PROGRESS_PARSED + fraction).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def aggregate_outcomes(outcomes: list[RecordOutcome]) -> list[AnalysisResult]:
    results: list[AnalysisResult] = []
    for outcome in sorted(outcomes, key=lambda item: item.index):
        if outcome.result is None:
            results.append(analysis_failure(outcome.employee_id))
        else:
            results.append(outcome.result)
    return results


class AnalysisWorker:
    """Drive one review batch from upload to results workbook."""

    def __init__(
        self,
        repository: JobRepository,
        provider: AnalysisProvider,
        writer: ReviewResultsWriter,
        history_sink: HistorySink,
        audit_log: AuditLog,
    ) -> None:
        self._repository = repository
        self._provider = provider
        self._writer = writer
        self._history_sink = history_sink
        self._audit_log = audit_log

    # ------------------------------------------------------------------
    # job lifecycle
    # ------------------------------------------------------------------
    def run(self, request: PipelineRequest) -> Job | None:
        job_id = request.job_id
        logger.info("job %s started for batch %r", job_id, request.review_batch)
        self._audit_log.record(
            "ANALYSIS_STARTED",
            {"jobId": job_id, "reviewBatch": request.review_batch, "provider": self._provider.name},
        )

        results: list[AnalysisResult] | None = None
        error_message: str | None = None
        try:
            results, error_message = self._process(request)
        except Exception:
            logger.exception("job %s failed unexpectedly", job_id)
            error_message = UNEXPECTED_ERROR_MESSAGE
            self._fail(job_id, error_message)
        finally:
            self._discard_upload(request)

        job = self._repository.get_job(job_id)
        if results is not None and error_message is None:
            red = sum(1 for result in results if result.ai_recommendation is Recommendation.RED)
            self._audit_log.record(
                "ANALYSIS_COMPLETED",
                {
                    "jobId": job_id,
                    "totalEmployees": len(results),
                    "redCount": red,
                    "greenCount": len(results) - red,
                },
            )
        else:
            self._audit_log.record("ANALYSIS_FAILED", {"jobId": job_id, "error": error_message})

        self._notify_history(request, job, results, error_message)
        return job

    def _process(self, request: PipelineRequest) -> tuple[list[AnalysisResult] | None, str | None]:
        job_id = request.job_id
        self._update(job_id, status=JobStatus.RUNNING, progress=PROGRESS_PARSING, message="Parsing spreadsheet...")

        try:
            parsed = review_sheet.parse(request.file_path)
        except ParseError as exc:
            logger.warning("job %s: %s", job_id, exc)
            self._fail(job_id, str(exc))
            return None, str(exc)

        records = parsed.records
        total = len(records)
        missing = parsed.column_map.missing()
        if missing:
            logger.info("job %s: sheet %r has no column for %s", job_id, parsed.sheet, ", ".join(missing))
        self._update(
            job_id,
            progress=PROGRESS_PARSED,
            total_employees=total,
            processed_employees=0,
            message=f"Found {total} employees. Starting analysis...",
        )

        outcomes = self._analyse_records(
            records,
            on_progress=lambda processed: self._update(
                job_id,
                progress=record_progress(processed, total),
                processed_employees=processed,
                message=f"Analyzed {processed} of {total} employees...",
            ),
        )
        results = aggregate_outcomes(outcomes)

        self._update(job_id, progress=PROGRESS_WRITING, message="Generating results file...")
        try:
            artifact = self._writer.write(request.review_batch, results, job_id)
        except WriteError as exc:
            logger.error("job %s: %s", job_id, exc)
            self._fail(job_id, str(exc))
            return None, str(exc)

        self._update(
            job_id,
            status=JobStatus.DONE,
            progress=PROGRESS_DONE,
            message="Analysis complete",
            result_file_name=artifact.name,
            results=results,
        )
        logger.info("job %s complete: %d records -> %s", job_id, total, artifact.name)
        return results, None

    def _analyse_records(
        self,
        records: list[EmployeeRecord],
        on_progress: Callable[[int], None],
    ) -> list[RecordOutcome]:
        outcomes: list[RecordOutcome] = []
        for index, record in enumerate(records):
            try:
                result = self._provider.analyze(record)
            except Exception as exc:
                error = PerRecordAnalysisError(index, record.employee_id, exc)
                logger.warning("%s", error, exc_info=True)
                outcomes.append(RecordOutcome(index=index, employee_id=record.employee_id, error=error))
            else:
                outcomes.append(RecordOutcome(index=index, employee_id=record.employee_id, result=result))
            on_progress(index + 1)
        return outcomes

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _update(self, job_id: str, **changes: object) -> Job:
        return self._repository.update_job(job_id, **changes)

    def _discard_upload(self, request: PipelineRequest) -> None:
        try:
            request.file_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("job %s: could not remove upload %s: %s", request.job_id, request.file_path, exc)

    def _fail(self, job_id: str, message: str) -> None:
        job = self._repository.get_job(job_id)
        if job is None or job.is_terminal:
            return
        self._repository.update_job(job_id, status=JobStatus.ERROR, progress=0, message=message)

    def _notify_history(
        self,
        request: PipelineRequest,
        job: Job | None,
        results: list[AnalysisResult] | None,
        error_message: str | None,
    ) -> None:
        if not self._history_sink.is_configured():
            return

        succeeded = error_message is None and results is not None
        red = sum(1 for result in results or [] if result.ai_recommendation is Recommendation.RED)
        submitted_at = job.created_at if job is not None else datetime.now(timezone.utc)
        entry = RunHistoryEntry(
            review_batch=request.review_batch,
            run_id=request.job_id,
            submitted_at=submitted_at.isoformat(),
            file_name=request.filename,
            total_employees=len(results or []),
            red_count=red,
            green_count=len(results or []) - red,
            status="Completed" if succeeded else "Failed",
            output_file_name=(job.result_file_name if job is not None else None) or "",
            error_message=error_message,
        )
        try:
            self._history_sink.record_run_history(entry)
        except Exception as exc:
            logger.warning("history write failed for job %s: %s", request.job_id, exc)
            self._audit_log.record("HISTORY_WRITE_FAILED", {"runId": request.job_id, "error": str(exc)})
        else:
            self._audit_log.record("HISTORY_WRITE_SUCCESS", {"runId": request.job_id})
