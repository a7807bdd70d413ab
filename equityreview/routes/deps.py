"""Request-scoped access to the services built by :func:`equityreview.app.create_app`."""
from __future__ import annotations

from fastapi import Request

from equityreview.application import JobService
from equityreview.core.config import Settings
from equityreview.exporters.review_results_xlsx import ReviewResultsWriter
from equityreview.infrastructure import AuditLog
from equityreview.workers.pipeline import AnalysisWorker


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_job_service(request: Request) -> JobService:
    return request.app.state.job_service


def get_worker(request: Request) -> AnalysisWorker:
    return request.app.state.worker


def get_results_writer(request: Request) -> ReviewResultsWriter:
    return request.app.state.results_writer


def get_audit_log(request: Request) -> AuditLog:
    return request.app.state.audit_log
