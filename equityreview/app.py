import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from equityreview.application import JobService
from equityreview.core.config import Settings
from equityreview.core.storage import ensure_data_root
from equityreview.exporters.review_results_xlsx import ReviewResultsWriter
from equityreview.infrastructure import (
    AuditLog,
    HistorySink,
    HttpHistorySink,
    InMemoryJobRepository,
    NullHistorySink,
    create_analysis_provider,
)
from equityreview.routes import analyze, audit, jobs
from equityreview.workers.pipeline import AnalysisWorker

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def _history_sink(settings: Settings) -> HistorySink:
    if settings.history_api_base:
        logger.info("run history will be posted to %s", settings.history_api_base)
        return HttpHistorySink(settings.history_api_base, token=settings.history_api_token)
    return NullHistorySink()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    app = FastAPI(title="Equity Review Analysis API", version="0.1.0")

    root = ensure_data_root(settings.data_root)
    repository = InMemoryJobRepository()
    provider = create_analysis_provider(
        settings.analysis_provider,
        api_base=settings.analysis_provider_url,
    )
    writer = ReviewResultsWriter(root / "results")
    audit_log = AuditLog(root / "audit" / "audit.log.jsonl")

    app.state.settings = settings
    app.state.job_service = JobService(repository)
    app.state.results_writer = writer
    app.state.audit_log = audit_log
    app.state.worker = AnalysisWorker(
        repository=repository,
        provider=provider,
        writer=writer,
        history_sink=_history_sink(settings),
        audit_log=audit_log,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(analyze.router, prefix="/api")
    app.include_router(jobs.router, prefix="/api")
    app.include_router(audit.router, prefix="/api")

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/", include_in_schema=False)
    async def root_page() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Equity Review Analysis API",
                "docs": "/docs",
                "health": "/api/jobs",
                "provider": provider.name,
            }
        )

    logger.info("analysis provider %s, data root %s", provider.name, root)
    return app


app = create_app()
