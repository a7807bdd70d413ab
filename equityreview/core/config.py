from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


def _default_data_root() -> Path:
    env_root = os.getenv("EQUITYREVIEW_DATA_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path(__file__).resolve().parents[2] / "data"


@dataclass(frozen=True, slots=True)
class Settings:
    """Start-up configuration for the analysis service."""

    data_root: Path = field(default_factory=_default_data_root)
    max_upload_bytes: int = 10 * 1024 * 1024
    analysis_provider: str = "mock"
    analysis_provider_url: str | None = None
    history_api_base: str | None = None
    history_api_token: str | None = None
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        max_upload_mb = float(os.getenv("EQUITYREVIEW_MAX_UPLOAD_MB") or 10)

        origins_env = os.getenv("API_CORS_ORIGINS", "")
        origins = tuple(origin.strip() for origin in origins_env.split(",") if origin.strip())

        return cls(
            data_root=_default_data_root(),
            max_upload_bytes=int(max_upload_mb * 1024 * 1024),
            analysis_provider=(os.getenv("ANALYSIS_PROVIDER") or "mock").strip().lower(),
            analysis_provider_url=os.getenv("ANALYSIS_PROVIDER_URL") or None,
            history_api_base=os.getenv("HISTORY_API_BASE") or None,
            history_api_token=os.getenv("HISTORY_API_TOKEN") or None,
            cors_origins=origins or DEFAULT_CORS_ORIGINS,
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )
