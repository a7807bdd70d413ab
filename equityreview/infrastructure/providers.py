"""Pluggable analysis providers.

The service ships with a deterministic rule-based engine.  An external scoring
service can be plugged in by setting ``ANALYSIS_PROVIDER=external`` and
``ANALYSIS_PROVIDER_URL``; the provider is chosen once when the application
starts and injected into the worker.
"""
from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import urlparse

import httpx

from equityreview.core import rules_v1
from equityreview.core.errors import ProviderError
from equityreview.core.schema import AnalysisResult, EmployeeRecord

logger = logging.getLogger(__name__)


class AnalysisProvider(Protocol):
    """Contract for per-record analysis implementations."""

    name: str

    def analyze(self, record: EmployeeRecord) -> AnalysisResult:
        """Classify a single employee record."""


class MockRuleEngine:
    """Rule-based stand-in for a scoring model."""

    name = "mock"

    def analyze(self, record: EmployeeRecord) -> AnalysisResult:
        return rules_v1.evaluate(record)


class FutureExternalProvider:
    """Delegate analysis to a remote scoring service over HTTP."""

    name = "external"

    def __init__(
        self,
        api_base: str,
        *,
        request_path: str = "/analyze",
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        parsed = urlparse(api_base)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("api_base must include scheme and host")

        if not request_path.startswith("/"):
            request_path = f"/{request_path}"
        self._request_url = f"{api_base.rstrip('/')}{request_path}"
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    def analyze(self, record: EmployeeRecord) -> AnalysisResult:
        payload = record.model_dump(mode="json", by_alias=True)
        try:
            response = self._client.post(self._request_url, json=payload)
            response.raise_for_status()
            return AnalysisResult.model_validate(response.json())
        except httpx.HTTPError as exc:
            raise ProviderError(f"scoring service request failed: {exc}") from exc
        except ValueError as exc:  # includes pydantic.ValidationError
            raise ProviderError(f"scoring service returned an invalid result: {exc}") from exc

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


def create_analysis_provider(
    name: str,
    *,
    api_base: str | None = None,
    http_client: httpx.Client | None = None,
) -> AnalysisProvider:
    key = (name or "mock").strip().lower()
    if key == MockRuleEngine.name:
        return MockRuleEngine()
    if key == FutureExternalProvider.name:
        if not api_base:
            raise ValueError("ANALYSIS_PROVIDER_URL is required for the external provider")
        logger.info("using external analysis provider at %s", api_base)
        return FutureExternalProvider(api_base, http_client=http_client)
    raise ValueError(f"unknown analysis provider: {name!r}")
