from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from equityreview.core import rules_v1
from equityreview.core.errors import HistorySinkError, ProviderError
from equityreview.core.schema import EmployeeRecord, RunHistoryEntry
from equityreview.infrastructure import (
    FutureExternalProvider,
    HttpHistorySink,
    MockRuleEngine,
    NullHistorySink,
    create_analysis_provider,
)


def _entry() -> RunHistoryEntry:
    return RunHistoryEntry(
        review_batch="FY25 Mid-Year",
        run_id="abc123",
        submitted_at="2025-07-01T12:00:00+00:00",
        file_name="reviews.xlsx",
        total_employees=3,
        red_count=1,
        green_count=2,
        status="Completed",
        output_file_name="analysis-results-abc123.xlsx",
    )


def test_history_sink_posts_camel_case_entry():
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers.get("Authorization")
        captured["body"] = json.loads(request.content.decode("utf-8"))
        return httpx.Response(201, json={"id": "row-1"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    sink = HttpHistorySink("https://lists.example.com/api/", token="secret", http_client=client)

    sink.record_run_history(_entry())

    assert sink.is_configured()
    assert captured["url"] == "https://lists.example.com/api/run-history"
    assert captured["auth"] == "Bearer secret"
    body = captured["body"]
    assert body["reviewBatch"] == "FY25 Mid-Year"
    assert body["runId"] == "abc123"
    assert body["redCount"] == 1
    assert body["status"] == "Completed"
    assert body["errorMessage"] is None


def test_history_sink_raises_on_rejection():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    sink = HttpHistorySink("https://lists.example.com", http_client=client)

    with pytest.raises(HistorySinkError, match="HTTP 503"):
        sink.record_run_history(_entry())


def test_history_sink_raises_when_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    sink = HttpHistorySink("https://lists.example.com", http_client=client)

    with pytest.raises(HistorySinkError, match="unreachable"):
        sink.record_run_history(_entry())


def test_history_sink_requires_absolute_url():
    with pytest.raises(ValueError):
        HttpHistorySink("lists.example.com")


def test_null_history_sink_is_not_configured():
    assert NullHistorySink().is_configured() is False


def test_external_provider_round_trip():
    record = EmployeeRecord(employee_id="E001", manager_comments="")
    expected = rules_v1.evaluate(record)
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content.decode("utf-8"))
        return httpx.Response(200, json=expected.model_dump(mode="json", by_alias=True))

    client = httpx.Client(transport=httpx.MockTransport(handler))
    provider = FutureExternalProvider("https://scoring.example.com", http_client=client)

    result = provider.analyze(record)

    assert result == expected
    assert captured["url"] == "https://scoring.example.com/analyze"
    assert captured["body"]["employeeId"] == "E001"
    assert captured["body"]["managerComments"] == ""


def test_external_provider_rejects_inconsistent_result():
    payload = {
        "employeeId": "E001",
        "biasAssessment": "fine",
        "valuesAlignment": "Aligned",
        "ratingConsistency": "Consistent",
        "ratingConsistencyRationale": "ok",
        "aiRecommendation": "GREEN",
        "flagsTriggered": ["NarrativeInsufficient"],
    }
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)))
    provider = FutureExternalProvider("https://scoring.example.com", http_client=client)

    with pytest.raises(ProviderError, match="invalid result"):
        provider.analyze(EmployeeRecord(employee_id="E001"))


def test_external_provider_wraps_http_errors():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    provider = FutureExternalProvider("https://scoring.example.com", http_client=client)

    with pytest.raises(ProviderError, match="request failed"):
        provider.analyze(EmployeeRecord(employee_id="E001"))


def test_create_analysis_provider_selection():
    assert isinstance(create_analysis_provider("mock"), MockRuleEngine)
    assert isinstance(create_analysis_provider(" MOCK "), MockRuleEngine)
    external = create_analysis_provider("external", api_base="https://scoring.example.com")
    assert isinstance(external, FutureExternalProvider)

    with pytest.raises(ValueError, match="ANALYSIS_PROVIDER_URL"):
        create_analysis_provider("external")
    with pytest.raises(ValueError, match="unknown analysis provider"):
        create_analysis_provider("openai")
