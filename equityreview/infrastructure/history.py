"""Run-history recording for completed and failed analysis jobs.

The service does not own the history store.  When ``HISTORY_API_BASE`` is set
each finished job is posted to a remote list endpoint; otherwise the
:class:`NullHistorySink` reports itself as unconfigured and nothing is sent.
"""
from __future__ import annotations

from typing import Protocol
from urllib.parse import urlparse

import httpx

from equityreview.core.errors import HistorySinkError
from equityreview.core.schema import RunHistoryEntry


class HistorySink(Protocol):
    """Contract for run-history integrations."""

    def is_configured(self) -> bool: ...

    def record_run_history(self, entry: RunHistoryEntry) -> None:
        """Persist one history entry, raising :class:`HistorySinkError` on failure."""


class NullHistorySink:
    """Sink used when no history store is configured."""

    def is_configured(self) -> bool:
        return False

    def record_run_history(self, entry: RunHistoryEntry) -> None:  # pragma: no cover - trivial
        return None


class HttpHistorySink:
    """Post run-history entries to a remote list store over HTTP."""

    def __init__(
        self,
        api_base: str,
        *,
        token: str | None = None,
        request_path: str = "/run-history",
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        parsed = urlparse(api_base)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("api_base must include scheme and host")

        if not request_path.startswith("/"):
            request_path = f"/{request_path}"
        self._request_url = f"{api_base.rstrip('/')}{request_path}"
        self._token = token
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def is_configured(self) -> bool:
        return True

    def record_run_history(self, entry: RunHistoryEntry) -> None:
        payload = entry.model_dump(mode="json", by_alias=True)
        try:
            response = self._client.post(self._request_url, json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise HistorySinkError(
                f"history store rejected run {entry.run_id}: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise HistorySinkError(f"history store unreachable: {exc}") from exc

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


__all__ = ["HistorySink", "HttpHistorySink", "NullHistorySink"]
