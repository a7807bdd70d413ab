"""Append-only JSON-lines audit log for analysis activity."""
from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

logger = logging.getLogger(__name__)

AuditEventType = Literal[
    "FILE_UPLOADED",
    "ANALYSIS_STARTED",
    "ANALYSIS_COMPLETED",
    "ANALYSIS_FAILED",
    "HISTORY_WRITE_SUCCESS",
    "HISTORY_WRITE_FAILED",
]


class AuditLog:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def record(self, event_type: AuditEventType, details: dict[str, Any]) -> None:
        event = {
            "id": f"audit-{uuid.uuid4().hex[:12]}",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "eventType": event_type,
            "details": details,
        }
        try:
            with self._lock:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as fp:
                    fp.write(json.dumps(event, ensure_ascii=False, default=str) + "\n")
        except OSError:
            logger.exception("audit_write_failed", extra={"event_type": event_type})
            return
        logger.info("audit %s: %s", event_type, details)

    def events(self, top: int = 200, event_type: AuditEventType | None = None) -> list[dict[str, Any]]:
        """Return up to ``top`` events, newest first."""

        if top <= 0 or not self._path.exists():
            return []
        events: list[dict[str, Any]] = []
        with self._path.open("r", encoding="utf-8") as fp:
            for line in fp:
                line = line.strip()
                if not line:
                    continue
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
        if event_type:
            events = [event for event in events if event.get("eventType") == event_type]
        return list(reversed(events[-top:]))
