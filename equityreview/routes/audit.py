from __future__ import annotations

from typing import get_args

from fastapi import APIRouter, Depends, HTTPException, Query

from equityreview.infrastructure import AuditLog
from equityreview.infrastructure.audit import AuditEventType
from equityreview.routes.deps import get_audit_log

router = APIRouter(tags=["audit"])

EVENT_TYPES = frozenset(get_args(AuditEventType))


@router.get("/audit")
async def list_audit_events(
    top: int = Query(default=200, ge=1, le=1000),
    event_type: str | None = Query(default=None, alias="eventType"),
    audit_log: AuditLog = Depends(get_audit_log),
) -> list[dict]:
    """Return recent audit events, newest first."""
    if event_type is not None and event_type not in EVENT_TYPES:
        raise HTTPException(status_code=400, detail=f"unknown event type: {event_type}")
    return audit_log.events(top=top, event_type=event_type)
