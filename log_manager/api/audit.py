"""Audit log read endpoints for the admin list view."""

import logging
import math

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from log_manager.audit.formatting import preview
from log_manager.audit.repository import DEFAULT_PER_PAGE, MAX_PER_PAGE, AuditLogRepository
from log_manager.config import settings
from log_manager.database import AuditLogRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/audit")


class AuditEntryResponse(BaseModel):
    """One stored audit entry."""

    id: int
    ip_address: str
    userid: int
    event_time: str | None
    object_type: str
    severity: str
    event_type: str
    message: str
    preview: str


class AuditEntryPage(BaseModel):
    """One page of audit entries."""

    items: list[AuditEntryResponse]
    total: int
    page: int
    per_page: int
    pages: int


def _to_response(record: AuditLogRecord) -> AuditEntryResponse:
    data = record.to_dict()
    data["preview"] = preview(record.message or "", settings.message_preview_length)
    return AuditEntryResponse(**data)


@router.get("/entries")
async def list_audit_entries(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
    s: str | None = Query(default=None, description="Free-text filter"),
    orderby: str | None = Query(default=None),
    order: str | None = Query(default=None, pattern="^(asc|desc|ASC|DESC)$"),
) -> AuditEntryPage:
    """Get a page of stored entries, newest first by default."""
    records = await AuditLogRepository.list_entries(
        page=page,
        per_page=per_page,
        search=s,
        order_by=orderby,
        order=order,
    )
    total = await AuditLogRepository.count_entries(search=s)

    return AuditEntryPage(
        items=[_to_response(r) for r in records],
        total=total,
        page=page,
        per_page=per_page,
        pages=math.ceil(total / per_page) if total else 0,
    )


@router.get("/entries/{entry_id}")
async def get_audit_entry(entry_id: int) -> AuditEntryResponse:
    """Get a single stored entry."""
    record = await AuditLogRepository.get_entry(entry_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Audit entry not found")
    return _to_response(record)
