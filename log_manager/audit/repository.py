"""Read access to persisted audit entries.

Backs the admin list view: paged, optionally filtered and sorted retrieval
plus a total count that uses the same filter predicate.
"""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from log_manager import database as db_module
from log_manager.database import AuditLogRecord

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "id": AuditLogRecord.id,
    "event_time": AuditLogRecord.event_time,
    "severity": AuditLogRecord.severity,
    "event_type": AuditLogRecord.event_type,
    "object_type": AuditLogRecord.object_type,
}
SEARCH_COLUMNS = (
    AuditLogRecord.ip_address,
    AuditLogRecord.event_type,
    AuditLogRecord.object_type,
    AuditLogRecord.message,
)
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 500


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _search_clause(search: str | None):
    if not search or not search.strip():
        return None
    pattern = f"%{_escape_like(search.strip())}%"
    return or_(*(column.like(pattern, escape="\\") for column in SEARCH_COLUMNS))


class AuditLogRepository:
    """Repository for reading the audit table."""

    @staticmethod
    async def list_entries(
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
        search: str | None = None,
        order_by: str | None = None,
        order: str | None = None,
        db: AsyncSession | None = None,
    ) -> list[AuditLogRecord]:
        """Get one page of entries.

        Unknown sort columns fall back to ``id``; the direction defaults to
        descending unless ``order`` is ``asc``.
        """
        page = max(page, 1)
        per_page = min(max(per_page, 1), MAX_PER_PAGE)

        column = SORTABLE_COLUMNS.get(order_by or "id", AuditLogRecord.id)
        direction = column.asc() if (order or "").lower() == "asc" else column.desc()

        query = select(AuditLogRecord)
        clause = _search_clause(search)
        if clause is not None:
            query = query.where(clause)
        # id as tie-breaker keeps paging stable on non-unique columns
        query = query.order_by(direction, AuditLogRecord.id.desc())
        query = query.limit(per_page).offset((page - 1) * per_page)

        if db:
            result = await db.execute(query)
            return list(result.scalars().all())

        async with db_module.async_session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    @staticmethod
    async def count_entries(
        search: str | None = None,
        db: AsyncSession | None = None,
    ) -> int:
        """Count entries matching the same filter as list_entries."""
        query = select(func.count()).select_from(AuditLogRecord)
        clause = _search_clause(search)
        if clause is not None:
            query = query.where(clause)

        if db:
            result = await db.execute(query)
            return int(result.scalar_one())

        async with db_module.async_session_factory() as session:
            result = await session.execute(query)
            return int(result.scalar_one())

    @staticmethod
    async def get_entry(entry_id: int, db: AsyncSession | None = None) -> AuditLogRecord | None:
        """Get a single entry by id."""
        if db:
            return await db.get(AuditLogRecord, entry_id)

        async with db_module.async_session_factory() as session:
            return await session.get(AuditLogRecord, entry_id)
