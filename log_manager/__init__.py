"""Log Manager: audit trail for a content-management platform.

Captures lifecycle notifications for posts, taxonomy terms, featured media
and user sessions, turns them into human-readable audit entries and stores
them in a database table or an append-only text file.
"""

from log_manager.audit import (
    AuditEntry,
    EventType,
    ObjectType,
    Severity,
    StorageRouter,
    storage_router,
)
from log_manager.context import RequestContext
from log_manager.manager import LogManager

__all__ = [
    "AuditEntry",
    "EventType",
    "ObjectType",
    "Severity",
    "StorageRouter",
    "storage_router",
    "RequestContext",
    "LogManager",
]
