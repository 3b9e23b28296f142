"""Audit entry persistence for Log Manager.

Provides:
- The canonical AuditEntry model and its enumerations
- Database and file sinks with consistent formatting
- A storage router that picks the sink from settings on every write
- Read access for the admin list view
"""

from log_manager.audit.models import (
    AuditEntry,
    EventType,
    ObjectType,
    Severity,
)
from log_manager.audit.sinks import DatabaseSink, FileSink, Sink, LOG_FILE_NAME
from log_manager.audit.router import StorageRouter, storage_router
from log_manager.audit.repository import AuditLogRepository

__all__ = [
    # Models
    "AuditEntry",
    "EventType",
    "ObjectType",
    "Severity",
    # Sinks
    "Sink",
    "DatabaseSink",
    "FileSink",
    "LOG_FILE_NAME",
    # Router
    "StorageRouter",
    "storage_router",
    # Read API
    "AuditLogRepository",
]
