"""Storage sinks for audit entries.

Two interchangeable backends:
- DatabaseSink: one row per entry in the ``log_db`` table
- FileSink: one fixed-width line per entry in ``<dir>/log-manager.txt``
"""

import logging
import os
import re
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Callable

from log_manager import database as db_module
from log_manager.audit.models import AuditEntry
from log_manager.config import settings

logger = logging.getLogger(__name__)

LOG_FILE_NAME = "log-manager.txt"
LINE_FORMAT = "%-20s | %-7s | %-10s | %s\n"
SEPARATOR = "-" * 88 + "\n"
HEADER = LINE_FORMAT % ("Date & Time", "User ID", "Event Type", "Message")
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
# One entry per line; embedded breaks would split it
LINE_BREAKS = re.compile(r"[\r\n]+")


def format_time(value: datetime | None) -> str:
    """Wall-clock timestamp as written to both sinks."""
    if value is None:
        value = datetime.now(settings.tzinfo)
    return value.strftime(TIME_FORMAT)


class Sink(ABC):
    """A concrete storage backend."""

    name: str = ""

    @abstractmethod
    async def write(self, entry: AuditEntry) -> bool:
        """Persist one entry. Returns False when the write was skipped."""
        pass


class DatabaseSink(Sink):
    """Appends entries to the audit table."""

    name = "database"

    async def write(self, entry: AuditEntry) -> bool:
        # Looked up at call time so a replaced session factory takes effect
        async with db_module.async_session_factory() as session:
            session.add(
                db_module.AuditLogRecord(
                    ip_address=entry.ip_address or "",
                    userid=entry.userid,
                    event_time=_naive(entry.event_time),
                    object_type=entry.object_type.value,
                    severity=entry.severity.value,
                    event_type=entry.event_type.value,
                    message=entry.message,
                )
            )
            await session.commit()
        return True


class FileSink(Sink):
    """Appends fixed-width lines to a plain-text log.

    The file is opened, appended and closed on every write; concurrent
    writers rely on append-mode atomicity, there is no locking.
    """

    name = "file"

    def __init__(self, directory: Callable[[], str] | None = None):
        self._directory = directory or (lambda: settings.file_path)

    def log_file(self) -> Path | None:
        """Path of the log file for the currently configured directory."""
        raw = (self._directory() or "").strip()
        if not raw:
            return None
        return Path(raw.rstrip("/\\") or raw) / LOG_FILE_NAME

    async def write(self, entry: AuditEntry) -> bool:
        log_file = self.log_file()
        if log_file is None:
            logger.warning("File storage selected but no directory configured, entry dropped")
            return False

        directory = log_file.parent
        if not directory.is_dir():
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning(f"Cannot create audit log directory {directory}: {e}")
                return False

        if not os.access(directory, os.W_OK):
            logger.warning(f"Audit log directory is not writable: {directory}")
            return False

        is_new = not log_file.exists()
        line = LINE_FORMAT % (
            format_time(entry.event_time),
            entry.userid,
            entry.event_type.value,
            LINE_BREAKS.sub(" ", entry.message),
        )

        with open(log_file, "a", encoding="utf-8") as f:
            if is_new:
                f.write(SEPARATOR)
                f.write(HEADER)
                f.write(SEPARATOR)
            f.write(line)

        return True


def _naive(value: datetime | None) -> datetime:
    """Drop tzinfo, keeping the wall-clock time of the configured zone."""
    if value is None:
        value = datetime.now(settings.tzinfo)
    return value.replace(tzinfo=None)
