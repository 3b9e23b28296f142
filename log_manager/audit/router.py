"""Routes audit entries to the configured storage backend."""

import logging
from datetime import datetime

from log_manager.audit.models import AuditEntry, Severity
from log_manager.audit.sinks import DatabaseSink, FileSink, Sink
from log_manager.config import Settings, StorageType, settings as app_settings

logger = logging.getLogger(__name__)


class StorageRouter:
    """Single entry point for persisting audit entries.

    The backend is read from settings on every call, so switching storage
    takes effect on the next write. A failed write is logged and dropped;
    nothing is ever raised back to the caller.
    """

    def __init__(
        self,
        database_sink: Sink | None = None,
        file_sink: Sink | None = None,
        config: Settings | None = None,
    ):
        self._sinks: dict[StorageType, Sink] = {
            StorageType.DATABASE: database_sink or DatabaseSink(),
            StorageType.FILE: file_sink or FileSink(),
        }
        self._config = config

    @property
    def config(self) -> Settings:
        return self._config or app_settings

    def active_sink(self) -> Sink:
        """Sink for the currently configured storage type."""
        storage = StorageType(self.config.storage_type)
        return self._sinks[storage]

    async def record(self, entry: AuditEntry) -> None:
        """Stamp and persist an entry through the active sink."""
        try:
            if entry.event_time is None:
                entry = entry.stamped(datetime.now(self.config.tzinfo))

            sink = self.active_sink()
            self._echo(entry, sink)
            written = await sink.write(entry)
            if not written:
                logger.debug(f"Audit entry skipped by {sink.name} sink")
        except Exception as e:
            logger.error(
                f"Failed to write audit entry: {e}",
                extra={"object_type": entry.object_type.value, "event_type": entry.event_type.value},
            )

    def _echo(self, entry: AuditEntry, sink: Sink) -> None:
        """Mirror the entry to the standard logger for immediate visibility."""
        log_msg = f"[AUDIT:{entry.object_type.value}] {entry.event_type.value} user={entry.userid} -> {sink.name}"
        extra = {
            "object_type": entry.object_type.value,
            "event_type": entry.event_type.value,
            "severity": entry.severity.value,
            "userid": entry.userid,
            "client_ip": entry.ip_address,
        }
        if entry.severity.rank >= Severity.WARNING.rank:
            logger.warning(log_msg, extra=extra)
        else:
            logger.info(log_msg, extra=extra)


# Global storage router instance
storage_router = StorageRouter()
