"""Request-scoped state shared by the before/after halves of each diff.

A RequestContext is created for one host request and passed to every
handler invoked during it. Nothing here outlives the request.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

from log_manager.audit.models import AuditEntry, EventType, ObjectType, Severity

logger = logging.getLogger(__name__)


class SnapshotCategory(str, Enum):
    """Kinds of before-state a handler can stash."""

    TERM_UPDATE = "term_update"
    TERM_DELETE = "term_delete"
    TERM_FIELDS = "term_fields"
    FEATURED_ASSET = "featured_asset"


class SnapshotKey(NamedTuple):
    category: SnapshotCategory
    entity_id: int


class PendingStateBuffer:
    """Before-state snapshots keyed by (category, entity id).

    At most one live snapshot per key: a second ``put`` replaces the first.
    """

    def __init__(self) -> None:
        self._snapshots: dict[SnapshotKey, Any] = {}

    def put(self, category: SnapshotCategory, entity_id: int, snapshot: Any) -> None:
        self._snapshots[SnapshotKey(category, int(entity_id))] = snapshot

    def take(self, category: SnapshotCategory, entity_id: int, default: Any = None) -> Any:
        """Return and erase the snapshot for a key."""
        return self._snapshots.pop(SnapshotKey(category, int(entity_id)), default)

    def peek(self, category: SnapshotCategory, entity_id: int, default: Any = None) -> Any:
        return self._snapshots.get(SnapshotKey(category, int(entity_id)), default)

    def has(self, category: SnapshotCategory, entity_id: int) -> bool:
        return SnapshotKey(category, int(entity_id)) in self._snapshots

    def discard(self, category: SnapshotCategory, entity_id: int) -> None:
        self._snapshots.pop(SnapshotKey(category, int(entity_id)), None)

    def keys(self) -> list[SnapshotKey]:
        return list(self._snapshots)

    def clear(self) -> None:
        self._snapshots.clear()

    def __len__(self) -> int:
        return len(self._snapshots)


class SuppressionMarkers:
    """Per-request "already handled" flags, keyed by entity id."""

    def __init__(self) -> None:
        self._claimed: set[int] = set()

    def claim(self, entity_id: int) -> bool:
        """Mark an entity as handled. Returns False if it already was."""
        entity_id = int(entity_id)
        if entity_id in self._claimed:
            return False
        self._claimed.add(entity_id)
        return True

    def is_claimed(self, entity_id: int) -> bool:
        return int(entity_id) in self._claimed


@dataclass
class RequestContext:
    """Everything a handler may know about the request it runs in."""

    ip_address: str = ""
    user_id: int = 0
    pending: PendingStateBuffer = field(default_factory=PendingStateBuffer)
    featured_asset_logged: SuppressionMarkers = field(default_factory=SuppressionMarkers)
    fired: set[str] = field(default_factory=set)

    def has_fired(self, notification_name: str) -> bool:
        """Whether a notification was already dispatched in this request."""
        return notification_name in self.fired

    def entry(
        self,
        object_type: ObjectType,
        event_type: EventType,
        message: str,
        severity: Severity = Severity.NOTICE,
        userid: int | None = None,
    ) -> AuditEntry:
        """Build an entry attributed to this request's caller."""
        return AuditEntry(
            object_type=object_type,
            event_type=event_type,
            message=message,
            severity=severity,
            ip_address=self.ip_address or "",
            userid=self.user_id if userid is None else userid,
        )

    def close(self) -> None:
        """Drop anything left behind at the end of the request."""
        orphaned = self.pending.keys()
        if orphaned:
            logger.debug(f"Discarding {len(orphaned)} unconsumed snapshot(s): {orphaned}")
        self.pending.clear()
