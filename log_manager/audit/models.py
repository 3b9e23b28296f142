"""Audit entry model and enumerations."""

from dataclasses import dataclass, asdict, replace
from datetime import datetime
from enum import Enum
from typing import Any
import json


class ObjectType(str, Enum):
    """Kind of entity an audit entry is about."""
    POST = "Post"
    TAXONOMY = "Taxonomy"
    MEDIA = "Media"
    USER = "User"
    SETTINGS = "Settings"


class Severity(str, Enum):
    """Severity levels for audit entries, lowest first."""
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ALERT = "alert"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [Severity.INFO, Severity.NOTICE, Severity.WARNING, Severity.ALERT]


class EventType(str, Enum):
    """What happened to the entity."""
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    TRASHED = "trashed"
    RESTORED = "restored"
    ASSIGNED = "assigned"
    LOGGED_IN = "logged-in"
    LOGOUT = "logout"
    LOGIN_FAILED = "login-failed"


@dataclass(frozen=True)
class AuditEntry:
    """A single audit record, immutable once built."""

    object_type: ObjectType
    event_type: EventType
    message: str
    severity: Severity = Severity.NOTICE
    ip_address: str = ""
    userid: int = 0
    event_time: datetime | None = None  # stamped by the storage router

    def __post_init__(self) -> None:
        if self.userid < 0:
            raise ValueError(f"userid must be >= 0, got {self.userid}")

    def stamped(self, when: datetime) -> "AuditEntry":
        """Return a copy carrying the given event time."""
        return replace(self, event_time=when)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        d = asdict(self)
        d["object_type"] = self.object_type.value
        d["event_type"] = self.event_type.value
        d["severity"] = self.severity.value
        d["event_time"] = self.event_time.isoformat() if self.event_time else None
        return d

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)
