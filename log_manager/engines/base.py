"""Base class for change-detection engines."""

from abc import ABC, abstractmethod
from typing import Protocol

from log_manager.audit.models import AuditEntry
from log_manager.dispatch import NotificationBus
from log_manager.host import HostPlatform


class EntryRecorder(Protocol):
    async def record(self, entry: AuditEntry) -> None: ...


class Engine(ABC):
    """Turns lifecycle notifications into audit entries.

    Subclasses declare their handlers in ``register``; each handler receives
    the request context and the typed notification.
    """

    name: str = ""

    def __init__(self, host: HostPlatform, recorder: EntryRecorder):
        self.host = host
        self.recorder = recorder

    @abstractmethod
    def register(self, bus: NotificationBus) -> None:
        """Subscribe this engine's handlers."""
        pass

    async def emit(self, entry: AuditEntry) -> None:
        await self.recorder.record(entry)
