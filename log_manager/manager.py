"""Wires engines, the notification bus and the storage router together."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from log_manager.audit.router import storage_router
from log_manager.context import RequestContext
from log_manager.dispatch import NotificationBus
from log_manager.engines import (
    Engine,
    EntryRecorder,
    FeaturedAssetEngine,
    PostLifecycleEngine,
    TaxonomyLifecycleEngine,
    UserSessionEngine,
)
from log_manager.events import Notification, build_notification
from log_manager.host import HostPlatform

logger = logging.getLogger(__name__)

DEFAULT_ENGINES: tuple[type[Engine], ...] = (
    PostLifecycleEngine,
    TaxonomyLifecycleEngine,
    FeaturedAssetEngine,
    UserSessionEngine,
)


class LogManager:
    """Entry point used by the host platform.

    Usage:
        manager = LogManager(host)
        async with manager.request(ip_address="10.0.0.1", user_id=1) as ctx:
            await manager.notify(ctx, TermEditing(12, 40, "category"))
            ...
            await manager.notify(ctx, TermEdited(12, 40, "category"))
    """

    def __init__(
        self,
        host: HostPlatform,
        recorder: EntryRecorder | None = None,
        engines: tuple[type[Engine], ...] = DEFAULT_ENGINES,
    ):
        self.host = host
        self.recorder = recorder or storage_router
        self.bus = NotificationBus()
        self.engines: list[Engine] = []

        for engine_cls in engines:
            engine = engine_cls(host, self.recorder)
            engine.register(self.bus)
            self.engines.append(engine)

        logger.debug(f"Registered audit engines: {[e.name for e in self.engines]}")

    @asynccontextmanager
    async def request(self, ip_address: str = "", user_id: int = 0) -> AsyncIterator[RequestContext]:
        """Scope for one host request; its snapshots and markers die with it."""
        ctx = RequestContext(ip_address=ip_address or "", user_id=max(int(user_id or 0), 0))
        try:
            yield ctx
        finally:
            ctx.close()

    async def notify(self, ctx: RequestContext, event: Notification) -> None:
        """Dispatch a typed notification within a request."""
        await self.bus.publish(ctx, event)

    async def notify_hook(self, ctx: RequestContext, name: str, *args: Any) -> bool:
        """Dispatch a raw host hook call with its positional payload.

        Returns False when the payload could not be mapped to a notification.
        """
        event = build_notification(name, *args)
        if event is None:
            return False
        await self.bus.publish(ctx, event)
        return True
