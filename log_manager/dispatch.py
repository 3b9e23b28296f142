"""Subscription registry for lifecycle notifications."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from log_manager.context import RequestContext
from log_manager.events import Notification

logger = logging.getLogger(__name__)

Handler = Callable[[RequestContext, Any], Awaitable[None]]

DEFAULT_PRIORITY = 10


@dataclass
class Subscription:
    """A handler registered for one notification type."""

    notification: type[Notification]
    handler: Handler
    priority: int = DEFAULT_PRIORITY


class NotificationBus:
    """Routes typed notifications to their subscribed handlers.

    Handlers for the same notification run in ascending priority order
    (registration order breaks ties). A failing handler is logged and
    skipped; the remaining handlers still run and nothing is raised to the
    publisher.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[type[Notification], list[Subscription]] = {}

    def subscribe(
        self,
        notification: type[Notification],
        handler: Handler,
        priority: int = DEFAULT_PRIORITY,
    ) -> Subscription:
        """Register a handler for a notification type."""
        subscription = Subscription(notification, handler, priority)
        subs = self._subscriptions.setdefault(notification, [])
        subs.append(subscription)
        # sort is stable, so equal priorities keep registration order
        subs.sort(key=lambda s: s.priority)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subs = self._subscriptions.get(subscription.notification, [])
        if subscription in subs:
            subs.remove(subscription)

    def handlers_for(self, notification: type[Notification]) -> list[Handler]:
        return [s.handler for s in self._subscriptions.get(notification, [])]

    async def publish(self, ctx: RequestContext, event: Notification) -> int:
        """Dispatch an event to its handlers. Returns how many succeeded."""
        ctx.fired.add(event.name)

        succeeded = 0
        for subscription in list(self._subscriptions.get(type(event), [])):
            try:
                await subscription.handler(ctx, event)
                succeeded += 1
            except Exception:
                logger.exception(
                    f"Audit handler {getattr(subscription.handler, '__qualname__', subscription.handler)} "
                    f"failed for {event.name}"
                )
        return succeeded
