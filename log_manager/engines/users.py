"""User session engine: logins, logouts and failed authentication."""

import logging
import re

from log_manager.audit.formatting import bold, join_lines, labelled
from log_manager.audit.models import EventType, ObjectType, Severity
from log_manager.context import RequestContext
from log_manager.dispatch import NotificationBus
from log_manager.engines.base import Engine
from log_manager.events import AuthenticationAttempted, LoginCookieIssued, UserLoggedOut
from log_manager.host import UserAccount

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Runs after the host has decided the outcome of the attempt
AUTHENTICATION_PRIORITY = 30


def looks_like_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value.strip()))


def full_name_line(user: UserAccount | None) -> str:
    """``Full Name: <b>..</b>`` line, or empty when no name is set."""
    if user is None:
        return ""
    first = (user.first_name or "").strip()
    last = (user.last_name or "").strip()
    if not first and not last:
        return ""
    return labelled("Full Name", f"{first} {last}".strip())


class UserSessionEngine(Engine):
    """Audit entries for authentication events."""

    name = "users"

    def register(self, bus: NotificationBus) -> None:
        bus.subscribe(LoginCookieIssued, self.on_login)
        bus.subscribe(UserLoggedOut, self.on_logout)
        bus.subscribe(AuthenticationAttempted, self.on_authentication, priority=AUTHENTICATION_PRIORITY)

    def _account_lines(self, lead: str, user: UserAccount) -> str:
        return join_lines([
            lead,
            labelled("User ID", user.id),
            labelled("Role", ", ".join(user.roles)),
            labelled("Email", user.email),
            full_name_line(user),
        ])

    async def on_login(self, ctx: RequestContext, event: LoginCookieIssued) -> None:
        user = self.host.get_user(event.user_id)
        if user is None:
            return

        message = self._account_lines("Login successful.", user)
        await self.emit(
            ctx.entry(ObjectType.USER, EventType.LOGGED_IN, message, severity=Severity.INFO, userid=user.id)
        )

    async def on_logout(self, ctx: RequestContext, event: UserLoggedOut) -> None:
        if not event.user_id:
            return
        user = self.host.get_user(event.user_id)
        if user is None:
            return

        message = self._account_lines("User logged out.", user)
        await self.emit(
            ctx.entry(ObjectType.USER, EventType.LOGOUT, message, severity=Severity.INFO, userid=user.id)
        )

    async def on_authentication(self, ctx: RequestContext, event: AuthenticationAttempted) -> None:
        # Logout flows re-run authentication with no credentials
        if ctx.has_fired(UserLoggedOut.name):
            return

        username = (event.username or "").strip()
        if not username:
            return

        if event.succeeded:
            return

        user = self.resolve_account(username)
        if user is not None:
            message = join_lines([
                "Wrong password attempt.",
                labelled("User ID", user.id),
                labelled("Username", user.login),
                labelled("Email", user.email),
                full_name_line(user),
            ])
            await self.emit(
                ctx.entry(
                    ObjectType.USER, EventType.LOGIN_FAILED, message,
                    severity=Severity.WARNING, userid=user.id,
                )
            )
            return

        message = f"Login attempt with non-existent username: {bold(username)}"
        logger.debug(f"Failed login for unknown username {username!r}")
        await self.emit(
            ctx.entry(ObjectType.USER, EventType.LOGIN_FAILED, message, severity=Severity.ALERT, userid=0)
        )

    def resolve_account(self, identifier: str) -> UserAccount | None:
        """Find an account by login name, then by email."""
        user = self.host.get_user_by_login(identifier)
        if user is None and looks_like_email(identifier):
            user = self.host.get_user_by_email(identifier)
        return user
