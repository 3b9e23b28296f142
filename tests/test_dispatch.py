"""Tests for notification dispatch and the positional-payload adapter."""

import logging

import pytest

from log_manager.context import RequestContext
from log_manager.dispatch import NotificationBus
from log_manager.events import (
    AuthenticationAttempted,
    CustomFieldsSave,
    PostSaved,
    TermDeleted,
    TermEdited,
    UserLoggedOut,
    build_notification,
    parse_object_ref,
)
from log_manager.host import UserAccount


class TestNotificationBus:
    """Tests for subscription ordering and failure isolation."""

    @pytest.mark.asyncio
    async def test_priority_order(self):
        bus = NotificationBus()
        calls = []

        async def late(ctx, event):
            calls.append("late")

        async def early(ctx, event):
            calls.append("early")

        async def default(ctx, event):
            calls.append("default")

        bus.subscribe(UserLoggedOut, late, priority=30)
        bus.subscribe(UserLoggedOut, default)
        bus.subscribe(UserLoggedOut, early, priority=5)

        await bus.publish(RequestContext(), UserLoggedOut(1))

        assert calls == ["early", "default", "late"]

    @pytest.mark.asyncio
    async def test_failing_handler_is_isolated(self, caplog):
        bus = NotificationBus()
        calls = []

        async def broken(ctx, event):
            raise RuntimeError("boom")

        async def healthy(ctx, event):
            calls.append(event.user_id)

        bus.subscribe(UserLoggedOut, broken)
        bus.subscribe(UserLoggedOut, healthy)

        with caplog.at_level(logging.ERROR, logger="log_manager.dispatch"):
            succeeded = await bus.publish(RequestContext(), UserLoggedOut(9))

        assert succeeded == 1
        assert calls == [9]
        assert "failed for wp_logout" in caplog.text

    @pytest.mark.asyncio
    async def test_publish_records_fired_name(self):
        ctx = RequestContext()

        await NotificationBus().publish(ctx, UserLoggedOut(1))

        assert ctx.has_fired("wp_logout")
        assert not ctx.has_fired("authenticate")

    def test_unsubscribe(self):
        bus = NotificationBus()

        async def handler(ctx, event):
            pass

        subscription = bus.subscribe(UserLoggedOut, handler)
        bus.unsubscribe(subscription)

        assert bus.handlers_for(UserLoggedOut) == []


class TestBuildNotification:
    def test_full_payload(self):
        event = build_notification("edited_term", 12, 112, "category")
        assert event == TermEdited(12, 112, "category")

    def test_optional_trailing_args(self):
        assert build_notification("delete_term", 12, 112, "category") == TermDeleted(12, 112, "category")
        assert build_notification("save_post", 5, None) == PostSaved(5, None)

    def test_unknown_name(self):
        assert build_notification("init") is None

    def test_wrong_arity(self):
        assert build_notification("edited_term", 12) is None
        assert build_notification("wp_logout", 1, 2) is None

    def test_custom_fields_hook(self):
        event = build_notification("acf/save_post", "term_12")
        assert isinstance(event, CustomFieldsSave)
        assert event.object_ref == ("term", 12)

    def test_authenticate_failure_from_error_object(self):
        event = build_notification("authenticate", ValueError("incorrect_password"), "admin", "hunter2")
        assert event == AuthenticationAttempted("admin", False)
        assert "hunter2" not in repr(event)

    def test_authenticate_success_from_account(self):
        account = UserAccount(id=1, login="admin")
        assert build_notification("authenticate", account, "admin", "hunter2") == AuthenticationAttempted("admin", True)
        assert build_notification("authenticate", None, "admin", "") == AuthenticationAttempted("admin", True)

    def test_authenticate_wrong_arity(self):
        assert build_notification("authenticate", "admin") is None
        assert build_notification("authenticate", None, "admin", "pw", "extra") is None


class TestParseObjectRef:
    @pytest.mark.parametrize(
        "target,expected",
        [
            ("term_12", ("term", 12)),
            ("post_7", ("post", 7)),
            ("user_options_3", ("user_options", 3)),
            ("options", None),
            ("term_", None),
            ("_12", None),
            ("term_abc", None),
            (12, None),
            (None, None),
        ],
    )
    def test_parse(self, target, expected):
        assert parse_object_ref(target) == expected
