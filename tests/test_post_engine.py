"""Tests for the content lifecycle engine."""

import pytest

from log_manager.audit.models import EventType, ObjectType
from log_manager.engines.posts import classify_status_transition, diff_post_fields
from log_manager.events import PostDeleting, PostStatusChanged, PostUpdated
from log_manager.host import Post


class TestStatusClassification:
    @pytest.mark.parametrize(
        "new,old,event_type,lead",
        [
            ("draft", "trash", EventType.RESTORED, "Post has been restored."),
            ("trash", "publish", EventType.TRASHED, "Post has been moved to trash."),
            ("draft", "auto-draft", EventType.CREATED, "New post has been created."),
            ("publish", "auto-draft", EventType.CREATED, "New post has been created."),
            ("publish", "draft", EventType.MODIFIED, "Post has been published."),
            ("private", "publish", EventType.MODIFIED, "Post has been set to private."),
            ("pending", "draft", EventType.MODIFIED, "Post status changed from draft to pending."),
            ("publish", "publish", EventType.MODIFIED, "Post content has been updated."),
        ],
    )
    def test_transition_table(self, new, old, event_type, lead):
        assert classify_status_transition(new, old) == (event_type, lead)

    def test_trash_to_trash_is_trashed(self):
        """Restoration requires leaving the trash."""
        assert classify_status_transition("trash", "trash")[0] == EventType.TRASHED


class TestStatusChanged:
    @pytest.mark.asyncio
    async def test_message_layout(self, manager, recorder, ctx):
        post = Post(id=10, title="Hello <world>", status="publish")

        await manager.notify(ctx, PostStatusChanged("publish", "draft", post))

        entry = recorder.last()
        assert entry.object_type == ObjectType.POST
        assert entry.event_type == EventType.MODIFIED
        lines = entry.message.split("<br/>")
        assert lines[0] == "Post has been published."
        assert lines[1] == "Post Title: <b>Hello &lt;world&gt;</b>"
        assert lines[2] == "Post ID: <b>10</b>"
        assert lines[3] == "Post Type: <b>post</b>"
        assert lines[4].startswith("View post: <b><a href=\"https://cms.example/edit/post/10\"")

    @pytest.mark.asyncio
    async def test_revision_autosave_and_missing_ignored(self, manager, recorder, ctx):
        await manager.notify(ctx, PostStatusChanged("inherit", "new", Post(id=11, post_type="revision")))
        await manager.notify(ctx, PostStatusChanged("draft", "draft", Post(id=12, is_autosave=True)))
        await manager.notify(ctx, PostStatusChanged("draft", "draft", None))
        await manager.notify(ctx, PostStatusChanged("draft", "draft", Post(id=0)))

        assert recorder.entries == []

    @pytest.mark.asyncio
    async def test_settings_post_type(self, manager, recorder, ctx):
        post = Post(id=30, title="Hero block", post_type="acf-field")

        await manager.notify(ctx, PostStatusChanged("publish", "publish", post))

        entry = recorder.last()
        assert entry.object_type == ObjectType.SETTINGS
        assert entry.event_type == EventType.MODIFIED
        assert entry.message.startswith("ACF Field updated.")
        assert "Title: <b>Hero block</b>" in entry.message

    @pytest.mark.asyncio
    async def test_attribution(self, manager, recorder, ctx):
        await manager.notify(ctx, PostStatusChanged("draft", "auto-draft", Post(id=13, title="New")))

        entry = recorder.last()
        assert entry.ip_address == "203.0.113.7"
        assert entry.userid == 1
        assert entry.event_time is None


class TestPostDeleting:
    @pytest.mark.asyncio
    async def test_permanent_delete(self, manager, recorder, ctx, host):
        host.add_post(Post(id=20, title="Old news", post_type="page"))

        await manager.notify(ctx, PostDeleting(20))

        entry = recorder.last()
        assert entry.event_type == EventType.DELETED
        assert entry.message.startswith("Permanently deleted the post.")
        assert "Post Type: <b>page</b>" in entry.message

    @pytest.mark.asyncio
    async def test_revision_delete_ignored(self, manager, recorder, ctx, host):
        host.add_post(Post(id=21, post_type="revision", parent_id=20))

        await manager.notify(ctx, PostDeleting(21))
        await manager.notify(ctx, PostDeleting(404))

        assert recorder.entries == []


class TestPostUpdated:
    def test_diff_post_fields(self):
        before = Post(id=1, title="A", excerpt="x", slug="a")
        after = Post(id=1, title="B", excerpt="y", slug="b")

        assert diff_post_fields(before, after) == [
            "Title changed from <b>A</b> to <b>B</b>",
            "Excerpt updated.",
            "Slug changed from <b>a</b> to <b>b</b>",
        ]

    @pytest.mark.asyncio
    async def test_field_changes_one_entry(self, manager, recorder, ctx):
        before = Post(id=5, title="Draft title", slug="draft-title")
        after = Post(id=5, title="Final title", slug="draft-title")

        await manager.notify(ctx, PostUpdated(5, after, before))

        assert len(recorder.entries) == 1
        message = recorder.last().message
        assert message.startswith("Title changed from <b>Draft title</b> to <b>Final title</b>")
        assert "Slug changed" not in message
        assert "Excerpt" not in message

    @pytest.mark.asyncio
    async def test_no_changes_no_entry(self, manager, recorder, ctx):
        post = Post(id=5, title="Same")
        await manager.notify(ctx, PostUpdated(5, post, Post(id=5, title="Same")))
        assert recorder.entries == []

    @pytest.mark.asyncio
    async def test_status_and_field_changes_are_separate_entries(self, manager, recorder, ctx):
        before = Post(id=6, title="One", status="draft")
        after = Post(id=6, title="Two", status="publish")

        await manager.notify(ctx, PostStatusChanged("publish", "draft", after))
        await manager.notify(ctx, PostUpdated(6, after, before))

        assert len(recorder.entries) == 2
        assert recorder.entries[0].message.startswith("Post has been published.")
        assert recorder.entries[1].message.startswith("Title changed")
