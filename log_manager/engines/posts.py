"""Content lifecycle engine.

Classifies post status transitions, records permanent deletions and diffs
title/excerpt/slug across a save.
"""

import logging

from log_manager.audit.formatting import bold, bold_link, esc, join_lines, labelled
from log_manager.audit.models import EventType, ObjectType
from log_manager.config import settings
from log_manager.context import RequestContext
from log_manager.dispatch import NotificationBus
from log_manager.engines.base import Engine
from log_manager.events import PostDeleting, PostStatusChanged, PostUpdated
from log_manager.host import AUTO_DRAFT, PRIVATE, PUBLISH, TRASH, Post

logger = logging.getLogger(__name__)


def classify_status_transition(new_status: str, old_status: str) -> tuple[EventType, str]:
    """Map a status transition to an event type and its lead sentence.

    Rows are checked in order; the first match wins.
    """
    if old_status == TRASH and new_status != TRASH:
        return EventType.RESTORED, "Post has been restored."
    if new_status == TRASH:
        return EventType.TRASHED, "Post has been moved to trash."
    if old_status == AUTO_DRAFT and new_status != AUTO_DRAFT:
        return EventType.CREATED, "New post has been created."
    if old_status != new_status:
        if new_status == PUBLISH:
            return EventType.MODIFIED, "Post has been published."
        if new_status == PRIVATE:
            return EventType.MODIFIED, "Post has been set to private."
        return EventType.MODIFIED, f"Post status changed from {esc(old_status)} to {esc(new_status)}."
    return EventType.MODIFIED, "Post content has been updated."


class PostLifecycleEngine(Engine):
    """Audit entries for posts and other content types."""

    name = "posts"

    def register(self, bus: NotificationBus) -> None:
        bus.subscribe(PostStatusChanged, self.on_status_changed)
        bus.subscribe(PostDeleting, self.on_deleting)
        bus.subscribe(PostUpdated, self.on_updated)

    async def on_status_changed(self, ctx: RequestContext, event: PostStatusChanged) -> None:
        post = event.post
        if post is None or not post.id:
            return
        if post.is_revision_or_autosave:
            return

        settings_label = settings.settings_post_types.get(post.post_type)
        if settings_label:
            await self._log_settings_change(ctx, post, settings_label)
            return

        event_type, lead = classify_status_transition(event.new_status, event.old_status)
        message = join_lines([
            lead,
            labelled("Post Title", post.title),
            labelled("Post ID", post.id),
            labelled("Post Type", post.post_type),
            "View post: " + bold_link(self.host.edit_post_link(post.id), "view post in editor"),
        ])

        await self.emit(ctx.entry(ObjectType.POST, event_type, message))

    async def _log_settings_change(self, ctx: RequestContext, post: Post, label: str) -> None:
        message = join_lines([
            f"{esc(label)} updated.",
            labelled("Title", post.title),
            labelled("ID", post.id),
            bold_link(self.host.edit_post_link(post.id), "Edit"),
        ])
        await self.emit(ctx.entry(ObjectType.SETTINGS, EventType.MODIFIED, message))

    async def on_deleting(self, ctx: RequestContext, event: PostDeleting) -> None:
        """Permanent deletion (not trashing)."""
        post = self.host.get_post(event.post_id)
        if post is None or post.is_revision:
            return

        message = join_lines([
            "Permanently deleted the post.",
            labelled("Post Title", post.title),
            labelled("Post ID", post.id),
            labelled("Post Type", post.post_type),
        ])
        await self.emit(ctx.entry(ObjectType.POST, EventType.DELETED, message))

    async def on_updated(self, ctx: RequestContext, event: PostUpdated) -> None:
        """Diff title, excerpt and slug between the two versions of a save."""
        before, after = event.post_before, event.post_after
        if before is None or after is None:
            return
        if after.is_revision_or_autosave:
            return

        changes = diff_post_fields(before, after)
        if not changes:
            return

        message = join_lines(changes + [
            labelled("Post ID", event.post_id),
            labelled("Post Title", after.title),
        ])
        await self.emit(ctx.entry(ObjectType.POST, EventType.MODIFIED, message))


def diff_post_fields(before: Post, after: Post) -> list[str]:
    """One description per changed field, in title/excerpt/slug order."""
    changes = []
    if before.title != after.title:
        changes.append(f"Title changed from {bold(before.title)} to {bold(after.title)}")
    if before.excerpt != after.excerpt:
        changes.append("Excerpt updated.")
    if before.slug != after.slug:
        changes.append(f"Slug changed from {bold(before.slug)} to {bold(after.slug)}")
    return changes
