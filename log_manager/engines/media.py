"""Featured-asset engine.

Two detectors share one per-post, per-request suppression marker:

- the diff detector snapshots the featured asset before a save and compares
  after it, classifying the change as assigned / modified / removed;
- the metadata detector watches raw writes to the featured-asset meta key.

The marker is claimed only when an entry is written. The metadata detector
stands aside while a diff snapshot is pending for the post only when the
save is certain to report the same change, so a post gets at most one
featured-asset entry per request and no change is dropped by either path.
"""

import logging
from enum import Enum

from log_manager.audit.formatting import bold, join_lines, labelled, link
from log_manager.audit.models import EventType, ObjectType
from log_manager.context import RequestContext, SnapshotCategory
from log_manager.dispatch import NotificationBus
from log_manager.engines.base import Engine
from log_manager.events import (
    PostMetaAdded,
    PostMetaDeleted,
    PostMetaUpdated,
    PostSaved,
    PostUpdating,
)
from log_manager.host import Post

logger = logging.getLogger(__name__)

FEATURED_ASSET_META_KEY = "_thumbnail_id"

# Runs after the host's own save handlers
POST_SAVED_PRIORITY = 20


class FeaturedAssetChange(str, Enum):
    ASSIGNED = "assigned"
    MODIFIED = "modified"
    REMOVED = "removed"


def _as_asset_id(value) -> int:
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError):
        return 0


def classify_featured_asset_change(old_id: int, new_id: int) -> FeaturedAssetChange | None:
    """Classify a before/after pair of featured asset ids (0 = unset)."""
    old_id, new_id = _as_asset_id(old_id), _as_asset_id(new_id)
    if old_id == new_id:
        return None
    if old_id and not new_id:
        return FeaturedAssetChange.REMOVED
    if not old_id and new_id:
        return FeaturedAssetChange.ASSIGNED
    return FeaturedAssetChange.MODIFIED


class FeaturedAssetEngine(Engine):
    """Audit entries for featured asset changes on content items."""

    name = "media"

    def register(self, bus: NotificationBus) -> None:
        bus.subscribe(PostUpdating, self.on_post_updating)
        bus.subscribe(PostSaved, self.on_post_saved, priority=POST_SAVED_PRIORITY)
        bus.subscribe(PostMetaAdded, self.on_meta_set)
        bus.subscribe(PostMetaUpdated, self.on_meta_set)
        bus.subscribe(PostMetaDeleted, self.on_meta_deleted)

    # =========================================================================
    # Diff detector
    # =========================================================================

    async def on_post_updating(self, ctx: RequestContext, event: PostUpdating) -> None:
        post = self.host.get_post(event.post_id)
        if post is not None and post.is_revision_or_autosave:
            return
        current = self.host.get_featured_asset_id(event.post_id)
        ctx.pending.put(SnapshotCategory.FEATURED_ASSET, event.post_id, _as_asset_id(current))

    async def on_post_saved(self, ctx: RequestContext, event: PostSaved) -> None:
        post = event.post
        if post is None or post.is_revision_or_autosave:
            return

        old_id = ctx.pending.take(SnapshotCategory.FEATURED_ASSET, event.post_id, 0)

        # The host can fire this several times for one logical save
        if ctx.featured_asset_logged.is_claimed(event.post_id):
            return

        new_id = _as_asset_id(self.host.get_featured_asset_id(event.post_id))

        change = classify_featured_asset_change(old_id, new_id)
        if change is None:
            return

        if change == FeaturedAssetChange.REMOVED:
            await self._log_removed(ctx, post)
        elif change == FeaturedAssetChange.ASSIGNED:
            await self._log_set(ctx, post, new_id, EventType.ASSIGNED)
        else:
            await self._log_set(ctx, post, new_id, EventType.MODIFIED)

    async def _log_set(self, ctx: RequestContext, post: Post, attachment_id: int, event_type: EventType) -> None:
        media_url = self.host.get_attachment_url(attachment_id)
        if not media_url:
            return

        message = join_lines([
            f"Media ID {bold(attachment_id)} {event_type.value} as featured image.",
            labelled("Post ID", post.id),
            labelled("Post Title", post.title),
            "Media URL: " + link(media_url, "View Media"),
        ])
        await self._emit_once(ctx, post.id, ctx.entry(ObjectType.MEDIA, event_type, message))

    async def _log_removed(self, ctx: RequestContext, post: Post) -> None:
        message = join_lines([
            "Featured image removed from post.",
            labelled("Post ID", post.id),
            labelled("Post Title", post.title),
            "Edit Post: " + link(self.host.edit_post_link(post.id), "Edit"),
        ])
        await self._emit_once(ctx, post.id, ctx.entry(ObjectType.MEDIA, EventType.DELETED, message))

    async def _emit_once(self, ctx: RequestContext, post_id: int, entry) -> None:
        """Emit unless either detector already reported this post."""
        if not ctx.featured_asset_logged.claim(post_id):
            return
        await self.emit(entry)

    # =========================================================================
    # Metadata detector
    # =========================================================================

    def _diff_detector_will_report(self, ctx: RequestContext, post_id: int, new_id: int) -> bool:
        """Whether the pending save for this post is certain to log ``new_id``."""
        old_id = ctx.pending.peek(SnapshotCategory.FEATURED_ASSET, post_id)
        if old_id is None:
            return False
        change = classify_featured_asset_change(old_id, new_id)
        if change is None:
            return False
        if change == FeaturedAssetChange.REMOVED:
            return True
        return bool(self.host.get_attachment_url(_as_asset_id(new_id)))

    async def on_meta_set(self, ctx: RequestContext, event: PostMetaAdded | PostMetaUpdated) -> None:
        if event.meta_key != FEATURED_ASSET_META_KEY:
            return

        post = self.host.get_post(event.post_id)
        if post is None or post.is_revision:
            return
        if self._diff_detector_will_report(ctx, event.post_id, event.meta_value):
            return

        message = join_lines([
            "Featured image assigned.",
            labelled("Post", post.title),
            labelled("Post ID", event.post_id),
            labelled("Media ID", _as_asset_id(event.meta_value)),
        ])
        await self._emit_once(ctx, event.post_id, ctx.entry(ObjectType.MEDIA, EventType.ASSIGNED, message))

    async def on_meta_deleted(self, ctx: RequestContext, event: PostMetaDeleted) -> None:
        if event.meta_key != FEATURED_ASSET_META_KEY:
            return

        post = self.host.get_post(event.post_id)
        if post is None:
            return
        if self._diff_detector_will_report(ctx, event.post_id, 0):
            return

        message = join_lines([
            "Featured image removed.",
            labelled("Post", post.title),
            labelled("Post ID", event.post_id),
        ])
        await self._emit_once(ctx, event.post_id, ctx.entry(ObjectType.MEDIA, EventType.DELETED, message))
