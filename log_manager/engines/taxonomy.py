"""Taxonomy lifecycle engine.

Records term creation, field-by-field term edits, deletions, term
assignment changes on content objects and custom-field edits on terms.
"""

import logging
from dataclasses import dataclass
from typing import Any

from log_manager.audit.formatting import (
    EMPTY_VALUE,
    bold,
    bold_link,
    esc,
    is_blank,
    join_lines,
    labelled,
    render_value,
)
from log_manager.audit.models import EventType, ObjectType, Severity
from log_manager.context import RequestContext, SnapshotCategory
from log_manager.dispatch import NotificationBus
from log_manager.engines.base import Engine
from log_manager.events import (
    CustomFieldsSave,
    ObjectTermsSet,
    TermCreated,
    TermDeleted,
    TermDeleting,
    TermEdited,
    TermEditing,
)
from log_manager.host import Term

logger = logging.getLogger(__name__)

TERM_OBJECT_KIND = "term"

# The host writes custom fields at the default priority; snapshot before, compare after
CUSTOM_FIELDS_BEFORE_PRIORITY = 5
CUSTOM_FIELDS_AFTER_PRIORITY = 20


@dataclass(frozen=True)
class TermState:
    """Tracked fields of a term at one point in time."""

    name: str
    slug: str
    parent: int
    description: str

    @classmethod
    def of(cls, term: Term) -> "TermState":
        return cls(
            name=term.name,
            slug=term.slug,
            parent=int(term.parent or 0),
            description=term.description or "",
        )


@dataclass(frozen=True)
class AssignmentDiff:
    added: list[int]
    removed: list[int]

    def __bool__(self) -> bool:
        return bool(self.added or self.removed)


def diff_term_ids(new_ids: list[int], old_ids: list[int]) -> AssignmentDiff:
    """Set difference in both directions, keeping first-seen order."""
    old_set, new_set = set(old_ids), set(new_ids)
    added = [i for i in dict.fromkeys(new_ids) if i not in old_set]
    removed = [i for i in dict.fromkeys(old_ids) if i not in new_set]
    return AssignmentDiff(added=added, removed=removed)


def diff_custom_fields(old: dict[str, Any], new: dict[str, Any]) -> list[tuple[str, Any, Any]]:
    """Changed fields as (key, old, new), iterating the new mapping.

    Keys missing from the old mapping compare as None.
    """
    changes = []
    for key, new_value in new.items():
        old_value = old.get(key)
        if _loosely_equal(old_value, new_value):
            continue
        changes.append((key, old_value, new_value))
    return changes


def _loosely_equal(a: Any, b: Any) -> bool:
    # None and "" are the same empty value for stored fields
    if is_blank(a) and is_blank(b):
        return True
    return a == b


class TaxonomyLifecycleEngine(Engine):
    """Audit entries for taxonomy terms."""

    name = "taxonomy"

    def register(self, bus: NotificationBus) -> None:
        bus.subscribe(TermCreated, self.on_created)
        bus.subscribe(TermEditing, self.on_editing)
        bus.subscribe(TermEdited, self.on_edited)
        bus.subscribe(TermDeleting, self.on_deleting)
        bus.subscribe(TermDeleted, self.on_deleted)
        bus.subscribe(ObjectTermsSet, self.on_object_terms_set)
        bus.subscribe(CustomFieldsSave, self.on_fields_saving, priority=CUSTOM_FIELDS_BEFORE_PRIORITY)
        bus.subscribe(CustomFieldsSave, self.on_fields_saved, priority=CUSTOM_FIELDS_AFTER_PRIORITY)

    # =========================================================================
    # Create
    # =========================================================================

    async def on_created(self, ctx: RequestContext, event: TermCreated) -> None:
        term = self.host.get_term(event.term_id, event.taxonomy)
        if term is None:
            return

        term_link = self.host.edit_term_link(event.term_id, event.taxonomy)
        message = join_lines([
            "Taxonomy term created.",
            "Name: " + bold_link(term_link, term.name),
            labelled("ID", event.term_id),
            labelled("Taxonomy", event.taxonomy),
        ])
        await self.emit(ctx.entry(ObjectType.TAXONOMY, EventType.CREATED, message))

    # =========================================================================
    # Update
    # =========================================================================

    async def on_editing(self, ctx: RequestContext, event: TermEditing) -> None:
        term = self.host.get_term(event.term_id, event.taxonomy)
        if term is None:
            return
        ctx.pending.put(SnapshotCategory.TERM_UPDATE, event.term_id, TermState.of(term))

    async def on_edited(self, ctx: RequestContext, event: TermEdited) -> None:
        before: TermState | None = ctx.pending.take(SnapshotCategory.TERM_UPDATE, event.term_id)
        if before is None:
            return

        after_term = self.host.get_term(event.term_id, event.taxonomy)
        if after_term is None:
            return

        changes = self.describe_term_changes(before, after_term, event.taxonomy)
        if not changes:
            return

        await self.emit(ctx.entry(ObjectType.TAXONOMY, EventType.MODIFIED, join_lines(changes)))

    def describe_term_changes(self, before: TermState, after_term: Term, taxonomy: str) -> list[str]:
        """One line per tracked field that differs."""
        after = TermState.of(after_term)
        term_id = after_term.term_id
        term_link = self.host.edit_term_link(term_id, taxonomy)
        term_ref = f"{bold_link(term_link, after.name)} (ID {term_id})"
        changes = []

        if before.parent != after.parent:
            line = self._describe_parent_change(before.parent, after.parent, term_ref, taxonomy)
            if line:
                changes.append(line)

        if before.name != after.name:
            changes.append(
                f"Taxonomy name changed from {bold(before.name)} to {bold_link(term_link, after.name)} (ID {term_id})"
            )

        if before.slug != after.slug:
            changes.append(f"Slug changed for {term_ref}: {bold(before.slug)} → {bold(after.slug)}")

        if before.description != after.description:
            old_desc = EMPTY_VALUE if is_blank(before.description) else esc(before.description)
            new_desc = EMPTY_VALUE if is_blank(after.description) else esc(after.description)
            changes.append(
                f"Description updated for {term_ref}<br/><b>Old:</b> {old_desc}<br/><b>New:</b> {new_desc}"
            )

        return changes

    def _describe_parent_change(self, old_parent: int, new_parent: int, term_ref: str, taxonomy: str) -> str | None:
        if new_parent:
            parent = self.host.get_term(new_parent, taxonomy)
            if parent is None:
                return None
            parent_link = self.host.edit_term_link(parent.term_id, taxonomy)
            return (
                f"Category {term_ref} assigned as child of "
                f"{bold_link(parent_link, parent.name)} (ID {parent.term_id})"
            )

        previous = self.host.get_term(old_parent, taxonomy)
        previous_ref = (
            f"{bold(previous.name)} (ID {previous.term_id})" if previous else f"ID {old_parent}"
        )
        return f"Category {term_ref} is no longer a child of {previous_ref}"

    # =========================================================================
    # Delete
    # =========================================================================

    async def on_deleting(self, ctx: RequestContext, event: TermDeleting) -> None:
        term = self.host.get_term(event.term_id, event.taxonomy)
        if term is None:
            return
        ctx.pending.put(SnapshotCategory.TERM_DELETE, event.term_id, term)

    async def on_deleted(self, ctx: RequestContext, event: TermDeleted) -> None:
        term = ctx.pending.take(SnapshotCategory.TERM_DELETE, event.term_id) or event.deleted_term
        if term is None:
            return

        message = join_lines([
            "Taxonomy term deleted.",
            labelled("Name", term.name),
            labelled("ID", event.term_id),
        ])
        await self.emit(ctx.entry(ObjectType.TAXONOMY, EventType.DELETED, message, severity=Severity.WARNING))

    # =========================================================================
    # Assignment
    # =========================================================================

    async def on_object_terms_set(self, ctx: RequestContext, event: ObjectTermsSet) -> None:
        post = self.host.get_post(event.object_id)
        if post is None or post.is_revision_or_autosave:
            return

        new_ids = self.host.term_ids_for([int(i) for i in (event.tt_ids or [])])
        old_ids = self.host.term_ids_for([int(i) for i in (event.old_tt_ids or [])])

        diff = diff_term_ids(new_ids, old_ids)
        if not diff:
            return

        lines = []
        if diff.added:
            lines.append(f"{bold(self._term_names(diff.added, event.taxonomy))} added to the post.")
        if diff.removed:
            lines.append(f"{bold(self._term_names(diff.removed, event.taxonomy))} removed from the post.")

        lines += [
            labelled("Taxonomy", event.taxonomy),
            labelled("Post Title", post.title),
            labelled("Post ID", post.id),
            bold_link(self.host.edit_post_link(post.id), "View post in editor"),
        ]
        await self.emit(ctx.entry(ObjectType.TAXONOMY, EventType.ASSIGNED, join_lines(lines)))

    def _term_names(self, term_ids: list[int], taxonomy: str) -> str:
        """Comma-separated names; terms that no longer resolve show as #id."""
        names = {t.term_id: t.name for t in self.host.get_terms(term_ids, taxonomy)}
        return ", ".join(names.get(i, f"#{i}") for i in term_ids)

    # =========================================================================
    # Custom fields
    # =========================================================================

    async def on_fields_saving(self, ctx: RequestContext, event: CustomFieldsSave) -> None:
        ref = event.object_ref
        if ref is None or ref[0] != TERM_OBJECT_KIND:
            return
        _, term_id = ref
        fields = self.host.get_custom_fields(TERM_OBJECT_KIND, term_id) or {}
        ctx.pending.put(SnapshotCategory.TERM_FIELDS, term_id, dict(fields))

    async def on_fields_saved(self, ctx: RequestContext, event: CustomFieldsSave) -> None:
        ref = event.object_ref
        if ref is None or ref[0] != TERM_OBJECT_KIND:
            return
        _, term_id = ref

        old_fields = ctx.pending.take(SnapshotCategory.TERM_FIELDS, term_id) or {}
        term = self.host.get_term(term_id)
        if term is None:
            return

        new_fields = self.host.get_custom_fields(TERM_OBJECT_KIND, term_id) or {}
        if not new_fields:
            return

        changes = diff_custom_fields(old_fields, new_fields)
        if not changes:
            return

        term_link = self.host.edit_term_link(term_id, term.taxonomy)
        blocks = []
        for key, old_value, new_value in changes:
            label = self.host.get_field_label(key, TERM_OBJECT_KIND, term_id) or key
            blocks.append(
                f"Field {bold(label)} updated for taxonomy {bold_link(term_link, term.name)} (ID {term_id})<br/>"
                f"<b>Old:</b> {render_value(old_value)}<br/>"
                f"<b>New:</b> {render_value(new_value)}"
            )

        await self.emit(
            ctx.entry(ObjectType.TAXONOMY, EventType.MODIFIED, join_lines(blocks, separator="<br/><br/>"))
        )
