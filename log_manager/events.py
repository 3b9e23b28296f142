"""Typed lifecycle notifications.

Each host notification maps to one dataclass. Field order matches the
positional payload the host sends under ``name``, so a raw hook call can be
turned into a typed event with ``build_notification(name, *args)``. Payloads
that do not line up with their event go through ``PAYLOAD_ADAPTERS`` first.
"""

import logging
from dataclasses import MISSING, dataclass, fields
from typing import Any, Callable, ClassVar

from log_manager.host import Post, Term

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    """Base class for all notifications."""

    name: ClassVar[str] = ""


# =============================================================================
# Content
# =============================================================================


@dataclass
class PostStatusChanged(Notification):
    name: ClassVar[str] = "transition_post_status"

    new_status: str
    old_status: str
    post: Post | None


@dataclass
class PostDeleting(Notification):
    """Fired before a post is permanently deleted."""

    name: ClassVar[str] = "before_delete_post"

    post_id: int


@dataclass
class PostUpdated(Notification):
    """Fired after an existing post is saved, with both versions."""

    name: ClassVar[str] = "post_updated"

    post_id: int
    post_after: Post | None
    post_before: Post | None


@dataclass
class PostUpdating(Notification):
    """Fired once per save request, before the post row is updated."""

    name: ClassVar[str] = "pre_post_update"

    post_id: int
    data: dict[str, Any] | None = None


@dataclass
class PostSaved(Notification):
    """Fired after the save completes. May fire more than once per request."""

    name: ClassVar[str] = "save_post"

    post_id: int
    post: Post | None
    update: bool = True


# =============================================================================
# Taxonomy
# =============================================================================


@dataclass
class TermCreated(Notification):
    name: ClassVar[str] = "created_term"

    term_id: int
    tt_id: int
    taxonomy: str


@dataclass
class TermEditing(Notification):
    name: ClassVar[str] = "edit_term"

    term_id: int
    tt_id: int
    taxonomy: str


@dataclass
class TermEdited(Notification):
    name: ClassVar[str] = "edited_term"

    term_id: int
    tt_id: int
    taxonomy: str


@dataclass
class TermDeleting(Notification):
    name: ClassVar[str] = "pre_delete_term"

    term_id: int
    taxonomy: str


@dataclass
class TermDeleted(Notification):
    name: ClassVar[str] = "delete_term"

    term_id: int
    tt_id: int
    taxonomy: str
    deleted_term: Term | None = None


@dataclass
class ObjectTermsSet(Notification):
    """Term assignment on a content object changed."""

    name: ClassVar[str] = "set_object_terms"

    object_id: int
    terms: list[Any]
    tt_ids: list[int]
    taxonomy: str
    append: bool
    old_tt_ids: list[int]


@dataclass
class CustomFieldsSave(Notification):
    """Custom fields of an object are being saved.

    The host writes the fields from its own handler at the default priority,
    so subscribers before it see the old values and subscribers after it see
    the new ones. ``target`` is the host's object reference, e.g. ``term_12``.
    """

    name: ClassVar[str] = "acf/save_post"

    target: str

    @property
    def object_ref(self) -> tuple[str, int] | None:
        return parse_object_ref(self.target)


# =============================================================================
# Metadata
# =============================================================================


@dataclass
class PostMetaAdded(Notification):
    name: ClassVar[str] = "added_post_meta"

    meta_id: int
    post_id: int
    meta_key: str
    meta_value: Any


@dataclass
class PostMetaUpdated(Notification):
    name: ClassVar[str] = "updated_post_meta"

    meta_id: int
    post_id: int
    meta_key: str
    meta_value: Any


@dataclass
class PostMetaDeleted(Notification):
    name: ClassVar[str] = "deleted_post_meta"

    meta_ids: Any
    post_id: int
    meta_key: str
    meta_value: Any


# =============================================================================
# Sessions
# =============================================================================


@dataclass
class LoginCookieIssued(Notification):
    """An authentication cookie was issued for a resolved account."""

    name: ClassVar[str] = "set_logged_in_cookie"

    cookie: str
    expire: int
    expiration: int
    user_id: int


@dataclass
class UserLoggedOut(Notification):
    name: ClassVar[str] = "wp_logout"

    user_id: int


@dataclass
class AuthenticationAttempted(Notification):
    """An authentication attempt finished.

    Built from the host payload ``(user_or_error, username, password)`` by
    ``authentication_payload``. The password is dropped there.
    """

    name: ClassVar[str] = "authenticate"

    username: str
    succeeded: bool


NOTIFICATION_TYPES: dict[str, type[Notification]] = {
    cls.name: cls
    for cls in (
        PostStatusChanged,
        PostDeleting,
        PostUpdated,
        PostUpdating,
        PostSaved,
        TermCreated,
        TermEditing,
        TermEdited,
        TermDeleting,
        TermDeleted,
        ObjectTermsSet,
        CustomFieldsSave,
        PostMetaAdded,
        PostMetaUpdated,
        PostMetaDeleted,
        LoginCookieIssued,
        UserLoggedOut,
        AuthenticationAttempted,
    )
}


def parse_object_ref(target: Any) -> tuple[str, int] | None:
    """Split a host object reference like ``term_12`` into ``("term", 12)``."""
    if not isinstance(target, str) or "_" not in target:
        return None
    kind, _, raw_id = target.rpartition("_")
    if not kind or not raw_id.isdigit():
        return None
    return kind, int(raw_id)


def authentication_payload(user_or_error: Any, username: Any, password: Any = None) -> tuple[Any, bool]:
    """Reduce the host's authenticate payload to ``(username, succeeded)``.

    The host passes either the resolved account or an error object first.
    """
    return username, not isinstance(user_or_error, Exception)


# Host payloads whose shape differs from the typed event
PAYLOAD_ADAPTERS: dict[str, Callable[..., tuple]] = {
    AuthenticationAttempted.name: authentication_payload,
}


def build_notification(name: str, *args: Any) -> Notification | None:
    """Build a typed notification from a positional host payload.

    Returns None for unknown names or payloads with the wrong arity.
    """
    cls = NOTIFICATION_TYPES.get(name)
    if cls is None:
        logger.debug(f"Ignoring unknown notification: {name}")
        return None

    adapter = PAYLOAD_ADAPTERS.get(name)
    if adapter is not None:
        try:
            args = adapter(*args)
        except TypeError:
            logger.debug(f"Malformed payload for {name}: got {len(args)} args")
            return None

    params = fields(cls)
    required = len([f for f in params if f.default is MISSING and f.default_factory is MISSING])
    if not required <= len(args) <= len(params):
        logger.debug(f"Malformed payload for {name}: expected {required}-{len(params)} args, got {len(args)}")
        return None

    return cls(*args)
