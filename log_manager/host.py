"""Host platform boundary.

The content platform owns posts, terms, media and accounts. Engines only
read from it, through the HostPlatform protocol below; every lookup may
return None when the entity does not (or no longer) exist.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol


AUTO_DRAFT = "auto-draft"
TRASH = "trash"
PUBLISH = "publish"
PRIVATE = "private"
REVISION = "revision"


@dataclass
class Post:
    """A content item as seen by the audit engines."""

    id: int
    title: str = ""
    post_type: str = "post"
    status: str = "draft"
    excerpt: str = ""
    slug: str = ""
    parent_id: int = 0
    is_autosave: bool = False

    @property
    def is_revision(self) -> bool:
        return self.post_type == REVISION

    @property
    def is_revision_or_autosave(self) -> bool:
        return self.is_autosave or self.is_revision


@dataclass
class Term:
    """A taxonomy term."""

    term_id: int
    name: str
    taxonomy: str = "category"
    slug: str = ""
    parent: int = 0
    description: str = ""


@dataclass
class UserAccount:
    """A user account."""

    id: int
    login: str
    email: str = ""
    roles: list[str] = field(default_factory=list)
    first_name: str = ""
    last_name: str = ""


class HostPlatform(Protocol):
    """Read-only lookups the engines need from the content platform."""

    def get_post(self, post_id: int) -> Post | None: ...

    def edit_post_link(self, post_id: int) -> str | None: ...

    def get_term(self, term_id: int, taxonomy: str | None = None) -> Term | None: ...

    def get_terms(self, term_ids: list[int], taxonomy: str) -> list[Term]: ...

    def edit_term_link(self, term_id: int, taxonomy: str) -> str | None: ...

    def term_ids_for(self, term_taxonomy_ids: list[int]) -> list[int]:
        """Resolve term-taxonomy ids to term ids."""
        ...

    def get_custom_fields(self, object_kind: str, object_id: int) -> dict[str, Any]: ...

    def get_field_label(self, field_key: str, object_kind: str, object_id: int) -> str | None: ...

    def get_featured_asset_id(self, post_id: int) -> int:
        """Attachment id of the post's featured asset, 0 when unset."""
        ...

    def get_attachment_url(self, attachment_id: int) -> str | None: ...

    def get_user(self, user_id: int) -> UserAccount | None: ...

    def get_user_by_login(self, login: str) -> UserAccount | None: ...

    def get_user_by_email(self, email: str) -> UserAccount | None: ...
