"""Persistence contract shared by the SQL and Redis backends.

Repositories return plain records, already joined where a read needs it
(post + author persona + live reply count). They never decide what a client
sees: masking deleted personas and ordering feeds belong to services.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class PersonaRecord:
    id: int
    name: str
    avatar_url: str | None = None
    bio: str | None = None
    creator: str | None = None
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class PostRecord:
    id: int
    persona_id: int
    content: str
    created_at: datetime
    image_url: str | None = None
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class CommentRecord:
    id: int
    post_id: int
    persona_id: int
    content: str
    created_at: datetime
    reply_to_comment_id: int | None = None
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class PostRow:
    """A post joined with its author and live reply count."""

    post: PostRecord
    persona: PersonaRecord | None
    reply_count: int


@dataclass(frozen=True)
class CommentRow:
    """A comment joined with its author."""

    comment: CommentRecord
    persona: PersonaRecord | None


class NameTaken(Exception):
    """A live persona already holds this name (case-insensitive)."""


class ForumRepository(Protocol):
    """Durable storage for personas, posts and comments."""

    # Personas

    async def insert_persona(
        self,
        *,
        name: str,
        avatar_url: str | None,
        bio: str | None,
        creator: str | None,
    ) -> int:
        """Persist a live persona and return its id. Raises NameTaken."""
        ...

    async def get_persona(self, persona_id: int) -> PersonaRecord | None: ...

    async def get_personas(self, persona_ids: Iterable[int]) -> dict[int, PersonaRecord]: ...

    async def list_personas(self) -> list[PersonaRecord]:
        """All personas, deleted ones included, in no particular order."""
        ...

    async def find_live_persona_by_name(self, name: str) -> PersonaRecord | None:
        """Case-insensitive exact match among live personas."""
        ...

    async def mark_persona_deleted(self, persona_id: int, deleted_at: datetime) -> None: ...

    # Posts

    async def insert_post(
        self,
        *,
        persona_id: int,
        content: str,
        image_url: str | None,
        created_at: datetime,
    ) -> int: ...

    async def get_post(self, post_id: int) -> PostRecord | None: ...

    async def get_post_row(self, post_id: int) -> PostRow | None:
        """A live post with author and reply count, or None."""
        ...

    async def list_live_post_rows(self) -> list[PostRow]: ...

    async def delete_post_cascade(self, post_id: int, deleted_at: datetime) -> None:
        """Mark the post and every one of its comments deleted, atomically."""
        ...

    # Comments

    async def insert_comment(
        self,
        *,
        post_id: int,
        persona_id: int,
        content: str,
        reply_to_comment_id: int | None,
        created_at: datetime,
    ) -> int: ...

    async def get_comment(self, comment_id: int) -> CommentRecord | None: ...

    async def list_live_comment_rows(self, post_id: int) -> list[CommentRow]: ...

    # Unit of work

    async def commit(self) -> None:
        """Make every write issued so far durable before replying."""
        ...
