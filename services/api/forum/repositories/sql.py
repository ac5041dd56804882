"""Relational backend: ForumRepository over an async SQLAlchemy session.

One repository wraps one session; the caller owns the session and commits it
(see forum.stores.postgres.get_session), so a request's writes share one
transaction.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from forum.models import Comment, Persona, Post
from forum.repositories.base import (
    CommentRecord,
    CommentRow,
    NameTaken,
    PersonaRecord,
    PostRecord,
    PostRow,
)
from forum.services.visibility import live


def _persona_record(row: Persona) -> PersonaRecord:
    return PersonaRecord(
        id=row.id,
        name=row.name,
        avatar_url=row.avatar_url,
        bio=row.bio,
        creator=row.creator,
        deleted_at=row.deleted_at,
    )


def _post_record(row: Post) -> PostRecord:
    return PostRecord(
        id=row.id,
        persona_id=row.persona_id,
        content=row.content,
        image_url=row.image_url,
        created_at=row.created_at,
        deleted_at=row.deleted_at,
    )


def _comment_record(row: Comment) -> CommentRecord:
    return CommentRecord(
        id=row.id,
        post_id=row.post_id,
        persona_id=row.persona_id,
        content=row.content,
        reply_to_comment_id=row.reply_to_comment_id,
        created_at=row.created_at,
        deleted_at=row.deleted_at,
    )


def _live_reply_counts():
    """Subquery: post_id -> number of live comments."""
    return (
        select(Comment.post_id, func.count(Comment.id).label("reply_count"))
        .where(live(Comment))
        .group_by(Comment.post_id)
        .subquery()
    )


class SqlForumRepository:
    """ForumRepository backed by PostgreSQL (or SQLite)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ============================================================
    # Personas
    # ============================================================

    async def insert_persona(
        self,
        *,
        name: str,
        avatar_url: str | None,
        bio: str | None,
        creator: str | None,
    ) -> int:
        if await self.find_live_persona_by_name(name) is not None:
            raise NameTaken(name)

        persona = Persona(name=name, avatar_url=avatar_url, bio=bio, creator=creator)
        self.session.add(persona)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race against a concurrent insert; the partial unique
            # index on lower(name) rejected the second row.
            raise NameTaken(name) from e
        return persona.id

    async def get_persona(self, persona_id: int) -> PersonaRecord | None:
        persona = await self.session.get(Persona, persona_id)
        return _persona_record(persona) if persona else None

    async def get_personas(self, persona_ids: Iterable[int]) -> dict[int, PersonaRecord]:
        ids = set(persona_ids)
        if not ids:
            return {}
        result = await self.session.execute(select(Persona).where(Persona.id.in_(ids)))
        return {p.id: _persona_record(p) for p in result.scalars().all()}

    async def list_personas(self) -> list[PersonaRecord]:
        result = await self.session.execute(select(Persona))
        return [_persona_record(p) for p in result.scalars().all()]

    async def find_live_persona_by_name(self, name: str) -> PersonaRecord | None:
        result = await self.session.execute(
            select(Persona)
            .where(func.lower(Persona.name) == name.lower())
            .where(live(Persona))
            .limit(1)
        )
        persona = result.scalar_one_or_none()
        return _persona_record(persona) if persona else None

    async def mark_persona_deleted(self, persona_id: int, deleted_at: datetime) -> None:
        await self.session.execute(
            update(Persona)
            .where(Persona.id == persona_id)
            .where(live(Persona))
            .values(deleted_at=deleted_at)
        )

    # ============================================================
    # Posts
    # ============================================================

    async def insert_post(
        self,
        *,
        persona_id: int,
        content: str,
        image_url: str | None,
        created_at: datetime,
    ) -> int:
        post = Post(
            persona_id=persona_id,
            content=content,
            image_url=image_url,
            created_at=created_at,
        )
        self.session.add(post)
        await self.session.flush()
        return post.id

    async def get_post(self, post_id: int) -> PostRecord | None:
        post = await self.session.get(Post, post_id)
        return _post_record(post) if post else None

    def _post_rows_query(self):
        counts = _live_reply_counts()
        return (
            select(Post, Persona, func.coalesce(counts.c.reply_count, 0))
            .outerjoin(Persona, Persona.id == Post.persona_id)
            .outerjoin(counts, counts.c.post_id == Post.id)
            .where(live(Post))
        )

    async def get_post_row(self, post_id: int) -> PostRow | None:
        result = await self.session.execute(self._post_rows_query().where(Post.id == post_id))
        row = result.one_or_none()
        if row is None:
            return None
        post, persona, reply_count = row
        return PostRow(
            post=_post_record(post),
            persona=_persona_record(persona) if persona else None,
            reply_count=int(reply_count),
        )

    async def list_live_post_rows(self) -> list[PostRow]:
        result = await self.session.execute(self._post_rows_query())
        return [
            PostRow(
                post=_post_record(post),
                persona=_persona_record(persona) if persona else None,
                reply_count=int(reply_count),
            )
            for post, persona, reply_count in result.all()
        ]

    async def delete_post_cascade(self, post_id: int, deleted_at: datetime) -> None:
        # Both statements run in the caller's transaction and commit together.
        await self.session.execute(
            update(Comment)
            .where(Comment.post_id == post_id)
            .values(deleted_at=deleted_at)
        )
        await self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(deleted_at=deleted_at)
        )

    # ============================================================
    # Comments
    # ============================================================

    async def insert_comment(
        self,
        *,
        post_id: int,
        persona_id: int,
        content: str,
        reply_to_comment_id: int | None,
        created_at: datetime,
    ) -> int:
        comment = Comment(
            post_id=post_id,
            persona_id=persona_id,
            content=content,
            reply_to_comment_id=reply_to_comment_id,
            created_at=created_at,
        )
        self.session.add(comment)
        await self.session.flush()
        return comment.id

    async def get_comment(self, comment_id: int) -> CommentRecord | None:
        comment = await self.session.get(Comment, comment_id)
        return _comment_record(comment) if comment else None

    async def list_live_comment_rows(self, post_id: int) -> list[CommentRow]:
        result = await self.session.execute(
            select(Comment, Persona)
            .outerjoin(Persona, Persona.id == Comment.persona_id)
            .where(Comment.post_id == post_id)
            .where(live(Comment))
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return [
            CommentRow(
                comment=_comment_record(comment),
                persona=_persona_record(persona) if persona else None,
            )
            for comment, persona in result.all()
        ]

    # ============================================================
    # Unit of work
    # ============================================================

    async def commit(self) -> None:
        await self.session.commit()
