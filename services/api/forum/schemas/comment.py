"""Schemas for /api/comments and the comments embedded in post detail."""

from datetime import datetime

from pydantic import BaseModel


class CommentCreate(BaseModel):
    """Request body for POST /api/comments.

    Ids may arrive as numbers or numeric strings; the service validates them.
    """

    post_id: int | str | None = None
    persona_name: str | None = None
    content: str | None = None
    reply_to_comment_id: int | str | None = None


class CommentOut(BaseModel):
    id: int
    post_id: int
    persona_id: int
    content: str
    reply_to_comment_id: int | None = None
    created_at: datetime
    deleted_at: datetime | None = None

    persona_name: str
    persona_avatar_url: str | None = None
    persona_deleted: bool = False
