"""Schemas for /api/posts."""

from datetime import datetime

from pydantic import BaseModel, Field

from forum.schemas.comment import CommentOut


class PostCreate(BaseModel):
    """Request body for POST /api/posts."""

    persona_name: str | None = None
    content: str | None = None
    image_url: str | None = None


class PostOut(BaseModel):
    """A live post with its author's display fields and live reply count."""

    id: int
    persona_id: int
    content: str
    image_url: str | None = None
    created_at: datetime
    deleted_at: datetime | None = None

    # Author display (masked when the persona is deleted)
    persona_name: str
    persona_avatar_url: str | None = None
    persona_deleted: bool = False

    reply_count: int = Field(ge=0)


class PostListResponse(BaseModel):
    posts: list[PostOut]


class PostDetailResponse(BaseModel):
    """Response payload for GET /api/posts/{id}."""

    post: PostOut
    comments: list[CommentOut]
