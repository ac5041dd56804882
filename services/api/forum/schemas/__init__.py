"""Pydantic schemas for API request/response validation."""

from forum.schemas.comment import CommentCreate, CommentOut
from forum.schemas.common import CreatedResponse, ErrorResponse, OkResponse
from forum.schemas.persona import PersonaCreate, PersonaListResponse, PersonaOut
from forum.schemas.post import PostCreate, PostDetailResponse, PostListResponse, PostOut

__all__ = [
    "CommentCreate",
    "CommentOut",
    "CreatedResponse",
    "ErrorResponse",
    "OkResponse",
    "PersonaCreate",
    "PersonaListResponse",
    "PersonaOut",
    "PostCreate",
    "PostDetailResponse",
    "PostListResponse",
    "PostOut",
]
