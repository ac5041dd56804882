"""API routes."""

from fastapi import APIRouter

from forum.routes import comments, personas, posts
from forum.schemas import ErrorResponse

# Every endpoint answers failures with {"error": CODE}.
api_router = APIRouter(
    prefix="/api",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        404: {"model": ErrorResponse, "description": "Not found"},
        409: {"model": ErrorResponse, "description": "Conflict"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
)

# Persona registry
api_router.include_router(personas.router, prefix="/personas", tags=["personas"])

# Post feed and detail
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])

# Comment thread
api_router.include_router(comments.router, prefix="/comments", tags=["comments"])
