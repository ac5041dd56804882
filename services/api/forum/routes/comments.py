"""Comment endpoints.

POST /api/comments - comment on a post, optionally replying to a comment
"""

from fastapi import APIRouter, Depends

from forum.repositories.base import ForumRepository
from forum.repositories.factory import get_repository
from forum.schemas import CommentCreate, CreatedResponse
from forum.services.comments import create_comment

router = APIRouter()


@router.post("", response_model=CreatedResponse)
async def post_comment(
    body: CommentCreate,
    repo: ForumRepository = Depends(get_repository),
) -> CreatedResponse:
    """Create a comment."""
    comment_id = await create_comment(
        repo,
        post_id=body.post_id,
        persona_name=body.persona_name,
        content=body.content,
        reply_to_comment_id=body.reply_to_comment_id,
    )
    return CreatedResponse(id=comment_id)
