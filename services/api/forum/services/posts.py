"""Post feed service.

Feed ordering:
- "new" (default): created_at DESC
- "hot": live reply_count DESC, then created_at DESC
Remaining ties fall back to id DESC so the order is total.
"""

from datetime import datetime, timezone
import logging
from typing import Any

from forum.repositories.base import CommentRow, ForumRepository, PostRow
from forum.schemas import CommentOut, PostDetailResponse, PostOut
from forum.services.errors import NotFound, ValidationFailed
from forum.services.personas import resolve_persona
from forum.services.validation import clean_text, is_http_url
from forum.services.visibility import is_live, persona_display
from forum.settings import get_settings

logger = logging.getLogger("uvicorn.error")

SORT_NEW = "new"
SORT_HOT = "hot"


def _post_out(row: PostRow) -> PostOut:
    post = row.post
    return PostOut(
        id=post.id,
        persona_id=post.persona_id,
        content=post.content,
        image_url=post.image_url,
        created_at=post.created_at,
        deleted_at=post.deleted_at,
        reply_count=row.reply_count,
        **persona_display(row.persona, mask_names=get_settings().mask_deleted_persona_names),
    )


def comment_out(row: CommentRow) -> CommentOut:
    comment = row.comment
    return CommentOut(
        id=comment.id,
        post_id=comment.post_id,
        persona_id=comment.persona_id,
        content=comment.content,
        reply_to_comment_id=comment.reply_to_comment_id,
        created_at=comment.created_at,
        deleted_at=comment.deleted_at,
        **persona_display(row.persona, mask_names=get_settings().mask_deleted_persona_names),
    )


async def create_post(
    repo: ForumRepository,
    *,
    persona_name: Any,
    content: Any,
    image_url: Any = None,
) -> int:
    """Create a post on behalf of a live persona.

    Raises:
        ValidationFailed: PERSONA_REQUIRED, CONTENT_REQUIRED, IMAGE_URL_INVALID,
            PERSONA_NOT_FOUND.
    """
    clean_persona = clean_text(persona_name)
    clean_content = clean_text(content)
    clean_image = clean_text(image_url)

    if not clean_persona:
        raise ValidationFailed("PERSONA_REQUIRED")
    if not clean_content:
        raise ValidationFailed("CONTENT_REQUIRED")
    if clean_image and not is_http_url(clean_image):
        raise ValidationFailed("IMAGE_URL_INVALID")

    persona = await resolve_persona(repo, clean_persona)
    if persona is None:
        raise ValidationFailed("PERSONA_NOT_FOUND")

    post_id = await repo.insert_post(
        persona_id=persona.id,
        content=clean_content,
        image_url=clean_image,
        created_at=datetime.now(timezone.utc),
    )
    await repo.commit()
    logger.info(f"Post created: id={post_id} persona_id={persona.id}")
    return post_id


def sort_post_rows(rows: list[PostRow], sort: str = SORT_NEW) -> list[PostRow]:
    """Order feed rows; unknown sort values fall back to "new"."""
    if sort == SORT_HOT:
        return sorted(
            rows,
            key=lambda r: (r.reply_count, r.post.created_at, r.post.id),
            reverse=True,
        )
    return sorted(rows, key=lambda r: (r.post.created_at, r.post.id), reverse=True)


async def list_posts(repo: ForumRepository, sort: str = SORT_NEW) -> list[PostOut]:
    """Live posts with author display fields and live reply counts."""
    rows = await repo.list_live_post_rows()
    return [_post_out(row) for row in sort_post_rows(rows, sort)]


async def get_post_with_comments(repo: ForumRepository, post_id: int) -> PostDetailResponse:
    """A live post and its live comments, oldest comment first.

    Raises:
        NotFound: the post is absent or soft-deleted.
    """
    row = await repo.get_post_row(post_id)
    if row is None:
        raise NotFound()

    comments = await repo.list_live_comment_rows(post_id)
    return PostDetailResponse(
        post=_post_out(row),
        comments=[comment_out(c) for c in comments],
    )


async def delete_post(repo: ForumRepository, post_id: int) -> None:
    """Soft-delete a post together with all of its comments.

    Raises:
        NotFound: the id was never assigned.
    """
    post = await repo.get_post(post_id)
    if post is None:
        raise NotFound()
    if not is_live(post):
        return

    await repo.delete_post_cascade(post_id, datetime.now(timezone.utc))
    await repo.commit()
    logger.info(f"Post soft-deleted with its comments: id={post_id}")
