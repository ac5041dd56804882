"""Comment thread service."""

from datetime import datetime, timezone
import logging
from typing import Any

from forum.repositories.base import ForumRepository
from forum.services.errors import NotFound, ValidationFailed
from forum.services.personas import resolve_persona
from forum.services.validation import clean_text, parse_id
from forum.services.visibility import is_live

logger = logging.getLogger("uvicorn.error")


async def create_comment(
    repo: ForumRepository,
    *,
    post_id: Any,
    persona_name: Any,
    content: Any,
    reply_to_comment_id: Any = None,
) -> int:
    """Comment on a live post, optionally replying to a comment of the same post.

    Raises:
        ValidationFailed: POST_ID_INVALID, PERSONA_REQUIRED, CONTENT_REQUIRED,
            PERSONA_NOT_FOUND, REPLY_TARGET_INVALID.
        NotFound: POST_NOT_FOUND when the post is absent or soft-deleted.
    """
    target_post_id = parse_id(post_id)
    clean_persona = clean_text(persona_name)
    clean_content = clean_text(content)

    if target_post_id is None:
        raise ValidationFailed("POST_ID_INVALID")
    if not clean_persona:
        raise ValidationFailed("PERSONA_REQUIRED")
    if not clean_content:
        raise ValidationFailed("CONTENT_REQUIRED")

    post = await repo.get_post(target_post_id)
    if not is_live(post):
        raise NotFound("POST_NOT_FOUND")

    persona = await resolve_persona(repo, clean_persona)
    if persona is None:
        raise ValidationFailed("PERSONA_NOT_FOUND")

    reply_to: int | None = None
    if reply_to_comment_id is not None and reply_to_comment_id != "":
        reply_to = parse_id(reply_to_comment_id)
        if reply_to is None:
            raise ValidationFailed("REPLY_TARGET_INVALID")
        target = await repo.get_comment(reply_to)
        # Replies never cross post boundaries.
        if not is_live(target) or target.post_id != target_post_id:
            raise ValidationFailed("REPLY_TARGET_INVALID")

    comment_id = await repo.insert_comment(
        post_id=target_post_id,
        persona_id=persona.id,
        content=clean_content,
        reply_to_comment_id=reply_to,
        created_at=datetime.now(timezone.utc),
    )
    await repo.commit()
    logger.info(f"Comment created: id={comment_id} post_id={target_post_id} reply_to={reply_to}")
    return comment_id
