"""Persona registry.

Personas are author identities. Names are trimmed and unique among live
personas, compared case-insensitively; deletion is soft and frees the name.
"""

from datetime import datetime, timezone
import logging
from typing import Any

from forum.repositories.base import ForumRepository, NameTaken, PersonaRecord
from forum.services.errors import Conflict, NotFound, ValidationFailed
from forum.services.validation import clean_text, is_http_url
from forum.services.visibility import RESERVED_PERSONA_NAME, is_live

logger = logging.getLogger("uvicorn.error")


async def create_persona(
    repo: ForumRepository,
    *,
    name: Any,
    avatar_url: Any = None,
    bio: Any = None,
    creator: Any = None,
) -> int:
    """Register a new persona.

    Raises:
        ValidationFailed: NAME_REQUIRED, NAME_RESERVED, AVATAR_URL_INVALID.
        Conflict: NAME_EXISTS when a live persona already has the name.
    """
    clean_name = clean_text(name)
    if not clean_name:
        raise ValidationFailed("NAME_REQUIRED")
    if clean_name == RESERVED_PERSONA_NAME:
        raise ValidationFailed("NAME_RESERVED")

    clean_avatar = clean_text(avatar_url)
    if clean_avatar and not is_http_url(clean_avatar):
        raise ValidationFailed("AVATAR_URL_INVALID")

    try:
        persona_id = await repo.insert_persona(
            name=clean_name,
            avatar_url=clean_avatar,
            bio=clean_text(bio),
            creator=clean_text(creator),
        )
    except NameTaken:
        logger.debug(f"Persona name already taken: {clean_name!r}")
        raise Conflict("NAME_EXISTS") from None

    await repo.commit()
    logger.info(f"Persona created: id={persona_id} name={clean_name!r}")
    return persona_id


async def list_personas(repo: ForumRepository) -> list[PersonaRecord]:
    """All personas: live ones first, then by name (case-insensitive), then id."""
    personas = await repo.list_personas()
    return sorted(personas, key=lambda p: (not is_live(p), p.name.lower(), p.id))


async def delete_persona(repo: ForumRepository, persona_id: int) -> None:
    """Soft-delete a persona. Deleting an already-deleted persona is a no-op.

    Raises:
        NotFound: the id was never assigned.
    """
    persona = await repo.get_persona(persona_id)
    if persona is None:
        raise NotFound()
    if not is_live(persona):
        return

    await repo.mark_persona_deleted(persona_id, datetime.now(timezone.utc))
    await repo.commit()
    logger.info(f"Persona soft-deleted: id={persona_id}")


async def resolve_persona(repo: ForumRepository, name: str) -> PersonaRecord | None:
    """Find the live persona called `name` (case-insensitive), if any."""
    return await repo.find_live_persona_by_name(name)
