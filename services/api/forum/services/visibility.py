"""Soft-delete visibility rules.

This module is the only place that decides whether a row is visible and how
a (possibly deleted) author is displayed. Repositories filter with `live()`
(SQL) or `is_live()` (records); services shape authors with
`persona_display()`.
"""

from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import ColumnElement

from forum.repositories.base import PersonaRecord

# Shown instead of the author when the persona is gone.
DELETED_PERSONA_NAME = "deleted persona"

# Name personas may not take (the frontend's "unnamed" label).
RESERVED_PERSONA_NAME = "未命名"


class SoftDeletable(Protocol):
    deleted_at: Any


def is_live(record: SoftDeletable | None) -> bool:
    """True when the record exists and has not been soft-deleted."""
    return record is not None and record.deleted_at is None


def live(model: Any) -> ColumnElement[bool]:
    """SQL clause selecting rows of `model` that are not soft-deleted."""
    return model.deleted_at.is_(None)


def persona_display(persona: PersonaRecord | None, *, mask_names: bool = True) -> dict[str, Any]:
    """Author fields attached to posts and comments.

    A missing persona always shows the placeholder. A soft-deleted persona
    loses its avatar and, with mask_names, its name too.
    """
    deleted = not is_live(persona)
    if persona is None or (deleted and mask_names):
        name = DELETED_PERSONA_NAME
    else:
        name = persona.name
    return {
        "persona_name": name,
        "persona_avatar_url": None if deleted else persona.avatar_url,
        "persona_deleted": deleted,
    }
