"""Schemas for /api/personas."""

from datetime import datetime

from pydantic import BaseModel


class PersonaCreate(BaseModel):
    """Request body for POST /api/personas.

    Fields are optional here so the service can answer NAME_REQUIRED
    instead of a generic validation error.
    """

    name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    creator: str | None = None


class PersonaOut(BaseModel):
    id: int
    name: str
    avatar_url: str | None = None
    bio: str | None = None
    creator: str | None = None
    deleted_at: datetime | None = None


class PersonaListResponse(BaseModel):
    personas: list[PersonaOut]
