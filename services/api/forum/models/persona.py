"""Persona model.

An author identity. Personas are soft-deleted only; the name stays unique
(case-insensitively) among live personas through a partial index, so a
deleted persona frees its name.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from forum.stores.postgres import Base


class Persona(Base):
    """Author identity used by posts and comments."""

    __tablename__ = "personas"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(100))
    avatar_url: Mapped[str | None] = mapped_column(Text)
    bio: Mapped[str | None] = mapped_column(Text)
    creator: Mapped[str | None] = mapped_column(String(100))

    # Soft-delete marker
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)

    def __repr__(self) -> str:
        return f"<Persona {self.id} {self.name!r}>"


Index(
    "uq_personas_live_name",
    func.lower(Persona.name),
    unique=True,
    postgresql_where=Persona.deleted_at.is_(None),
    sqlite_where=Persona.deleted_at.is_(None),
)
