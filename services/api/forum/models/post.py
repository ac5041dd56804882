"""Post model.

A post belongs to a persona, which may later be soft-deleted. Deleting a post
soft-deletes its comments in the same transaction.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum.stores.postgres import Base


class Post(Base):
    """Top-level forum post."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True)

    persona_id: Mapped[int] = mapped_column(ForeignKey("personas.id"), index=True)

    content: Mapped[str] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column(Text)

    # Timestamps (set by the service so ordering is stable across backends)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)

    def __repr__(self) -> str:
        return f"<Post {self.id} persona={self.persona_id}>"
