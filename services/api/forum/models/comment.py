"""Comment model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum.stores.postgres import Base


class Comment(Base):
    """Comment on a post, optionally replying to another comment of the same post."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Relations
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id"), index=True)
    persona_id: Mapped[int] = mapped_column(ForeignKey("personas.id"), index=True)
    reply_to_comment_id: Mapped[int | None] = mapped_column(ForeignKey("comments.id"))

    content: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)

    def __repr__(self) -> str:
        return f"<Comment {self.id} post={self.post_id}>"
