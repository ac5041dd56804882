"""SQLAlchemy ORM models.

Models represent database tables:
- personas: Author identities (soft-deleted, never removed)
- posts: Posts written by a persona
- comments: Threaded comments on posts
"""

from forum.models.comment import Comment
from forum.models.persona import Persona
from forum.models.post import Post

__all__ = ["Comment", "Persona", "Post"]
