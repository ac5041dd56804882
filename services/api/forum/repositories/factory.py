"""Backend selection for request handlers and scripts."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from forum.repositories.base import ForumRepository
from forum.repositories.kv import RedisForumRepository
from forum.repositories.sql import SqlForumRepository
from forum.settings import get_settings
from forum.stores.postgres import get_session
from forum.stores.redis import get_redis


@asynccontextmanager
async def open_repository() -> AsyncGenerator[ForumRepository, None]:
    """Open a repository for the configured backend.

    For SQL the repository lives inside one session. Services commit it
    themselves once their writes are done, so a failed commit reaches the
    caller as an error; anything left uncommitted is rolled back on error.

    Usage:
        async with open_repository() as repo:
            persona_id = await create_persona(repo, name="Alice")
    """
    if get_settings().storage_backend == "redis":
        yield RedisForumRepository(get_redis())
        return

    async with get_session() as session:
        yield SqlForumRepository(session)


async def get_repository() -> AsyncGenerator[ForumRepository, None]:
    """FastAPI dependency yielding a repository per request."""
    async with open_repository() as repo:
        yield repo
