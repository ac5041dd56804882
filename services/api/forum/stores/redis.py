"""Redis store for the key-value persistence backend.

Handles:
- Client lifecycle
- Key layout for forum documents and indexes
- Atomic id counters

Key layout:
- persona:{id}, post:{id}, comment:{id}: JSON documents
- personas, posts: sets of ids (scan indexes)
- post:{id}:comments: set of comment ids belonging to a post
- persona_name:{lowercased name}: id of the live persona holding that name
- seq:{kind}: INCR counters for id assignment
"""

import logging

import redis.asyncio as redis

from forum.settings import get_settings

# Key prefixes
PREFIX_PERSONA = "persona:"
PREFIX_POST = "post:"
PREFIX_COMMENT = "comment:"
PREFIX_PERSONA_NAME = "persona_name:"
PREFIX_SEQ = "seq:"

# Index sets
KEY_PERSONAS = "personas"
KEY_POSTS = "posts"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Validate connectivity early (especially for `rediss://` in production).
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Keys
# ============================================================


def persona_key(persona_id: int) -> str:
    return f"{PREFIX_PERSONA}{persona_id}"


def post_key(post_id: int) -> str:
    return f"{PREFIX_POST}{post_id}"


def comment_key(comment_id: int) -> str:
    return f"{PREFIX_COMMENT}{comment_id}"


def post_comments_key(post_id: int) -> str:
    """Set of comment ids attached to a post."""
    return f"{PREFIX_POST}{post_id}:comments"


def persona_name_key(name: str) -> str:
    """Name claim key; names compare case-insensitively."""
    return f"{PREFIX_PERSONA_NAME}{name.lower()}"


# ============================================================
# Id counters
# ============================================================


async def next_id(client: redis.Redis, kind: str) -> int:
    """Allocate the next id for `kind` ("persona", "post", "comment").

    INCR is atomic on the server, so concurrent writers never share an id.
    """
    return int(await client.incr(f"{PREFIX_SEQ}{kind}"))
