#!/usr/bin/env python3
"""Seed the configured backend with demo personas, posts and comments.

Creates:
- A handful of personas
- Posts by those personas
- A short comment thread with one reply

Everything goes through the services, so validation and uniqueness rules
apply exactly as they do for API requests. Re-running skips personas whose
name is already taken and adds a fresh batch of posts.

Usage:
    cd services/api
    python -m scripts.seed
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from forum.repositories.factory import open_repository
from forum.services.comments import create_comment
from forum.services.errors import Conflict
from forum.services.personas import create_persona
from forum.services.posts import create_post
from forum.settings import get_settings
from forum.stores.postgres import close_db, create_tables, init_db
from forum.stores.redis import close_redis, init_redis

load_dotenv()

PERSONAS = [
    {
        "name": "Alice",
        "avatar_url": "https://example.com/avatars/alice.png",
        "bio": "Writes about gardens and slow mornings.",
        "creator": "seed",
    },
    {
        "name": "Bob",
        "avatar_url": None,
        "bio": "Asks one question per day.",
        "creator": "seed",
    },
    {
        "name": "Carol",
        "avatar_url": "https://example.com/avatars/carol.png",
        "bio": None,
        "creator": "seed",
    },
]

POSTS = [
    {"persona_name": "Alice", "content": "The tomatoes finally turned red."},
    {"persona_name": "Bob", "content": "What is everyone reading this week?"},
    {
        "persona_name": "Carol",
        "content": "Sunset from the roof.",
        "image_url": "https://example.com/images/sunset.jpg",
    },
]


async def seed_personas() -> None:
    """Seed personas (skips names that already exist)."""
    for p in PERSONAS:
        async with open_repository() as repo:
            try:
                persona_id = await create_persona(repo, **p)
                print(f"  + persona {p['name']} (id={persona_id})")
            except Conflict:
                print(f"  = persona {p['name']} (exists)")


async def seed_posts() -> list[int]:
    """Seed posts and return their ids."""
    post_ids = []
    for p in POSTS:
        async with open_repository() as repo:
            post_id = await create_post(repo, **p)
        post_ids.append(post_id)
        print(f"  + post by {p['persona_name']} (id={post_id})")
    return post_ids


async def seed_comments(post_id: int) -> None:
    """Seed a short thread on one post."""
    async with open_repository() as repo:
        first = await create_comment(
            repo,
            post_id=post_id,
            persona_name="Alice",
            content="A mystery novel, as usual.",
        )
        await create_comment(
            repo,
            post_id=post_id,
            persona_name="Carol",
            content="Which one?",
            reply_to_comment_id=first,
        )
    print(f"  + 2 comments on post {post_id}")


async def seed_database() -> None:
    settings = get_settings()
    print(f"Seeding {settings.storage_backend} backend...")

    if settings.storage_backend == "redis":
        await init_redis()
    else:
        await init_db()
        await create_tables()

    try:
        print("Personas:")
        await seed_personas()
        print("Posts:")
        post_ids = await seed_posts()
        print("Comments:")
        await seed_comments(post_ids[1])
    finally:
        await close_redis()
        await close_db()

    print("Done.")


if __name__ == "__main__":
    asyncio.run(seed_database())
