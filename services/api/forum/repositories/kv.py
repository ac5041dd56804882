"""Key-value backend: ForumRepository over Redis.

Documents are stored as JSON strings and indexed by id sets (see
forum.stores.redis for the key layout). Multi-key writes go through
MULTI/EXEC pipelines; the cascade delete additionally WATCHes the post and
its comment index so a concurrent comment cannot slip past it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, fields, replace
from datetime import datetime
import json
import logging
from typing import Any, TypeVar

import redis.asyncio as redis
from redis.exceptions import WatchError

from forum.repositories.base import (
    CommentRecord,
    CommentRow,
    NameTaken,
    PersonaRecord,
    PostRecord,
    PostRow,
)
from forum.services.visibility import is_live
from forum.stores.redis import (
    KEY_PERSONAS,
    KEY_POSTS,
    comment_key,
    next_id,
    persona_key,
    persona_name_key,
    post_comments_key,
    post_key,
)

logger = logging.getLogger("uvicorn.error")

R = TypeVar("R", PersonaRecord, PostRecord, CommentRecord)

_DATETIME_FIELDS = ("created_at", "deleted_at")

# Optimistic-lock retries for WATCH/MULTI blocks
MAX_TRANSACTION_RETRIES = 5


def _dump(record: PersonaRecord | PostRecord | CommentRecord) -> str:
    data = asdict(record)
    for key in _DATETIME_FIELDS:
        if data.get(key) is not None:
            data[key] = data[key].isoformat()
    return json.dumps(data, ensure_ascii=False)


def _load(cls: type[R], raw: str | None) -> R | None:
    if raw is None:
        return None
    data: dict[str, Any] = json.loads(raw)
    for key in _DATETIME_FIELDS:
        if data.get(key):
            data[key] = datetime.fromisoformat(data[key])
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


def _sorted_ids(members: Iterable[str]) -> list[int]:
    return sorted(int(m) for m in members)


class RedisForumRepository:
    """ForumRepository backed by Redis."""

    def __init__(self, client: redis.Redis) -> None:
        self.redis = client

    async def _load_many(self, cls: type[R], keys: list[str]) -> list[R]:
        if not keys:
            return []
        raws = await self.redis.mget(keys)
        return [record for record in (_load(cls, raw) for raw in raws) if record is not None]

    # ============================================================
    # Personas
    # ============================================================

    async def insert_persona(
        self,
        *,
        name: str,
        avatar_url: str | None,
        bio: str | None,
        creator: str | None,
    ) -> int:
        persona_id = await next_id(self.redis, "persona")
        # SET NX claims the name atomically; the loser of a race gets None.
        claimed = await self.redis.set(persona_name_key(name), persona_id, nx=True)
        if not claimed:
            raise NameTaken(name)

        persona = PersonaRecord(
            id=persona_id,
            name=name,
            avatar_url=avatar_url,
            bio=bio,
            creator=creator,
        )
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.set(persona_key(persona_id), _dump(persona))
                pipe.sadd(KEY_PERSONAS, persona_id)
                await pipe.execute()
        except Exception:
            # The document was never written; release the claim so the name
            # is not held by a persona that does not exist.
            await self.redis.delete(persona_name_key(name))
            raise
        return persona_id

    async def get_persona(self, persona_id: int) -> PersonaRecord | None:
        return _load(PersonaRecord, await self.redis.get(persona_key(persona_id)))

    async def get_personas(self, persona_ids: Iterable[int]) -> dict[int, PersonaRecord]:
        ids = sorted(set(persona_ids))
        personas = await self._load_many(PersonaRecord, [persona_key(i) for i in ids])
        return {p.id: p for p in personas}

    async def list_personas(self) -> list[PersonaRecord]:
        ids = _sorted_ids(await self.redis.smembers(KEY_PERSONAS))
        return await self._load_many(PersonaRecord, [persona_key(i) for i in ids])

    async def find_live_persona_by_name(self, name: str) -> PersonaRecord | None:
        persona_id = await self.redis.get(persona_name_key(name))
        if persona_id is None:
            return None
        persona = await self.get_persona(int(persona_id))
        if not is_live(persona) or persona.name.lower() != name.lower():
            return None
        return persona

    async def mark_persona_deleted(self, persona_id: int, deleted_at: datetime) -> None:
        key = persona_key(persona_id)
        for _ in range(MAX_TRANSACTION_RETRIES):
            async with self.redis.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(key)
                    persona = _load(PersonaRecord, await pipe.get(key))
                    if not is_live(persona):
                        return
                    name_key = persona_name_key(persona.name)
                    await pipe.watch(name_key)
                    holder = await pipe.get(name_key)

                    pipe.multi()
                    pipe.set(key, _dump(replace(persona, deleted_at=deleted_at)))
                    # Free the name for reuse.
                    if holder is not None and int(holder) == persona_id:
                        pipe.delete(name_key)
                    await pipe.execute()
                    return
                except WatchError:
                    logger.debug(f"Persona {persona_id} changed during delete, retrying")
        raise RuntimeError(f"Could not delete persona {persona_id}: too much contention")

    # ============================================================
    # Posts
    # ============================================================

    async def insert_post(
        self,
        *,
        persona_id: int,
        content: str,
        image_url: str | None,
        created_at: datetime,
    ) -> int:
        post_id = await next_id(self.redis, "post")
        post = PostRecord(
            id=post_id,
            persona_id=persona_id,
            content=content,
            image_url=image_url,
            created_at=created_at,
        )
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(post_key(post_id), _dump(post))
            pipe.sadd(KEY_POSTS, post_id)
            await pipe.execute()
        return post_id

    async def get_post(self, post_id: int) -> PostRecord | None:
        return _load(PostRecord, await self.redis.get(post_key(post_id)))

    async def _comments_of(self, post_id: int) -> list[CommentRecord]:
        ids = _sorted_ids(await self.redis.smembers(post_comments_key(post_id)))
        return await self._load_many(CommentRecord, [comment_key(i) for i in ids])

    async def _rows_for(self, posts: list[PostRecord]) -> list[PostRow]:
        personas = await self.get_personas(p.persona_id for p in posts)
        rows = []
        for post in posts:
            comments = await self._comments_of(post.id)
            rows.append(
                PostRow(
                    post=post,
                    persona=personas.get(post.persona_id),
                    reply_count=sum(1 for c in comments if is_live(c)),
                )
            )
        return rows

    async def get_post_row(self, post_id: int) -> PostRow | None:
        post = await self.get_post(post_id)
        if not is_live(post):
            return None
        rows = await self._rows_for([post])
        return rows[0]

    async def list_live_post_rows(self) -> list[PostRow]:
        ids = _sorted_ids(await self.redis.smembers(KEY_POSTS))
        posts = await self._load_many(PostRecord, [post_key(i) for i in ids])
        return await self._rows_for([p for p in posts if is_live(p)])

    async def delete_post_cascade(self, post_id: int, deleted_at: datetime) -> None:
        key = post_key(post_id)
        index_key = post_comments_key(post_id)
        for _ in range(MAX_TRANSACTION_RETRIES):
            async with self.redis.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(key, index_key)
                    post = _load(PostRecord, await pipe.get(key))
                    if post is None:
                        return
                    comment_ids = _sorted_ids(await pipe.smembers(index_key))
                    comment_keys = [comment_key(i) for i in comment_ids]
                    if comment_keys:
                        await pipe.watch(*comment_keys)
                        raws = await pipe.mget(comment_keys)
                    else:
                        raws = []

                    pipe.multi()
                    for ckey, raw in zip(comment_keys, raws):
                        comment = _load(CommentRecord, raw)
                        if comment is not None:
                            pipe.set(ckey, _dump(replace(comment, deleted_at=deleted_at)))
                    pipe.set(key, _dump(replace(post, deleted_at=deleted_at)))
                    await pipe.execute()
                    return
                except WatchError:
                    logger.debug(f"Post {post_id} changed during delete, retrying")
        raise RuntimeError(f"Could not delete post {post_id}: too much contention")

    # ============================================================
    # Comments
    # ============================================================

    async def insert_comment(
        self,
        *,
        post_id: int,
        persona_id: int,
        content: str,
        reply_to_comment_id: int | None,
        created_at: datetime,
    ) -> int:
        comment_id = await next_id(self.redis, "comment")
        comment = CommentRecord(
            id=comment_id,
            post_id=post_id,
            persona_id=persona_id,
            content=content,
            reply_to_comment_id=reply_to_comment_id,
            created_at=created_at,
        )
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(comment_key(comment_id), _dump(comment))
            pipe.sadd(post_comments_key(post_id), comment_id)
            await pipe.execute()
        return comment_id

    async def get_comment(self, comment_id: int) -> CommentRecord | None:
        return _load(CommentRecord, await self.redis.get(comment_key(comment_id)))

    async def list_live_comment_rows(self, post_id: int) -> list[CommentRow]:
        comments = [c for c in await self._comments_of(post_id) if is_live(c)]
        comments.sort(key=lambda c: (c.created_at, c.id))
        personas = await self.get_personas(c.persona_id for c in comments)
        return [CommentRow(comment=c, persona=personas.get(c.persona_id)) for c in comments]

    # ============================================================
    # Unit of work
    # ============================================================

    async def commit(self) -> None:
        # Every write above is already applied by its own MULTI/EXEC.
        pass
