"""Shared fixtures: storage backends, repositories and an HTTP client."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Generator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from redis.exceptions import WatchError

from forum.main import app
from forum.repositories.kv import RedisForumRepository
from forum.repositories.sql import SqlForumRepository
from forum.settings import get_settings
from forum.stores import postgres as postgres_store
from forum.stores import redis as redis_store

# ==================== Redis double ====================


class DummyPipeline:
    """Subset of redis.asyncio Pipeline: WATCH, immediate reads, MULTI/EXEC."""

    def __init__(self, redis: "DummyRedis") -> None:
        self._redis = redis
        self._queue: list[tuple[Any, tuple, dict]] = []
        self._watching = False
        self._explicit = False

    async def __aenter__(self) -> "DummyPipeline":
        return self

    async def __aexit__(self, *exc: object) -> None:
        self._queue.clear()

    async def watch(self, *keys: str) -> None:
        self._watching = True
        self._redis.watched.extend(keys)

    def multi(self) -> None:
        self._explicit = True

    def __getattr__(self, name: str) -> Any:
        method = getattr(self._redis, name)
        if self._watching and not self._explicit:
            # Immediate mode while watching: the caller awaits the command.
            return method

        def queue(*args: Any, **kwargs: Any) -> "DummyPipeline":
            self._queue.append((method, args, kwargs))
            return self

        return queue

    async def execute(self) -> list[Any]:
        if self._redis.fail_next_exec > 0:
            self._redis.fail_next_exec -= 1
            self._queue.clear()
            raise WatchError("Watched variable changed.")
        results = [await method(*args, **kwargs) for method, args, kwargs in self._queue]
        self._redis.transactions += 1
        self._queue.clear()
        self._watching = False
        self._explicit = False
        return results


class DummyRedis:
    """In-memory stand-in for redis.asyncio.Redis with decode_responses=True."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self.watched: list[str] = []
        self.transactions = 0
        self.fail_next_exec = 0

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        pass

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def mget(self, keys: list[str]) -> list[str | None]:
        return [self.data.get(k) for k in keys]

    async def set(self, key: str, value: Any, nx: bool = False) -> bool | None:
        if nx and key in self.data:
            return None
        self.data[key] = str(value)
        return True

    async def delete(self, *keys: str) -> int:
        return sum(1 for k in keys if self.data.pop(k, None) is not None)

    async def incr(self, key: str) -> int:
        value = int(self.data.get(key, 0)) + 1
        self.data[key] = str(value)
        return value

    async def sadd(self, key: str, *members: Any) -> int:
        bucket = self.data.setdefault(key, set())
        before = len(bucket)
        bucket.update(str(m) for m in members)
        return len(bucket) - before

    async def smembers(self, key: str) -> set[str]:
        return set(self.data.get(key, set()))

    def pipeline(self, transaction: bool = True) -> DummyPipeline:
        return DummyPipeline(self)


# ==================== Backends ====================


@pytest.fixture
async def sql_session(tmp_path) -> AsyncGenerator[None, None]:
    """A fresh SQLite database with the forum tables."""
    await postgres_store.init_db(f"sqlite+aiosqlite:///{tmp_path / 'forum.db'}")
    await postgres_store.create_tables()
    yield
    await postgres_store.drop_tables()
    await postgres_store.close_db()


@pytest.fixture
def dummy_redis(monkeypatch: pytest.MonkeyPatch) -> DummyRedis:
    """A DummyRedis installed as the process-wide Redis client."""
    client = DummyRedis()
    monkeypatch.setattr(redis_store, "_redis", client)
    return client


@pytest.fixture(params=["sql", "redis"])
def backend(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> Generator[str, None, None]:
    """Run the test once per storage backend."""
    monkeypatch.setenv("STORAGE_BACKEND", request.param)
    get_settings.cache_clear()
    yield request.param
    get_settings.cache_clear()


@pytest.fixture
async def repo(backend: str, tmp_path, monkeypatch: pytest.MonkeyPatch):
    """A repository for the current backend.

    SQL tests share one session for the whole test, committed at the end.
    """
    if backend == "redis":
        client = DummyRedis()
        monkeypatch.setattr(redis_store, "_redis", client)
        yield RedisForumRepository(client)
        return

    await postgres_store.init_db(f"sqlite+aiosqlite:///{tmp_path / 'forum.db'}")
    await postgres_store.create_tables()
    try:
        async with postgres_store.get_session() as session:
            yield SqlForumRepository(session)
    finally:
        await postgres_store.drop_tables()
        await postgres_store.close_db()


@pytest.fixture
async def client(backend: str, tmp_path, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, wired to the current backend."""
    if backend == "redis":
        monkeypatch.setattr(redis_store, "_redis", DummyRedis())
    else:
        await postgres_store.init_db(f"sqlite+aiosqlite:///{tmp_path / 'forum.db'}")
        await postgres_store.create_tables()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    if backend == "sql":
        await postgres_store.drop_tables()
        await postgres_store.close_db()
