"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockError

FIXED_NOW = datetime(2026, 3, 2, 14, 30, tzinfo=timezone.utc)


class FakeRedis:
    """In-memory stand-in for the subset of ``redis.asyncio.Redis`` Tuca uses."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.locks: set[str] = set()
        self.down = False
        self.closed = False

    def _check(self) -> None:
        if self.down:
            raise RedisConnectionError("redis is down")

    async def get(self, key: str) -> str | None:
        self._check()
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._check()
        self.data[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def incr(self, key: str) -> int:
        self._check()
        value = int(self.data.get(key, "0")) + 1
        self.data[key] = str(value)
        return value

    async def expire(self, key: str, seconds: int) -> bool:
        self._check()
        self.ttls[key] = seconds
        return key in self.data

    async def ping(self) -> bool:
        self._check()
        return True

    async def aclose(self) -> None:
        self.closed = True

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    def lock(self, name: str, timeout: float | None = None) -> FakeLock:
        return FakeLock(self, name)


class FakePipeline:
    def __init__(self, redis: FakeRedis) -> None:
        self._redis = redis
        self._ops: list[tuple[str, tuple]] = []

    def incr(self, key: str) -> FakePipeline:
        self._ops.append(("incr", (key,)))
        return self

    def expire(self, key: str, seconds: int) -> FakePipeline:
        self._ops.append(("expire", (key, seconds)))
        return self

    async def execute(self) -> list:
        self._redis._check()
        return [await getattr(self._redis, name)(*args) for name, args in self._ops]


class FakeLock:
    def __init__(self, redis: FakeRedis, name: str) -> None:
        self._redis = redis
        self.name = name
        self._owned = False

    async def acquire(self, blocking: bool = True, blocking_timeout: float | None = None) -> bool:
        self._redis._check()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + (blocking_timeout or 0)
        while self.name in self._redis.locks:
            if not blocking or loop.time() >= deadline:
                return False
            await asyncio.sleep(0.005)
        self._redis.locks.add(self.name)
        self._owned = True
        return True

    async def release(self) -> None:
        if not self._owned or self.name not in self._redis.locks:
            raise LockError("cannot release an unlocked lock")
        self._redis.locks.discard(self.name)
        self._owned = False


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def settings():
    from tuca.settings import TucaSettings

    return TucaSettings(_env_file=None)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def rng() -> random.Random:
    return random.Random(7)


@pytest_asyncio.fixture
async def store(fake_redis, settings, clock):
    from tuca.state.store import DialogueStateStore

    st = DialogueStateStore(fake_redis, settings, clock=clock)
    yield st
    await st.close()
