"""Per-user turn lock backed by Redis.

Ensures that turns for the same user are processed one at a time, even
across multiple service instances, so the dialogue state read-merge-write
of one turn never interleaves with another.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger
from redis.asyncio import Redis
from redis.asyncio.lock import Lock
from redis.exceptions import LockError, RedisError


class TurnLockTimeout(RuntimeError):
    """Raised when lock acquisition times out."""


def lock_key(user_id: str) -> str:
    return f"tuca:lock:user:{user_id}"


class TurnLock:
    def __init__(self, redis: Redis, ttl_seconds: int = 60) -> None:
        self._redis = redis
        self._ttl = ttl_seconds
        self._local: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, user_id: str, timeout: float = 10.0) -> AsyncIterator[None]:
        # In-process first, so concurrent turns in this instance queue locally
        local = self._local.setdefault(user_id, asyncio.Lock())
        self._users[user_id] = self._users.get(user_id, 0) + 1
        try:
            try:
                await asyncio.wait_for(local.acquire(), timeout=timeout)
            except TimeoutError as exc:
                raise TurnLockTimeout(f"turn lock timeout: user={user_id}") from exc
            try:
                rlock = await self._acquire_shared(user_id, timeout)
                try:
                    yield
                finally:
                    if rlock is not None:
                        await self._release_shared(rlock, user_id)
            finally:
                local.release()
        finally:
            self._forget(user_id)

    def _forget(self, user_id: str) -> None:
        # Drop the local lock once no turn holds or waits on it
        remaining = self._users[user_id] - 1
        if remaining:
            self._users[user_id] = remaining
        else:
            del self._users[user_id]
            del self._local[user_id]

    async def _acquire_shared(self, user_id: str, timeout: float) -> Lock | None:
        rlock = self._redis.lock(lock_key(user_id), timeout=self._ttl)
        try:
            acquired = await rlock.acquire(blocking=True, blocking_timeout=timeout)
        except RedisError as exc:
            # Single-instance fallback: the local lock alone serializes turns
            logger.warning(f"[lock] user={user_id} redis lock unavailable, using local lock only: {exc}")
            return None
        if not acquired:
            raise TurnLockTimeout(f"turn lock timeout: user={user_id}")
        return rlock

    async def _release_shared(self, rlock: Lock, user_id: str) -> None:
        try:
            await rlock.release()
        except (LockError, RedisError) as exc:
            # Expired under us (turn outlived the TTL) or Redis went away
            logger.warning(f"[lock] user={user_id} release failed: {exc}")
