"""Per-user dialogue state, history and usage counters backed by Redis.

Redis key layout (per user):
  state:{user_id}    — String  JSON dialogue state record, TTL 2 days
  history:{user_id}  — String  JSON list of {role, content}, TTL 2 days
  usage:{user_id}    — String  integer message counter, TTL 7 days

Plus a plain response cache (``resp:{user_id}:{text}``, TTL 5 minutes).

Reads never fail: a missing, unreadable or unreachable record comes back as
the all-defaults state. Writes are best effort and logged when dropped.

``set`` is a read-merge-write without a transaction, so two concurrent turns
for one user can lose an update. Callers hold the per-user turn lock
(:class:`tuca.runtime.TurnLock`) around a whole turn to rule that out.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

import redis.asyncio as aioredis
from loguru import logger
from pydantic import ValidationError
from redis.exceptions import RedisError

from tuca.settings import TucaSettings
from tuca.state.models import DialogueState, HistoryTurn, alias_to_field

# ---------------------------------------------------------------------------
# Key helpers
# ---------------------------------------------------------------------------


def _state_key(user_id: str) -> str:
    return f"state:{user_id}"


def _history_key(user_id: str) -> str:
    return f"history:{user_id}"


def _usage_key(user_id: str) -> str:
    return f"usage:{user_id}"


def response_cache_key(user_id: str, text: str) -> str:
    """Cache key for the reply to *text*; the text part is cut to 100 chars."""
    return f"resp:{user_id}:{text.strip()[:100]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_state() -> DialogueState:
    return DialogueState()


def parse_state(raw: str | bytes | None, user_id: str = "?") -> DialogueState:
    """Decode a stored record, salvaging what validates.

    Fields that fail validation are dropped (and so take their defaults);
    anything that is not a JSON object yields the all-defaults record.
    """
    if raw is None:
        return default_state()
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning(f"[state] user={user_id} unparseable record, using defaults: {exc}")
        return default_state()
    if not isinstance(data, dict):
        logger.warning(f"[state] user={user_id} record is {type(data).__name__}, not an object; using defaults")
        return default_state()

    names = alias_to_field()
    for _ in range(len(data) + 1):
        try:
            return DialogueState.model_validate(data)
        except ValidationError as exc:
            bad = {names.get(str(err["loc"][0]), err["loc"][0]) for err in exc.errors() if err.get("loc")}
            dropped = [k for k in data if names.get(k, k) in bad]
            if not dropped:
                break
            logger.warning(f"[state] user={user_id} dropping invalid fields: {sorted(dropped)}")
            data = {k: v for k, v in data.items() if k not in dropped}
    logger.warning(f"[state] user={user_id} record could not be salvaged, using defaults")
    return default_state()


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class DialogueStateStore:
    """Async persistence for dialogue state on a shared Redis client."""

    def __init__(
        self,
        redis: aioredis.Redis,
        settings: TucaSettings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._redis = redis
        self._settings = settings
        self._clock = clock or _utcnow

    @classmethod
    def from_url(cls, settings: TucaSettings) -> DialogueStateStore:
        client: aioredis.Redis = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.redis_timeout_seconds,
            socket_timeout=settings.redis_timeout_seconds,
        )
        return cls(client, settings)

    @property
    def redis(self) -> aioredis.Redis:
        return self._redis

    async def close(self) -> None:
        await self._redis.aclose()

    # ── dialogue state ──────────────────────────────────────────────

    async def get(self, user_id: str) -> DialogueState:
        try:
            raw = await self._redis.get(_state_key(user_id))
        except RedisError as exc:
            logger.error(f"[state] user={user_id} read failed, using defaults: {exc}")
            return default_state()
        return parse_state(raw, user_id)

    async def set(self, user_id: str, partial: Mapping[str, Any]) -> DialogueState:
        """Shallow-merge *partial* into the stored record and write it back.

        Keys may be camelCase (as stored) or snake_case. ``last_interaction``
        is stamped with the current time unless *partial* provides it.
        Returns the merged record, also when the write itself was dropped.
        """
        names = alias_to_field()
        updates: dict[str, Any] = {}
        for key, value in partial.items():
            name = names.get(key)
            if name is None:
                raise ValueError(f"unknown dialogue state field: {key!r}")
            updates[name] = value

        current = await self.get(user_id)
        data = current.model_dump()
        data.update(updates)
        if "last_interaction" not in updates:
            data["last_interaction"] = self._clock()
        merged = DialogueState.model_validate(data)

        try:
            await self._redis.set(
                _state_key(user_id), merged.to_json(), ex=self._settings.state_ttl_seconds,
            )
        except RedisError as exc:
            logger.error(f"[state] user={user_id} write dropped: {exc}")
        else:
            logger.debug(f"[state] user={user_id} updated {sorted(updates)}")
        return merged

    async def reset(self, user_id: str) -> DialogueState:
        """Overwrite the record with the all-defaults state."""
        state = default_state()
        try:
            await self._redis.set(
                _state_key(user_id), state.to_json(), ex=self._settings.state_ttl_seconds,
            )
        except RedisError as exc:
            logger.error(f"[state] user={user_id} reset dropped: {exc}")
        return state

    # ── conversation history ────────────────────────────────────────

    async def get_history(self, user_id: str) -> list[HistoryTurn]:
        try:
            raw = await self._redis.get(_history_key(user_id))
        except RedisError as exc:
            logger.error(f"[state] user={user_id} history read failed: {exc}")
            return []
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
        except (TypeError, ValueError) as exc:
            logger.warning(f"[state] user={user_id} unparseable history, ignoring: {exc}")
            return []
        if not isinstance(entries, list):
            logger.warning(f"[state] user={user_id} history is not a list, ignoring")
            return []

        turns: list[HistoryTurn] = []
        for entry in entries:
            try:
                turns.append(HistoryTurn.model_validate(entry))
            except ValidationError:
                logger.warning(f"[state] user={user_id} skipping malformed history entry")
        return turns

    async def set_history(self, user_id: str, turns: Iterable[HistoryTurn]) -> list[HistoryTurn]:
        """Persist the most recent ``history_limit`` turns."""
        kept = list(turns)[-self._settings.history_limit:] if self._settings.history_limit > 0 else []
        payload = json.dumps([t.model_dump(mode="json") for t in kept], ensure_ascii=False)
        try:
            await self._redis.set(
                _history_key(user_id), payload, ex=self._settings.history_ttl_seconds,
            )
        except RedisError as exc:
            logger.error(f"[state] user={user_id} history write dropped: {exc}")
        return kept

    async def append_history(self, user_id: str, *turns: HistoryTurn) -> list[HistoryTurn]:
        history = await self.get_history(user_id)
        history.extend(turns)
        return await self.set_history(user_id, history)

    # ── usage counter ───────────────────────────────────────────────

    async def increment_usage(self, user_id: str) -> int | None:
        """Bump the message counter and refresh its TTL. ``None`` on failure."""
        key = _usage_key(user_id)
        try:
            pipe = self._redis.pipeline(transaction=True)
            pipe.incr(key)
            pipe.expire(key, self._settings.usage_ttl_seconds)
            count, _ = await pipe.execute()
        except RedisError as exc:
            logger.error(f"[state] user={user_id} usage increment failed: {exc}")
            return None
        return int(count)

    # ── response cache ──────────────────────────────────────────────

    async def get_cached(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except RedisError as exc:
            logger.error(f"[state] cache read failed key={key}: {exc}")
            return None

    async def set_cached(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._settings.response_cache_ttl_seconds
        try:
            await self._redis.set(key, value, ex=ttl)
        except RedisError as exc:
            logger.error(f"[state] cache write dropped key={key}: {exc}")
