"""Process one inbound message end to end.

A turn loads the user's dialogue state, resolves the intent, writes the
resulting state changes back and records the exchange in the history. The
whole turn runs under the per-user :class:`TurnLock` when one is given.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from tuca.bus.events import InboundMessage
from tuca.nl.confidence import confidence_for
from tuca.nl.intent_engine import IntentEngine
from tuca.nl.normalize import normalize_text
from tuca.nl.trivial import TrivialKind, classify_trivial, random_greeting
from tuca.nl.types import (
    COMPLEX_TASK_INTENTS,
    DeterminedIntent,
    IntentDetermined,
    IntentResult,
    SpecialHandled,
    UserIdentity,
)
from tuca.runtime.session_lock import TurnLock
from tuca.state.models import DialogueState, HistoryTurn
from tuca.state.store import DialogueStateStore

QUERY_EXCERPT_CHARS = 100

_PENDING_ANSWERS = frozenset({
    DeterminedIntent.USER_CONFIRMS_PENDING_ACTION,
    DeterminedIntent.USER_DENIES_PENDING_ACTION,
})


@dataclass(frozen=True, slots=True)
class TurnOutcome:
    result: IntentResult
    state_update: dict[str, Any]
    state: DialogueState


def _excerpt(text: str, limit: int = QUERY_EXCERPT_CHARS) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[:limit].rstrip() + "…"


def build_state_update(
    result: IntentResult,
    state: DialogueState,
    message: InboundMessage,
    now: datetime,
    greeted: bool = False,
) -> dict[str, Any]:
    """State changes implied by *result*, keyed by stored (camelCase) names."""
    update: dict[str, Any] = {
        "currentProcessingMessageId": message.message_id or None,
        "currentProcessingQueryExcerpt": _excerpt(message.content) or None,
    }

    if isinstance(result, SpecialHandled):
        update["currentTask"] = None
        if greeted:
            update["lastGreetingSent"] = now
        if state.last_ai_question_type:
            update["lastAIQuestionType"] = None
            update["pendingActionContext"] = None
        return update

    if result.intent in _PENDING_ANSWERS:
        update["lastAIQuestionType"] = None
        update["pendingActionContext"] = None
    elif state.last_ai_question_type:
        logger.info(
            f"[turn] user={message.user_id} moved on from pending "
            f"'{state.last_ai_question_type}' -> {result.intent}"
        )
        update["lastAIQuestionType"] = None
        update["pendingActionContext"] = None

    if result.intent in COMPLEX_TASK_INTENTS:
        update["currentTask"] = {
            "name": result.intent.value,
            "objective": _excerpt(message.content),
            "startedAt": now.isoformat(),
        }
    elif result.intent not in (DeterminedIntent.GENERAL, *_PENDING_ANSWERS):
        update["currentTask"] = None
    return update


class TurnProcessor:
    """Run the intent engine for a message and persist what it implies."""

    def __init__(
        self,
        engine: IntentEngine,
        store: DialogueStateStore,
        lock: TurnLock | None = None,
        lock_timeout: float = 10.0,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._engine = engine
        self._store = store
        self._lock = lock
        self._lock_timeout = lock_timeout
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._rng = rng

    async def process(self, message: InboundMessage, user: UserIdentity | None = None) -> TurnOutcome:
        user = user or UserIdentity(name=message.sender_name or None)
        if self._lock is None:
            return await self._process(message, user)
        async with self._lock.acquire(message.user_id, timeout=self._lock_timeout):
            return await self._process(message, user)

    async def _process(self, message: InboundMessage, user: UserIdentity) -> TurnOutcome:
        user_id = message.user_id
        state = await self._store.get(user_id)
        normalized = normalize_text(message.content)
        greeting = random_greeting(user.first_name, self._rng)

        if not normalized.strip():
            result: IntentResult = IntentDetermined(
                intent=DeterminedIntent.GENERAL,
                confidence=confidence_for(DeterminedIntent.GENERAL),
            )
        else:
            result = self._engine.determine_intent(
                normalized, user, message.content, state, greeting, user_id,
            )

        greeted = (
            isinstance(result, SpecialHandled)
            and classify_trivial(normalized, self._engine.config.name_token) is TrivialKind.GREETING
        )
        update = build_state_update(result, state, message, self._clock(), greeted=greeted)
        new_state = await self._store.set(user_id, update)

        turns = [HistoryTurn(role="user", content=message.content)]
        if isinstance(result, SpecialHandled):
            turns.append(HistoryTurn(role="assistant", content=result.response))
        await self._store.append_history(user_id, *turns)
        await self._store.increment_usage(user_id)

        logger.debug(f"[turn] user={user_id} done: {result.type} ({result.confidence:.2f})")
        return TurnOutcome(result=result, state_update=update, state=new_state)
