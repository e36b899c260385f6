"""Rule-based intent resolution for incoming chat messages.

Every message gets exactly one :data:`IntentResult`. The stages run in a
fixed order and the first stage with an answer wins:

1. pending yes/no question
2. greetings, thanks and farewells (canned reply)
3. personal information (memory request, preference, goal, fact)
4. contextual follow-up, when enabled
5. keyword cascade, then a looser contextual pass
6. ``general``

The engine is synchronous and does no I/O. Configuration, the clock and the
random source are injected so tests can pin them.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from loguru import logger

from tuca.nl.cascade import classify_keywords
from tuca.nl.confidence import confidence_for
from tuca.nl.context import LOOSE_BOUNDS, STRICT_BOUNDS, resolve_context
from tuca.nl.extractors import PersonalInfoExtractor
from tuca.nl.normalize import normalize_text
from tuca.nl.pending import resolve_pending_action
from tuca.nl.trivial import handle_trivial
from tuca.nl.types import DeterminedIntent, IntentDetermined, IntentResult, UserIdentity
from tuca.settings import DEFAULT_CONTEXT_VALIDITY_MINUTES, TucaSettings
from tuca.state.models import DialogueState


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class IntentEngineConfig:
    contextual_logic_enabled: bool = False
    context_validity_minutes: int = DEFAULT_CONTEXT_VALIDITY_MINUTES
    assistant_name: str = "Tuca"

    @classmethod
    def from_settings(cls, settings: TucaSettings) -> IntentEngineConfig:
        return cls(
            contextual_logic_enabled=settings.contextual_logic_enabled,
            context_validity_minutes=settings.context_validity_minutes,
            assistant_name=settings.assistant_name,
        )

    @property
    def name_token(self) -> str:
        return normalize_text(self.assistant_name).strip() or "tuca"


class IntentEngine:
    """Resolve a message to an intent, or answer it directly when trivial."""

    def __init__(
        self,
        config: IntentEngineConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or IntentEngineConfig()
        self._clock = clock or _utcnow
        self._rng = rng
        self._extractor = PersonalInfoExtractor(self.config.name_token)

    def determine_intent(
        self,
        normalized_text: str,
        user: UserIdentity,
        raw_text: str,
        dialogue_state: DialogueState | None,
        greeting: str,
        user_id: str,
    ) -> IntentResult:
        state = dialogue_state or DialogueState()
        text = normalize_text(normalized_text)
        name_token = self.config.name_token

        if not text.strip():
            logger.debug(f"[intent] user={user_id} empty message -> general")
            return self._general()

        pending = resolve_pending_action(text, state, name_token)
        if pending is not None:
            logger.info(
                f"[intent] user={user_id} answered pending '{state.last_ai_question_type}' "
                f"-> {pending.intent}"
            )
            return pending

        special = handle_trivial(text, greeting, user.first_name, name_token, self._rng)
        if special is not None:
            logger.info(f"[intent] user={user_id} trivial interaction answered directly")
            return special

        personal = self._extractor.extract(raw_text or "")
        if personal is not None:
            logger.info(f"[intent] user={user_id} personal info -> {personal.intent}")
            return personal

        now = self._clock()
        if self.config.contextual_logic_enabled:
            contextual = resolve_context(
                text, state, now, self.config.context_validity_minutes, name_token, STRICT_BOUNDS,
            )
            if contextual is not None:
                logger.info(
                    f"[intent] user={user_id} contextual -> {contextual.intent} "
                    f"(topic={contextual.resolved_context_topic!r})"
                )
                return contextual

        intent = classify_keywords(text)
        if intent is not DeterminedIntent.GENERAL:
            result = IntentDetermined(intent=intent, confidence=confidence_for(intent))
            logger.info(f"[intent] user={user_id} keyword cascade -> {intent} ({result.confidence:.2f})")
            return result

        if self.config.contextual_logic_enabled:
            loose = resolve_context(
                text, state, now, self.config.context_validity_minutes, name_token, LOOSE_BOUNDS,
            )
            if loose is not None:
                logger.info(f"[intent] user={user_id} loose contextual -> {loose.intent}")
                return loose

        logger.debug(f"[intent] user={user_id} no rule matched -> general")
        return self._general()

    @staticmethod
    def _general() -> IntentDetermined:
        return IntentDetermined(
            intent=DeterminedIntent.GENERAL,
            confidence=confidence_for(DeterminedIntent.GENERAL),
        )
