"""Result types produced by the intent engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal


class DeterminedIntent(str, Enum):
    """Closed set of intents the engine can resolve a message to."""

    # pending yes/no question
    USER_CONFIRMS_PENDING_ACTION = "user_confirms_pending_action"
    USER_DENIES_PENDING_ACTION = "user_denies_pending_action"
    # personal information
    USER_REQUESTS_MEMORY_UPDATE = "user_requests_memory_update"
    USER_STATED_PREFERENCE = "user_stated_preference"
    USER_SHARED_GOAL = "user_shared_goal"
    USER_MENTIONED_KEY_FACT = "user_mentioned_key_fact"
    # keyword cascade
    HUMOR_SCRIPT_REQUEST = "humor_script_request"
    ASK_BEST_TIME = "ASK_BEST_TIME"
    CONTENT_PLAN = "content_plan"
    SCRIPT_REQUEST = "script_request"
    ASK_BEST_PERFORMER = "ASK_BEST_PERFORMER"
    DEMOGRAPHIC_QUERY = "demographic_query"
    ASK_COMMUNITY_INSPIRATION = "ask_community_inspiration"
    CONTENT_IDEAS = "content_ideas"
    RANKING_REQUEST = "ranking_request"
    REPORT = "report"
    SOCIAL_QUERY = "social_query"
    META_QUERY_PERSONAL = "meta_query_personal"
    # contextual follow-ups
    ASK_CLARIFICATION_PREVIOUS_RESPONSE = "ASK_CLARIFICATION_PREVIOUS_RESPONSE"
    REQUEST_METRIC_DETAILS_FROM_CONTEXT = "REQUEST_METRIC_DETAILS_FROM_CONTEXT"
    EXPLAIN_DATA_SOURCE_FOR_ANALYSIS = "EXPLAIN_DATA_SOURCE_FOR_ANALYSIS"
    CONTINUE_PREVIOUS_TOPIC = "CONTINUE_PREVIOUS_TOPIC"
    # fallback
    GENERAL = "general"

    def __str__(self) -> str:
        return self.value


# Intents that open a multi-turn task in the dialogue state.
COMPLEX_TASK_INTENTS = frozenset({DeterminedIntent.CONTENT_PLAN, DeterminedIntent.REPORT})


class PreferenceField(str, Enum):
    TONE = "tone"
    FORMATS = "formats"
    DISLIKED_TOPICS = "dislikedTopics"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ExtractedPreferenceDetail:
    """A preference stated by the user: canonical *value* plus the raw span."""

    field: PreferenceField
    value: str
    raw_value: str | None = None


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """Minimal view of the user needed to personalize canned replies."""

    name: str | None = None

    @property
    def first_name(self) -> str:
        parts = (self.name or "").split()
        return parts[0] if parts else "criador(a)"


@dataclass(frozen=True, slots=True)
class IntentDetermined:
    """The message was classified into one of :class:`DeterminedIntent`."""

    intent: DeterminedIntent
    confidence: float
    pending_action_context: Any = None
    extracted_preference: ExtractedPreferenceDetail | None = None
    extracted_goal: str | None = None
    extracted_fact: str | None = None
    memory_update_request_content: str | None = None
    resolved_context_topic: str | None = None
    type: Literal["intent_determined"] = "intent_determined"


@dataclass(frozen=True, slots=True)
class SpecialHandled:
    """The message was answered directly with a canned reply."""

    response: str
    confidence: float
    type: Literal["special_handled"] = "special_handled"


IntentResult = IntentDetermined | SpecialHandled
