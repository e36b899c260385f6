"""Resolve short follow-ups against what was just discussed.

Two tiers share one validity window:

* short-term: the structured ``lastResponseContext`` of the previous turn
* long-term: the rolling ``conversationSummary``, consulted only when the
  short-term tier is missing, stale or found nothing

Each tier tries, in order: clarification, metric details, data source,
answer-to-question and explicit continuation. The word bounds and
confidences come from a :class:`ContextBounds`; the engine runs a strict
pass first and a looser one after the keyword cascade came up empty.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from tuca.nl import keywords
from tuca.nl.normalize import normalize_text, word_count
from tuca.nl.pending import is_simple_affirmative, is_simple_negative
from tuca.nl.types import DeterminedIntent, IntentDetermined
from tuca.state.models import DialogueState

SUMMARY_EXCERPT_CHARS = 150


@dataclass(frozen=True, slots=True)
class TierBounds:
    clarification: float
    metric_details: float
    data_source: float
    answer: float
    continuation: float
    answer_max_words: int
    continuation_max_words: int


@dataclass(frozen=True, slots=True)
class ContextBounds:
    short_term: TierBounds
    long_term: TierBounds

    def loosened(self, penalty: float = 0.05, short_words: tuple[int, int] = (50, 25), long_words: int = 12) -> ContextBounds:
        def relax(tier: TierBounds, answer_words: int, continuation_words: int) -> TierBounds:
            return replace(
                tier,
                clarification=round(tier.clarification - penalty, 2),
                metric_details=round(tier.metric_details - penalty, 2),
                data_source=round(tier.data_source - penalty, 2),
                answer=round(tier.answer - penalty, 2),
                continuation=round(tier.continuation - penalty, 2),
                answer_max_words=answer_words,
                continuation_max_words=continuation_words,
            )

        return ContextBounds(
            short_term=relax(self.short_term, *short_words),
            long_term=relax(self.long_term, long_words, long_words),
        )


STRICT_BOUNDS = ContextBounds(
    short_term=TierBounds(
        clarification=0.74,
        metric_details=0.76,
        data_source=0.72,
        answer=0.70,
        continuation=0.68,
        answer_max_words=35,
        continuation_max_words=15,
    ),
    long_term=TierBounds(
        clarification=0.65,
        metric_details=0.67,
        data_source=0.64,
        answer=0.60,
        continuation=0.60,
        answer_max_words=7,
        continuation_max_words=7,
    ),
)

LOOSE_BOUNDS = STRICT_BOUNDS.loosened()


def _age_ok(stamp: datetime | None, now: datetime, validity: timedelta) -> bool:
    if stamp is None:
        return False
    # Records written by other services may carry naive timestamps
    if stamp.tzinfo is None and now.tzinfo is not None:
        stamp = stamp.replace(tzinfo=now.tzinfo)
    elif stamp.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=stamp.tzinfo)
    return now - stamp < validity


def short_term_topic(state: DialogueState, now: datetime, validity: timedelta) -> str | None:
    """The topic of the previous turn, or ``None`` when there is none fresh enough."""
    ctx = state.last_response_context
    if ctx is None or not ctx.has_content or not _age_ok(ctx.timestamp, now, validity):
        return None
    topic = (ctx.topic or "").strip()
    if topic:
        return topic
    return ", ".join(e.strip() for e in ctx.entities if e and e.strip())


def long_term_topic(state: DialogueState, now: datetime, validity: timedelta) -> str | None:
    summary = (state.conversation_summary or "").strip()
    if not summary or not _age_ok(state.last_interaction, now, validity):
        return None
    if len(summary) <= SUMMARY_EXCERPT_CHARS:
        return summary
    return summary[:SUMMARY_EXCERPT_CHARS].rstrip() + "…"


def _classify(
    text: str,
    tier: TierBounds,
    gate_text: str,
    last_was_question: bool,
    name_token: str,
) -> tuple[DeterminedIntent, float] | None:
    n_words = word_count(text)
    metrics_gate = keywords.METRIC_TOPIC.matches(gate_text)

    if keywords.CLARIFICATION.matches(text):
        return DeterminedIntent.ASK_CLARIFICATION_PREVIOUS_RESPONSE, tier.clarification
    if metrics_gate and keywords.METRIC_DETAILS.matches(text):
        return DeterminedIntent.REQUEST_METRIC_DETAILS_FROM_CONTEXT, tier.metric_details
    if metrics_gate and keywords.DATA_SOURCE.matches(text):
        return DeterminedIntent.EXPLAIN_DATA_SOURCE_FOR_ANALYSIS, tier.data_source
    if (
        last_was_question
        and 0 < n_words <= tier.answer_max_words
        and not is_simple_affirmative(text, name_token)
        and not is_simple_negative(text, name_token)
    ):
        return DeterminedIntent.CONTINUE_PREVIOUS_TOPIC, tier.answer
    if n_words <= tier.continuation_max_words and keywords.CONTINUATION.matches(text):
        return DeterminedIntent.CONTINUE_PREVIOUS_TOPIC, tier.continuation
    return None


def resolve_context(
    text: str,
    state: DialogueState,
    now: datetime,
    validity_minutes: int,
    name_token: str = "tuca",
    bounds: ContextBounds = STRICT_BOUNDS,
) -> IntentDetermined | None:
    """Map *text* (normalized) to a contextual follow-up intent, if it is one."""
    if not text.strip():
        return None
    validity = timedelta(minutes=validity_minutes)
    last_was_question = bool(state.last_ai_question_type) or bool(
        state.last_response_context and state.last_response_context.was_question
    )

    topic = short_term_topic(state, now, validity)
    if topic is not None:
        hit = _classify(text, bounds.short_term, normalize_text(topic), last_was_question, name_token)
        if hit is not None:
            intent, confidence = hit
            return IntentDetermined(intent=intent, confidence=confidence, resolved_context_topic=topic or None)

    excerpt = long_term_topic(state, now, validity)
    if excerpt is None:
        return None
    hit = _classify(
        text,
        bounds.long_term,
        normalize_text(state.conversation_summary or ""),
        bool(state.last_ai_question_type),
        name_token,
    )
    if hit is None:
        return None
    intent, confidence = hit
    return IntentDetermined(intent=intent, confidence=confidence, resolved_context_topic=excerpt)
