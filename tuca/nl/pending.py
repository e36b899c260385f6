"""Resolve short yes/no answers to a question the assistant left pending.

Runs before anything else: a bare "sim" or "não" answering a pending
question must never be read as a greeting or a generic request.
"""

from __future__ import annotations

from tuca.nl import keywords
from tuca.nl.confidence import INTENT_CONFIDENCE
from tuca.nl.keywords import KeywordTable
from tuca.nl.normalize import words
from tuca.nl.types import DeterminedIntent, IntentDetermined
from tuca.state.models import DialogueState


def _is_short_answer(
    text: str,
    table: KeywordTable,
    name_token: str,
    max_words: int,
    max_exact_words: int,
) -> bool:
    tokens = words(text)
    if not tokens:
        return False
    if len(tokens) <= max_exact_words and table.is_exactly(text):
        return True
    if len(tokens) > max_words or not table.matches(text):
        return False
    leftover = words(table.strip(text))
    return all(len(w) <= 4 or w == name_token for w in leftover)


def is_simple_affirmative(text: str, name_token: str = "tuca") -> bool:
    """``"sim"``, ``"pode ser"``, ``"claro, tuca"`` ... but never a sentence containing a no."""
    if keywords.NEGATIVE.matches(text):
        return False
    return _is_short_answer(text, keywords.AFFIRMATIVE, name_token, max_words=3, max_exact_words=2)


def is_simple_negative(text: str, name_token: str = "tuca") -> bool:
    return _is_short_answer(text, keywords.NEGATIVE, name_token, max_words=4, max_exact_words=3)


def resolve_pending_action(
    text: str,
    state: DialogueState,
    name_token: str = "tuca",
) -> IntentDetermined | None:
    """Classify *text* against the pending question in *state*, if any."""
    if not state.last_ai_question_type:
        return None

    if is_simple_affirmative(text, name_token):
        intent = DeterminedIntent.USER_CONFIRMS_PENDING_ACTION
    elif is_simple_negative(text, name_token):
        intent = DeterminedIntent.USER_DENIES_PENDING_ACTION
    else:
        return None

    return IntentDetermined(
        intent=intent,
        confidence=INTENT_CONFIDENCE[intent],
        pending_action_context=state.pending_action_context,
    )
