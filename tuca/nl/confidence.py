"""Fixed per-intent confidence weights.

These are trust weights, not probabilities: downstream code compares them
against a threshold to decide whether to ask the user for clarification.
"""

from __future__ import annotations

from types import MappingProxyType

from tuca.nl.types import DeterminedIntent

GENERAL_BASELINE = 0.35
SPECIAL_HANDLED_CONFIDENCE = 0.80

INTENT_CONFIDENCE = MappingProxyType({
    DeterminedIntent.USER_CONFIRMS_PENDING_ACTION: 0.92,
    DeterminedIntent.USER_DENIES_PENDING_ACTION: 0.90,
    DeterminedIntent.USER_REQUESTS_MEMORY_UPDATE: 0.82,
    DeterminedIntent.USER_STATED_PREFERENCE: 0.80,
    DeterminedIntent.USER_SHARED_GOAL: 0.78,
    DeterminedIntent.USER_MENTIONED_KEY_FACT: 0.78,
    DeterminedIntent.HUMOR_SCRIPT_REQUEST: 0.85,
    DeterminedIntent.CONTENT_PLAN: 0.82,
    DeterminedIntent.SCRIPT_REQUEST: 0.80,
    DeterminedIntent.ASK_BEST_PERFORMER: 0.78,
    DeterminedIntent.DEMOGRAPHIC_QUERY: 0.76,
    DeterminedIntent.ASK_COMMUNITY_INSPIRATION: 0.76,
    DeterminedIntent.ASK_BEST_TIME: 0.75,
    DeterminedIntent.CONTENT_IDEAS: 0.74,
    DeterminedIntent.RANKING_REQUEST: 0.72,
    DeterminedIntent.REPORT: 0.70,
    DeterminedIntent.META_QUERY_PERSONAL: 0.65,
    DeterminedIntent.SOCIAL_QUERY: 0.60,
    DeterminedIntent.REQUEST_METRIC_DETAILS_FROM_CONTEXT: 0.76,
    DeterminedIntent.ASK_CLARIFICATION_PREVIOUS_RESPONSE: 0.74,
    DeterminedIntent.EXPLAIN_DATA_SOURCE_FOR_ANALYSIS: 0.72,
    DeterminedIntent.CONTINUE_PREVIOUS_TOPIC: 0.70,
    DeterminedIntent.GENERAL: GENERAL_BASELINE,
})


def confidence_for(intent: DeterminedIntent | str) -> float:
    """Look up the confidence of *intent*; unknown labels get the baseline."""
    try:
        return INTENT_CONFIDENCE[DeterminedIntent(intent)]
    except ValueError:
        return GENERAL_BASELINE
