"""Ordered keyword cascade over the normalized message.

The first category whose table matches wins. Two categories have a broader
sibling further down the list that must not claim their messages, so the
sibling rules carry an explicit exclusion.
"""

from __future__ import annotations

from dataclasses import dataclass

from tuca.nl import keywords
from tuca.nl.keywords import KeywordTable
from tuca.nl.types import DeterminedIntent


@dataclass(frozen=True, slots=True)
class CascadeRule:
    intent: DeterminedIntent
    table: KeywordTable
    unless: KeywordTable | None = None

    def applies(self, text: str) -> bool:
        if not self.table.matches(text):
            return False
        return self.unless is None or not self.unless.matches(text)


CASCADE: tuple[CascadeRule, ...] = (
    CascadeRule(DeterminedIntent.HUMOR_SCRIPT_REQUEST, keywords.HUMOR_SCRIPT),
    CascadeRule(DeterminedIntent.ASK_BEST_TIME, keywords.BEST_TIME),
    CascadeRule(DeterminedIntent.CONTENT_PLAN, keywords.CONTENT_PLAN),
    CascadeRule(DeterminedIntent.SCRIPT_REQUEST, keywords.SCRIPT, unless=keywords.HUMOR_SCRIPT),
    CascadeRule(DeterminedIntent.ASK_BEST_PERFORMER, keywords.BEST_PERFORMER),
    CascadeRule(DeterminedIntent.DEMOGRAPHIC_QUERY, keywords.DEMOGRAPHIC),
    CascadeRule(DeterminedIntent.ASK_COMMUNITY_INSPIRATION, keywords.COMMUNITY_INSPIRATION),
    CascadeRule(
        DeterminedIntent.CONTENT_IDEAS,
        keywords.CONTENT_IDEAS,
        unless=keywords.COMMUNITY_INSPIRATION,
    ),
    CascadeRule(DeterminedIntent.RANKING_REQUEST, keywords.RANKING),
    CascadeRule(DeterminedIntent.REPORT, keywords.REPORT),
    CascadeRule(DeterminedIntent.SOCIAL_QUERY, keywords.SOCIAL),
    CascadeRule(DeterminedIntent.META_QUERY_PERSONAL, keywords.META_PERSONAL),
)


def classify_keywords(text: str) -> DeterminedIntent:
    """Return the first matching cascade intent, or ``GENERAL``."""
    for rule in CASCADE:
        if rule.applies(text):
            return rule.intent
    return DeterminedIntent.GENERAL


def matching_intents(text: str) -> list[DeterminedIntent]:
    """Every cascade intent whose rule applies, in cascade order."""
    return [rule.intent for rule in CASCADE if rule.applies(text)]
