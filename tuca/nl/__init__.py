"""Natural-language intent resolution."""

from tuca.nl.intent_engine import IntentEngine, IntentEngineConfig
from tuca.nl.normalize import normalize_text
from tuca.nl.types import (
    DeterminedIntent,
    ExtractedPreferenceDetail,
    IntentDetermined,
    IntentResult,
    PreferenceField,
    SpecialHandled,
    UserIdentity,
)

__all__ = [
    "DeterminedIntent",
    "ExtractedPreferenceDetail",
    "IntentDetermined",
    "IntentEngine",
    "IntentEngineConfig",
    "IntentResult",
    "PreferenceField",
    "SpecialHandled",
    "UserIdentity",
    "normalize_text",
]
