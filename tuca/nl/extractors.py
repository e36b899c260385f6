"""Extract personal information the user shares in passing.

Four extractors run in a fixed order and the first hit wins:

1. memory-update requests ("Tuca, lembre que ...")
2. stated preferences (AI tone, content formats, disliked topics)
3. shared goals ("meu objetivo é ...")
4. key facts ("moro em ...", "um fato importante sobre mim é que ...")

They work on the *raw* message because the captured payload is stored
verbatim for the assistant to use later, casing and accents included.
Goals, facts and memory requests are driven by anchor tables: each row pairs
an anchor phrase with what to capture after it, and every table is compiled
and evaluated the same way.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum

from tuca.nl.confidence import INTENT_CONFIDENCE
from tuca.nl.normalize import normalize_text, words
from tuca.nl.types import (
    DeterminedIntent,
    ExtractedPreferenceDetail,
    IntentDetermined,
    PreferenceField,
)

_ACCENT_CLASSES = {
    "a": "aáàâãä",
    "e": "eéèêë",
    "i": "iíìîï",
    "o": "oóòôõö",
    "u": "uúùûü",
    "c": "cç",
}

_FLAGS = re.IGNORECASE | re.DOTALL

_SECOND_PERSON_RE = re.compile(
    r"^(?:voc[eê]s?|vc|vcs|tu|te|teu|tua|teus|tuas|seu|sua|seus|suas)(?!\w)",
    re.IGNORECASE,
)
_TRAILING_PUNCT_RE = re.compile(r"[\s.!?;,:…]+$")


def prepare_raw(text: str | None) -> str:
    """Compose accents (NFC) and trim, so anchors see one char per letter."""
    return unicodedata.normalize("NFC", text or "").strip()


def accent_tolerant(phrase: str) -> str:
    """Regex for *phrase* that also matches it with or without accents."""
    parts: list[str] = []
    for ch in " ".join(normalize_text(phrase).split()):
        if ch == " ":
            parts.append(r"\s+")
        elif ch in _ACCENT_CLASSES:
            parts.append(f"[{_ACCENT_CLASSES[ch]}]")
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


def clean_payload(text: str) -> str:
    return _TRAILING_PUNCT_RE.sub("", text.strip())


# ---------------------------------------------------------------------------
# Anchor tables
# ---------------------------------------------------------------------------


class Capture(str, Enum):
    CONTENT = "content"  # only what follows the anchor
    STATEMENT = "statement"  # anchor included ("moro em Recife")


@dataclass(frozen=True, slots=True)
class AnchorRule:
    phrase: str
    capture: Capture = Capture.CONTENT


@dataclass(frozen=True, slots=True)
class ContentFloor:
    min_chars: int
    min_words: int

    def accepts(self, payload: str) -> bool:
        return len(payload) >= self.min_chars and len(words(payload)) >= self.min_words


@dataclass(frozen=True, slots=True)
class AnchorMatch:
    rule: AnchorRule
    payload: str
    content: str


class AnchorTable:
    """Anchor rules compiled into prefix and free-position regexes."""

    def __init__(
        self,
        name: str,
        rules: list[AnchorRule],
        floor: ContentFloor,
        name_token: str = "tuca",
        reject_second_person: bool = True,
        search_anywhere: bool = True,
    ) -> None:
        self.name = name
        self.floor = floor
        self.reject_second_person = reject_second_person
        self.search_anywhere = search_anywhere
        ordered = sorted(rules, key=lambda r: len(r.phrase), reverse=True)
        lead = rf"^\s*(?:{accent_tolerant(name_token)}\W+)?(?:por\s+favor\W+)?"
        self._rules: list[tuple[AnchorRule, re.Pattern[str], re.Pattern[str]]] = []
        for rule in ordered:
            anchor = rf"(?P<anchor>{accent_tolerant(rule.phrase)})(?!\w)\W*(?P<content>.*)$"
            self._rules.append((
                rule,
                re.compile(lead + anchor, _FLAGS),
                re.compile(r"(?<!\w)" + anchor, _FLAGS),
            ))

    def _accept(self, rule: AnchorRule, m: re.Match[str], text: str) -> AnchorMatch | None:
        content = clean_payload(m.group("content"))
        if not content:
            return None
        if self.reject_second_person and _SECOND_PERSON_RE.match(content):
            return None
        if rule.capture is Capture.STATEMENT:
            payload = clean_payload(text[m.start("anchor"):])
        else:
            payload = content
        if not self.floor.accepts(payload):
            return None
        return AnchorMatch(rule=rule, payload=payload, content=content)

    def match(self, raw_text: str) -> AnchorMatch | None:
        """Prefix check over every anchor first, then a free-position search.

        Statement anchors ("trabalho com", "moro em") only count at the start
        of the message.
        """
        for rule, prefix, _ in self._rules:
            m = prefix.match(raw_text)
            if m and (hit := self._accept(rule, m, raw_text)):
                return hit
        if not self.search_anywhere:
            return None
        for rule, _, anywhere in self._rules:
            if rule.capture is Capture.STATEMENT:
                continue
            m = anywhere.search(raw_text)
            if m and (hit := self._accept(rule, m, raw_text)):
                return hit
        return None


MEMORY_ANCHORS = [
    AnchorRule(p) for p in (
        "lembre que", "lembre-se que", "lembre-se de que", "lembra que",
        "lembra de que", "anote que", "anota que", "anote aí que", "anota aí que",
        "guarde que", "guarda que", "salve que", "salva que", "grave que",
        "grava que", "não esqueça que", "não esquece que", "memorize que",
        "registre que", "registra que", "quero que você lembre que",
        "quero que você anote que", "quero que você saiba que",
    )
]

GOAL_ANCHORS = [
    AnchorRule(p) for p in (
        "meu objetivo é", "meu objetivo principal é", "minha meta é",
        "minha meta principal é", "meu foco é", "meu sonho é", "meu plano é",
        "tenho como objetivo", "tenho como meta", "quero alcançar",
        "eu quero alcançar", "gostaria de alcançar", "pretendo", "eu pretendo",
        "busco", "eu busco", "estou buscando", "almejo", "planejo", "eu planejo",
    )
]

FACT_ANCHORS = [
    AnchorRule("um fato importante sobre mim é que"),
    AnchorRule("fato importante sobre mim é que"),
    AnchorRule("um fato importante sobre mim é"),
    AnchorRule("fato importante sobre mim é"),
    AnchorRule("um fato importante sobre mim"),
    AnchorRule("fato importante sobre mim"),
    AnchorRule("algo importante sobre mim é que"),
    AnchorRule("você precisa saber que"),
    AnchorRule("saiba que"),
    AnchorRule("moro em", Capture.STATEMENT),
    AnchorRule("eu moro em", Capture.STATEMENT),
    AnchorRule("sou de", Capture.STATEMENT),
    AnchorRule("eu sou de", Capture.STATEMENT),
    AnchorRule("minha empresa é", Capture.STATEMENT),
    AnchorRule("minha empresa se chama", Capture.STATEMENT),
    AnchorRule("tenho uma empresa", Capture.STATEMENT),
    AnchorRule("trabalho com", Capture.STATEMENT),
    AnchorRule("eu trabalho com", Capture.STATEMENT),
    AnchorRule("sou formado em", Capture.STATEMENT),
    AnchorRule("sou formada em", Capture.STATEMENT),
    AnchorRule("meu nicho é", Capture.STATEMENT),
]

MEMORY_FLOOR = ContentFloor(min_chars=5, min_words=2)
GOAL_FLOOR = ContentFloor(min_chars=10, min_words=2)
FACT_FLOOR = ContentFloor(min_chars=10, min_words=3)


# ---------------------------------------------------------------------------
# Preference regex families
# ---------------------------------------------------------------------------

_NOT_NEGATED = r"(?<!n[aã]o\s)"

_TONE_VALUE = (
    r"(?P<value>mais\s+formal|formal|mais\s+direto\s+ao\s+ponto|direto\s+ao\s+ponto"
    r"|mais\s+diret[oa]s?|diret[oa]s?|super\s+descontra[ií]d[oa]s?|descontra[ií]d[oa]s?"
    r"|informal|leve)(?!\w)"
)
_TONE_PHRASE = (
    r"(?P<value>mais\s+formal|(?:mais\s+)?direto\s+ao\s+ponto|super\s+descontra[ií]d[oa]s?)(?!\w)"
)
_TONE_VERB = r"(?:eu\s+)?(?:prefiro|gosto\s+(?:mais\s+)?de)\s+"

# A bare adjective only counts after a tone noun or a "que você ..." clause.
_TONE_PATTERNS = tuple(
    re.compile(_NOT_NEGATED + pattern, re.IGNORECASE)
    for pattern in (
        _TONE_VERB
        + r"(?:(?:um\s+)?(?:tom|jeito)|(?:uma?\s+)?(?:linguagem|conversa|resposta)s?)\s+"
        + _TONE_VALUE,
        r"(?:eu\s+)?(?:prefiro|gosto\s+(?:mais\s+)?de|quero)\s+que\s+(?:voc[eê]|vc)\s+"
        r"(?:seja|fale|responda|escreva)\s+(?:de\s+(?:um\s+)?jeito\s+)?"
        + _TONE_VALUE,
        r"meu\s+tom\s+(?:preferido\s+)?(?:[eé]\s+)?" + _TONE_VALUE,
        _TONE_VERB + _TONE_PHRASE,
    )
)

_FORMAT_RE = re.compile(
    _NOT_NEGATED
    + r"(?:(?:eu\s+)?(?:prefiro|gosto\s+(?:mais\s+)?de|curto)\s+"
    r"(?:(?:fazer|postar|criar|produzir|gravar|ver)\s+)?"
    r"|(?:eu\s+)?quero\s+(?:mais\s+)?)"
    r"(?:(?:os|as|o|a|um|uma)\s+)?"
    r"(?P<value>reels?|v[ií]deos?\s+longos?|v[ií]deos?\s+curtos?|carross[eé]is|carrossel"
    r"|stories|story|fotos?|lives?|posts?\s+est[aá]ticos?|shorts)(?!\w)",
    re.IGNORECASE,
)

_DISLIKED_RE = re.compile(
    r"(?:n[aã]o\s+gosto\s+(?:de\s+falar\s+(?:sobre|de)|de)"
    r"|evit[ea]\s+(?:falar\s+)?(?:sobre|de)"
    r"|n[aã]o\s+(?:quero|curto)\s+falar\s+(?:sobre|de)"
    r"|n[aã]o\s+fal[ea]\s+(?:sobre|de)"
    r"|odeio\s+falar\s+(?:sobre|de))"
    r"\s+(?P<value>[^.!?\n]{3,80})",
    re.IGNORECASE,
)

_FORMAT_CANON = (
    ("video longo", "video_longo"),
    ("videos longo", "video_longo"),
    ("video curto", "video_curto"),
    ("videos curto", "video_curto"),
    ("carross", "carrossel"),
    ("reel", "reels"),
    ("stor", "stories"),
    ("foto", "foto"),
    ("live", "live"),
    ("estatic", "post_estatico"),
    ("shorts", "shorts"),
)


def canonical_tone(value: str) -> str:
    v = normalize_text(value)
    if "informal" in v or "descontraid" in v or v == "leve":
        return "super_descontraido"
    if "formal" in v:
        return "mais_formal"
    return "direto_ao_ponto"


def canonical_format(value: str) -> str:
    v = " ".join(normalize_text(value).split())
    for needle, canon in _FORMAT_CANON:
        if needle in v:
            return canon
    return v


def extract_preference(raw_text: str) -> ExtractedPreferenceDetail | None:
    for pattern in _TONE_PATTERNS:
        if m := pattern.search(raw_text):
            return ExtractedPreferenceDetail(
                field=PreferenceField.TONE,
                value=canonical_tone(m.group("value")),
                raw_value=m.group(0).strip(),
            )
    if m := _FORMAT_RE.search(raw_text):
        return ExtractedPreferenceDetail(
            field=PreferenceField.FORMATS,
            value=canonical_format(m.group("value")),
            raw_value=m.group(0).strip(),
        )
    if m := _DISLIKED_RE.search(raw_text):
        topic = clean_payload(m.group("value"))
        if len(topic) >= 3:
            return ExtractedPreferenceDetail(
                field=PreferenceField.DISLIKED_TOPICS,
                value=topic,
                raw_value=clean_payload(m.group(0)),
            )
    return None


# ---------------------------------------------------------------------------
# Extractor pipeline
# ---------------------------------------------------------------------------


class PersonalInfoExtractor:
    """Runs the four extractors in order; the first match wins."""

    def __init__(self, name_token: str = "tuca") -> None:
        self.memory = AnchorTable(
            "memory_update", MEMORY_ANCHORS, MEMORY_FLOOR,
            name_token=name_token, reject_second_person=False, search_anywhere=False,
        )
        self.goals = AnchorTable("goal", GOAL_ANCHORS, GOAL_FLOOR, name_token=name_token)
        self.facts = AnchorTable("key_fact", FACT_ANCHORS, FACT_FLOOR, name_token=name_token)

    def extract(self, raw_text: str) -> IntentDetermined | None:
        text = prepare_raw(raw_text)
        if not text:
            return None

        if hit := self.memory.match(text):
            return _result(
                DeterminedIntent.USER_REQUESTS_MEMORY_UPDATE,
                memory_update_request_content=hit.payload,
            )
        if preference := extract_preference(text):
            return _result(DeterminedIntent.USER_STATED_PREFERENCE, extracted_preference=preference)
        if hit := self.goals.match(text):
            return _result(DeterminedIntent.USER_SHARED_GOAL, extracted_goal=hit.payload)
        if hit := self.facts.match(text):
            return _result(DeterminedIntent.USER_MENTIONED_KEY_FACT, extracted_fact=hit.payload)
        return None


def _result(intent: DeterminedIntent, **extracted) -> IntentDetermined:
    return IntentDetermined(intent=intent, confidence=INTENT_CONFIDENCE[intent], **extracted)
