"""Greetings, thanks and farewells answered with a canned reply.

A match here is final: the engine returns the reply and skips intent
classification altogether.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from enum import Enum
from typing import TypeVar

from tuca.nl import keywords
from tuca.nl.confidence import SPECIAL_HANDLED_CONFIDENCE
from tuca.nl.keywords import KeywordTable
from tuca.nl.normalize import words
from tuca.nl.types import SpecialHandled

T = TypeVar("T")


class TrivialKind(str, Enum):
    GREETING = "greeting"
    THANKS = "thanks"
    FAREWELL = "farewell"


def select_random(pool: Sequence[T], rng: random.Random | None = None) -> T:
    """Pick one element of *pool* uniformly at random."""
    if not pool:
        raise ValueError("cannot select from an empty pool")
    return (rng or random).choice(pool)


def random_greeting(user_name: str, rng: random.Random | None = None) -> str:
    """Render the opening line the pipeline splices into canned replies."""
    return select_random([
        f"Oi {user_name}!",
        f"Olá {user_name}!",
        f"E aí {user_name}, tudo certo?",
    ], rng)


def greeting_replies(greeting: str) -> list[str]:
    return [
        f"{greeting} Em que posso te ajudar hoje?",
        f"{greeting} Pronto(a) para analisar seus resultados?",
        f"{greeting} O que vamos criar hoje?",
    ]


def thanks_replies(first_name: str) -> list[str]:
    return [
        f"De nada, {first_name}! Se precisar de algo, é só chamar.",
        f"Por nada, {first_name}! Estou por aqui.",
        f"Imagina, {first_name}! Conte comigo para o que precisar.",
    ]


def farewell_replies(first_name: str) -> list[str]:
    return [
        f"Até mais, {first_name}! Bons conteúdos!",
        f"Tchau, {first_name}! Quando quiser, é só me chamar.",
        f"Até logo, {first_name}! Sucesso nos posts!",
    ]


def _only(text: str, table: KeywordTable, name_token: str, max_words: int, max_other_len: int) -> bool:
    tokens = words(text)
    if not tokens or len(tokens) > max_words or not table.matches(text):
        return False
    leftover = words(table.strip(text))
    return all(len(w) <= max_other_len or w == name_token for w in leftover)


def is_greeting_only(text: str, name_token: str = "tuca") -> bool:
    return _only(text, keywords.GREETING, name_token, max_words=4, max_other_len=2)


def is_thanks_only(text: str, name_token: str = "tuca") -> bool:
    return _only(text, keywords.THANKS, name_token, max_words=5, max_other_len=3)


def is_farewell_only(text: str, name_token: str = "tuca") -> bool:
    return _only(text, keywords.FAREWELL, name_token, max_words=5, max_other_len=3)


def classify_trivial(text: str, name_token: str = "tuca") -> TrivialKind | None:
    if is_greeting_only(text, name_token):
        return TrivialKind.GREETING
    if is_thanks_only(text, name_token):
        return TrivialKind.THANKS
    if is_farewell_only(text, name_token):
        return TrivialKind.FAREWELL
    return None


def handle_trivial(
    text: str,
    greeting: str,
    first_name: str,
    name_token: str = "tuca",
    rng: random.Random | None = None,
) -> SpecialHandled | None:
    kind = classify_trivial(text, name_token)
    if kind is None:
        return None
    if kind is TrivialKind.GREETING:
        pool = greeting_replies(greeting)
    elif kind is TrivialKind.THANKS:
        pool = thanks_replies(first_name)
    else:
        pool = farewell_replies(first_name)
    return SpecialHandled(response=select_random(pool, rng), confidence=SPECIAL_HANDLED_CONFIDENCE)
