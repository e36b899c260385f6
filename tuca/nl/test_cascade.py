import pytest

from tuca.nl.cascade import CASCADE, classify_keywords, matching_intents
from tuca.nl.normalize import normalize_text
from tuca.nl.types import DeterminedIntent


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("quais os melhores horários para postar?", DeterminedIntent.ASK_BEST_TIME),
        ("me faz um roteiro de humor sobre segunda-feira", DeterminedIntent.HUMOR_SCRIPT_REQUEST),
        ("escreve um roteiro sobre maquiagem", DeterminedIntent.SCRIPT_REQUEST),
        ("monta um calendário editorial pra mim", DeterminedIntent.CONTENT_PLAN),
        ("me mostra exemplos da comunidade sobre fitness", DeterminedIntent.ASK_COMMUNITY_INSPIRATION),
        ("me dá ideias de posts sobre viagem", DeterminedIntent.CONTENT_IDEAS),
        ("qual a faixa etária dos meus seguidores?", DeterminedIntent.DEMOGRAPHIC_QUERY),
        ("me faz um relatório do mês", DeterminedIntent.REPORT),
        ("quem é você?", DeterminedIntent.META_QUERY_PERSONAL),
        ("xkcd qwrty bnm", DeterminedIntent.GENERAL),
    ],
)
def test_classify_keywords(text: str, expected: DeterminedIntent) -> None:
    assert classify_keywords(normalize_text(text)) is expected


def test_humor_suppresses_generic_script() -> None:
    text = normalize_text("quero um roteiro engraçado")

    assert DeterminedIntent.SCRIPT_REQUEST not in matching_intents(text)
    assert classify_keywords(text) is DeterminedIntent.HUMOR_SCRIPT_REQUEST


def test_community_suppresses_generic_ideas() -> None:
    text = normalize_text("ideias de inspiração da comunidade")

    assert DeterminedIntent.CONTENT_IDEAS not in matching_intents(text)
    assert classify_keywords(text) is DeterminedIntent.ASK_COMMUNITY_INSPIRATION


def test_cascade_order_and_single_result() -> None:
    order = [rule.intent for rule in CASCADE]

    assert order[0] is DeterminedIntent.HUMOR_SCRIPT_REQUEST
    assert order[1] is DeterminedIntent.ASK_BEST_TIME
    assert order[-1] is DeterminedIntent.META_QUERY_PERSONAL
    assert len(set(order)) == len(order)
