import random
from datetime import timedelta

import pytest

from tuca.nl.intent_engine import IntentEngine, IntentEngineConfig
from tuca.nl.normalize import normalize_text
from tuca.nl.trivial import greeting_replies
from tuca.nl.types import DeterminedIntent, IntentDetermined, SpecialHandled, UserIdentity
from tuca.state.models import DialogueState, LastResponseContext

USER = UserIdentity(name="Ana Souza")
GREETING = "Oi Ana!"


@pytest.fixture
def engine(clock) -> IntentEngine:
    return IntentEngine(IntentEngineConfig(), clock=clock, rng=random.Random(3))


@pytest.fixture
def contextual_engine(clock) -> IntentEngine:
    return IntentEngine(IntentEngineConfig(contextual_logic_enabled=True), clock=clock, rng=random.Random(3))


def _determine(engine: IntentEngine, text: str, state: DialogueState | None = None):
    return engine.determine_intent(normalize_text(text), USER, text, state, GREETING, "user-1")


def test_yes_answers_pending_question(engine) -> None:
    state = DialogueState(
        last_ai_question_type="confirm_fetch_day_stats",
        pending_action_context={"day": "monday"},
    )
    result = _determine(engine, "sim", state)

    assert isinstance(result, IntentDetermined)
    assert result.intent is DeterminedIntent.USER_CONFIRMS_PENDING_ACTION
    assert result.confidence == 0.92
    assert result.pending_action_context == {"day": "monday"}


def test_greeting_is_answered_directly(engine) -> None:
    result = _determine(engine, "oi, bom dia!")

    assert isinstance(result, SpecialHandled)
    assert result.type == "special_handled"
    assert result.confidence == 0.80
    assert result.response in greeting_replies(GREETING)


def test_goal_is_extracted(engine) -> None:
    result = _determine(engine, "meu objetivo é crescer 10 mil seguidores em 3 meses")

    assert isinstance(result, IntentDetermined)
    assert result.intent is DeterminedIntent.USER_SHARED_GOAL
    assert result.extracted_goal == "crescer 10 mil seguidores em 3 meses"
    assert result.confidence == 0.78


def test_best_time_from_keyword_cascade(engine) -> None:
    result = _determine(engine, "quais os melhores horários para postar?")

    assert result.intent is DeterminedIntent.ASK_BEST_TIME
    assert result.confidence == 0.75


def test_continuation_with_contextual_logic(contextual_engine, now) -> None:
    state = DialogueState(
        last_response_context=LastResponseContext(
            topic="análise de engajamento", was_question=False, timestamp=now - timedelta(minutes=2),
        ),
    )
    result = _determine(contextual_engine, "e sobre isso, me fala mais", state)

    assert result.intent is DeterminedIntent.CONTINUE_PREVIOUS_TOPIC
    assert result.resolved_context_topic == "análise de engajamento"
    assert result.confidence == 0.68


def test_contextual_logic_is_off_by_default(engine, now) -> None:
    state = DialogueState(
        last_response_context=LastResponseContext(
            topic="análise de engajamento", timestamp=now - timedelta(minutes=2),
        ),
    )
    result = _determine(engine, "e sobre isso, me fala mais", state)

    assert result.intent is DeterminedIntent.GENERAL


def test_gibberish_falls_back_to_general(engine) -> None:
    result = _determine(engine, "xkcd qwrty bnm")

    assert result.type == "intent_determined"
    assert result.intent is DeterminedIntent.GENERAL
    assert 0.35 <= result.confidence <= 0.38


def test_loose_contextual_pass_after_empty_cascade(contextual_engine, now) -> None:
    state = DialogueState(
        conversation_summary="Conversamos sobre métricas de engajamento dos reels.",
        last_interaction=now - timedelta(minutes=10),
    )
    result = _determine(contextual_engine, "e sobre isso, me fala mais detalhes do que discutimos antes", state)

    assert result.intent is DeterminedIntent.CONTINUE_PREVIOUS_TOPIC
    assert result.confidence == 0.55


def test_pending_answer_beats_everything(contextual_engine, now) -> None:
    state = DialogueState(
        last_ai_question_type="offer_content_plan",
        last_response_context=LastResponseContext(
            topic="plano", was_question=True, timestamp=now - timedelta(minutes=1),
        ),
    )
    result = _determine(contextual_engine, "claro", state)

    assert result.intent is DeterminedIntent.USER_CONFIRMS_PENDING_ACTION


def test_personal_info_beats_keyword_cascade(engine) -> None:
    result = _determine(engine, "meu objetivo é melhorar o engajamento dos meus reels")

    assert result.intent is DeterminedIntent.USER_SHARED_GOAL


def test_every_input_gets_exactly_one_result(contextual_engine) -> None:
    samples = ["", "   ", "!!!", "🦜🦜", "sim", "tchau", "me dá ideias", "a" * 500, "ÇÃÕ"]
    for text in samples:
        result = _determine(contextual_engine, text, DialogueState())
        assert isinstance(result, (IntentDetermined, SpecialHandled))
        assert 0.0 <= result.confidence <= 1.0


def test_missing_state_is_treated_as_defaults(engine) -> None:
    result = engine.determine_intent("sim", USER, "sim", None, GREETING, "user-1")

    assert result.intent is DeterminedIntent.GENERAL


def test_config_from_settings(settings) -> None:
    config = IntentEngineConfig.from_settings(settings)

    assert config.contextual_logic_enabled is False
    assert config.context_validity_minutes == 240
    assert config.name_token == "tuca"
