import pytest

from tuca.bus.events import InboundMessage
from tuca.nl.intent_engine import IntentEngine, IntentEngineConfig
from tuca.nl.types import DeterminedIntent, IntentDetermined, SpecialHandled
from tuca.runtime.session_lock import TurnLock
from tuca.runtime.turn import TurnProcessor, build_state_update
from tuca.state.models import DialogueState


@pytest.fixture
def processor(store, fake_redis, clock, rng) -> TurnProcessor:
    engine = IntentEngine(IntentEngineConfig(), clock=clock, rng=rng)
    return TurnProcessor(engine, store, TurnLock(fake_redis), lock_timeout=1.0, clock=clock, rng=rng)


def _msg(content: str, message_id: str = "m1") -> InboundMessage:
    return InboundMessage(
        channel="whatsapp", sender_id="5511", content=content,
        message_id=message_id, sender_name="Ana Souza",
    )


async def test_confirmation_clears_pending_question(processor, store) -> None:
    user_id = _msg("").user_id
    await store.set(user_id, {
        "lastAIQuestionType": "confirm_fetch_day_stats",
        "pendingActionContext": {"day": "monday"},
    })

    outcome = await processor.process(_msg("sim"))

    assert outcome.result.intent is DeterminedIntent.USER_CONFIRMS_PENDING_ACTION
    assert outcome.result.pending_action_context == {"day": "monday"}
    stored = await store.get(user_id)
    assert stored.last_ai_question_type is None
    assert stored.pending_action_context is None
    assert stored.current_processing_message_id == "m1"


async def test_greeting_is_recorded_in_state_and_history(processor, store, now) -> None:
    outcome = await processor.process(_msg("oi, bom dia!"))

    assert isinstance(outcome.result, SpecialHandled)
    assert "Ana" in outcome.result.response
    assert outcome.state.last_greeting_sent == now
    history = await store.get_history(_msg("").user_id)
    assert [t.role for t in history] == ["user", "assistant"]
    assert history[1].content == outcome.result.response


async def test_complex_task_opens_and_other_intent_closes_it(processor) -> None:
    opened = await processor.process(_msg("me faz um relatório completo do mês"))

    assert opened.result.intent is DeterminedIntent.REPORT
    assert opened.state.current_task["name"] == "report"

    closed = await processor.process(_msg("quais os melhores horários para postar?", "m2"))

    assert closed.result.intent is DeterminedIntent.ASK_BEST_TIME
    assert closed.state.current_task is None


async def test_empty_message_is_general(processor, store, fake_redis) -> None:
    outcome = await processor.process(_msg("   "))

    assert outcome.result.intent is DeterminedIntent.GENERAL
    assert outcome.result.confidence == 0.35
    assert fake_redis.data[f"usage:{_msg('').user_id}"] == "1"


def test_moving_on_from_a_pending_question_clears_it(now) -> None:
    state = DialogueState(last_ai_question_type="offer_report", pending_action_context={"x": 1})
    result = IntentDetermined(intent=DeterminedIntent.CONTENT_IDEAS, confidence=0.74)

    update = build_state_update(result, state, _msg("me dá ideias"), now)

    assert update["lastAIQuestionType"] is None
    assert update["pendingActionContext"] is None
    assert update["currentTask"] is None


def test_general_keeps_current_task(now) -> None:
    result = IntentDetermined(intent=DeterminedIntent.GENERAL, confidence=0.35)

    update = build_state_update(result, DialogueState(), _msg("hmm"), now)

    assert "currentTask" not in update
    assert "lastAIQuestionType" not in update
