import pytest

from tuca.bus.events import InboundMessage
from tuca.settings import DEFAULT_CONTEXT_VALIDITY_MINUTES, TucaSettings


def test_defaults() -> None:
    settings = TucaSettings(_env_file=None)

    assert settings.contextual_logic_enabled is False
    assert settings.context_validity_minutes == DEFAULT_CONTEXT_VALIDITY_MINUTES == 240
    assert settings.state_ttl_seconds == 2 * 24 * 60 * 60
    assert settings.usage_ttl_seconds == 7 * 24 * 60 * 60


def test_flag_is_read_from_prefixed_env(monkeypatch) -> None:
    monkeypatch.setenv("TUCA_CONTEXTUAL_LOGIC_ENABLED", "true")
    monkeypatch.setenv("TUCA_CONTEXT_VALIDITY_MINUTES", "30")

    settings = TucaSettings(_env_file=None)

    assert settings.contextual_logic_enabled is True
    assert settings.context_validity_minutes == 30


@pytest.mark.parametrize("raw", ["abc", "-5", "0", "", "inf"])
def test_bad_validity_window_falls_back(monkeypatch, raw) -> None:
    monkeypatch.setenv("TUCA_CONTEXT_VALIDITY_MINUTES", raw)

    assert TucaSettings(_env_file=None).context_validity_minutes == 240


def test_inbound_message_user_id() -> None:
    msg = InboundMessage(channel="whatsapp", sender_id="5511", content="oi")

    assert msg.user_id == "whatsapp:5511"
    assert InboundMessage(channel="", sender_id="5511", content="oi").user_id == "5511"
