"""Centralised settings for Tuca, loaded from env / .env."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONTEXT_VALIDITY_MINUTES = 240

_DAY = 24 * 60 * 60


class TucaSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TUCA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- general ---
    app_name: str = "Tuca"
    env: str = "dev"
    assistant_name: str = "Tuca"

    # --- dialogue state store (Redis) ---
    redis_url: str = "redis://localhost:6379/0"
    redis_timeout_seconds: float = 3.0
    state_ttl_seconds: int = 2 * _DAY
    history_ttl_seconds: int = 2 * _DAY
    usage_ttl_seconds: int = 7 * _DAY
    history_limit: int = 10
    response_cache_ttl_seconds: int = 5 * 60

    # --- per-user turn serialization ---
    turn_lock_ttl_seconds: int = 60
    turn_lock_timeout_seconds: float = 10.0

    # --- contextual intent resolution ---
    contextual_logic_enabled: bool = False
    context_validity_minutes: int = DEFAULT_CONTEXT_VALIDITY_MINUTES

    @field_validator("context_validity_minutes", mode="before")
    @classmethod
    def _coerce_validity_minutes(cls, value: Any) -> int:
        """Unset, blank, non-numeric or non-positive values fall back to the default."""
        if value is None or isinstance(value, bool):
            return DEFAULT_CONTEXT_VALIDITY_MINUTES
        try:
            minutes = int(float(str(value).strip()))
        except (ValueError, OverflowError):
            return DEFAULT_CONTEXT_VALIDITY_MINUTES
        return minutes if minutes > 0 else DEFAULT_CONTEXT_VALIDITY_MINUTES


@lru_cache
def get_settings() -> TucaSettings:
    return TucaSettings()
