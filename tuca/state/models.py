"""Per-user dialogue state record.

The record is persisted as JSON with camelCase keys (``lastAIQuestionType``,
``lastResponseContext``, ...) and exposed to Python with snake_case
attributes. Every field has a default, so a record read back from the store
is always structurally complete.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _StateModel(BaseModel):
    # Keys written by other services are kept and written back untouched
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class LastResponseContext(_StateModel):
    """Short-term memory of the assistant's previous turn."""

    topic: str | None = None
    entities: list[str] = Field(default_factory=list)
    was_question: bool = False
    timestamp: datetime | None = None

    @property
    def has_content(self) -> bool:
        return bool((self.topic or "").strip() or self.entities or self.was_question)


class PlanIdea(_StateModel):
    identifier: str = ""
    description: str = ""


class OfferedScriptIdea(_StateModel):
    """The script idea the assistant last offered to write."""

    ai_generated_idea_description: str = ""
    original_source: Any = None
    timestamp: datetime | None = None


class DialogueState(_StateModel):
    last_interaction: datetime | None = None
    last_greeting_sent: datetime | None = None
    last_ai_question_type: str | None = Field(default=None, alias="lastAIQuestionType")
    pending_action_context: Any = None
    conversation_summary: str | None = None
    last_response_context: LastResponseContext | None = None
    current_task: Any = None
    summary_turn_counter: int = 0
    expertise_inference_turn_counter: int = 0
    current_processing_message_id: str | None = None
    current_processing_query_excerpt: str | None = None
    recent_plan_ideas: list[PlanIdea] | None = None
    recent_plan_timestamp: datetime | None = None
    last_offered_script_idea: OfferedScriptIdea | None = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class HistoryTurn(_StateModel):
    """One entry of the conversation history record."""

    role: Literal["user", "assistant", "system"]
    content: str


def field_names() -> frozenset[str]:
    return frozenset(DialogueState.model_fields)


def alias_to_field() -> dict[str, str]:
    """Map both camelCase aliases and snake_case names to field names."""
    mapping: dict[str, str] = {}
    for name, info in DialogueState.model_fields.items():
        mapping[name] = name
        if info.alias:
            mapping[info.alias] = name
    return mapping
