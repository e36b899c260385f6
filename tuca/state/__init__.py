"""Dialogue state record and its Redis-backed store."""

from tuca.state.models import DialogueState, HistoryTurn, LastResponseContext
from tuca.state.store import DialogueStateStore

__all__ = ["DialogueState", "DialogueStateStore", "HistoryTurn", "LastResponseContext"]
