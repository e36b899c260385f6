"""Per-turn runtime: turn processing and per-user serialization."""

from tuca.runtime.session_lock import TurnLock, TurnLockTimeout
from tuca.runtime.turn import TurnOutcome, TurnProcessor

__all__ = ["TurnLock", "TurnLockTimeout", "TurnOutcome", "TurnProcessor"]
