"""Event types for incoming chat messages."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class InboundMessage:
    """Message received from a chat channel."""

    channel: str  # whatsapp, cli, …
    sender_id: str  # Platform-level user identifier
    content: str  # Message text
    message_id: str = ""
    sender_name: str = ""  # display name, used to personalize replies
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)  # Channel-specific data

    @property
    def user_id(self) -> str:
        """Stable per-user key for state, history and locking."""
        return f"{self.channel}:{self.sender_id}" if self.channel else self.sender_id
