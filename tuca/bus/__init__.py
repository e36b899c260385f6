"""Message bus event types."""

from tuca.bus.events import InboundMessage

__all__ = ["InboundMessage"]
