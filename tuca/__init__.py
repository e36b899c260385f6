"""Tuca - intent resolution engine for a content-creator chat assistant."""

__version__ = "0.1.0"
__logo__ = "🦜"
