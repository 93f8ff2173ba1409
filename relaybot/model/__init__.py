"""Domain models for relaybot."""

from relaybot.model.message import Author, InboundMessage, MessageKind

__all__ = ["Author", "InboundMessage", "MessageKind"]
