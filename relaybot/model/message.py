"""Domain models for inbound chat messages."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class MessageKind(Enum):
    """Origin of a message."""

    USER = "user"
    SYSTEM = "system"


@dataclass(frozen=True)
class Author:
    """The user who sent a message.

    Attributes:
        id: Platform user identifier.
        name: Display name.
        is_bot: Whether the author is a bot account.
    """

    id: str
    name: str = ""
    is_bot: bool = False


@dataclass(frozen=True)
class InboundMessage:
    """Immutable snapshot of a received chat message.

    Owned by the channel that delivered it; the dispatch pipeline only reads it.
    """

    id: str
    channel_id: str
    author: Author | None
    content: str
    kind: MessageKind = MessageKind.USER
    guild_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_user_message(self) -> bool:
        """Check if message was authored by a user (not a system notice)."""
        return self.kind is MessageKind.USER and self.author is not None

    @property
    def is_direct(self) -> bool:
        """Check if message was sent outside of a guild."""
        return self.guild_id is None
