"""Command prefixes and prefix resolution.

A prefix decides whether a message is addressed to the bot and, if so,
yields the remaining text to execute. A prefix provider returns the ordered
candidates for a given message; the first candidate that matches wins.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from relaybot.core.synchronized import SynchronizedDict
from relaybot.model.message import InboundMessage

logger = logging.getLogger(__name__)


class Prefix(ABC):
    """A leading marker that signals a command invocation."""

    @abstractmethod
    def try_find(self, message: InboundMessage) -> str | None:
        """Match the prefix against the message content.

        Returns:
            The text after the prefix, or None if the prefix does not match.
        """
        ...


class StringPrefix(Prefix):
    """A literal string prefix such as ``!`` or ``bot,``."""

    def __init__(self, value: str, case_sensitive: bool = True):
        if not value:
            raise ValueError("Prefix value must be a non-empty string")
        self.value = value
        self.case_sensitive = case_sensitive

    def try_find(self, message: InboundMessage) -> str | None:
        content = message.content
        if len(content) <= len(self.value):
            return None

        head = content[: len(self.value)]
        if self.case_sensitive:
            matched = head == self.value
        else:
            matched = head.casefold() == self.value.casefold()
        if not matched:
            return None

        remainder = content[len(self.value):].lstrip()
        return remainder or None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StringPrefix):
            return NotImplemented
        return self.value == other.value and self.case_sensitive == other.case_sensitive

    def __hash__(self) -> int:
        return hash((self.value, self.case_sensitive))

    def __repr__(self) -> str:
        return f"StringPrefix({self.value!r})"

    def __str__(self) -> str:
        return self.value


class MentionPrefix(Prefix):
    """Matches a leading mention of the bot, ``<@id>`` or ``<@!id>``."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        self._forms = (f"<@{user_id}>", f"<@!{user_id}>")

    def try_find(self, message: InboundMessage) -> str | None:
        content = message.content
        for form in self._forms:
            if content.startswith(form):
                remainder = content[len(form):].lstrip()
                return remainder or None
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MentionPrefix):
            return NotImplemented
        return self.user_id == other.user_id

    def __hash__(self) -> int:
        return hash(("mention", self.user_id))

    def __repr__(self) -> str:
        return f"MentionPrefix({self.user_id!r})"

    def __str__(self) -> str:
        return self._forms[0]


def find_prefix(
    prefixes: Iterable[Prefix | None], message: InboundMessage
) -> tuple[Prefix, str] | None:
    """Return the first prefix matching the message and the remaining text.

    Candidates are tried in order and ``None`` entries are skipped.
    """
    for prefix in prefixes:
        if prefix is None:
            continue
        remainder = prefix.try_find(message)
        if remainder is not None:
            return prefix, remainder
    return None


class PrefixProvider(ABC):
    """Supplies the ordered candidate prefixes for a message."""

    @abstractmethod
    async def get_prefixes(self, message: InboundMessage) -> Sequence[Prefix | None] | None:
        """Return candidate prefixes in match order, or None to ignore the message."""
        ...


class DefaultPrefixProvider(PrefixProvider):
    """Static prefixes with optional per-channel overrides.

    Channel overrides replace the default literal prefixes for that channel;
    the mention prefix, when enabled, is always tried last.
    """

    def __init__(
        self,
        prefixes: Iterable[Prefix],
        mention: MentionPrefix | None = None,
    ):
        self._prefixes: tuple[Prefix, ...] = tuple(prefixes)
        self._mention = mention
        self._channel_overrides: SynchronizedDict[str, tuple[Prefix, ...]] = SynchronizedDict()

    @classmethod
    def from_strings(
        cls,
        values: Iterable[str],
        case_sensitive: bool = True,
        mention_user_id: str | None = None,
    ) -> "DefaultPrefixProvider":
        """Build a provider from literal prefix strings and an optional bot user ID."""
        mention = MentionPrefix(mention_user_id) if mention_user_id else None
        return cls(
            [StringPrefix(value, case_sensitive=case_sensitive) for value in values],
            mention=mention,
        )

    @property
    def prefixes(self) -> tuple[Prefix, ...]:
        return self._prefixes

    def set_channel_prefixes(self, channel_id: str, prefixes: Iterable[Prefix]) -> None:
        """Override the literal prefixes for one channel."""
        self._channel_overrides[channel_id] = tuple(prefixes)
        logger.debug(f"Prefix override set for channel {channel_id}")

    def clear_channel_prefixes(self, channel_id: str) -> None:
        """Remove a channel override, restoring the defaults."""
        self._channel_overrides.pop(channel_id)

    async def get_prefixes(self, message: InboundMessage) -> list[Prefix]:
        override = self._channel_overrides.get(message.channel_id)
        prefixes = list(self._prefixes if override is None else override)
        if self._mention is not None:
            prefixes.append(self._mention)
        return prefixes
