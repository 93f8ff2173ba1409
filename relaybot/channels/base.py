"""Base channel adapter interface."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from typing import Any

from relaybot.model.message import InboundMessage

MessageCallback = Callable[[InboundMessage, "ChannelAdapter"], Coroutine[Any, Any, None]]


class ChannelAdapter(ABC):
    """Abstract base class for channel adapters.

    A channel adapter is an event source: it receives platform messages,
    converts them to InboundMessage, and delivers each one together with
    itself to the registered callback. Adapters should await the callback
    for one event before delivering the next from the same stream.
    """

    name: str = "base"

    @abstractmethod
    async def start(self) -> None:
        """Start the channel adapter (connect, authenticate, etc.)."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop the channel adapter gracefully."""
        ...

    @abstractmethod
    async def send_message(self, channel_id: str, content: str, **kwargs: Any) -> None:
        """Send a message to a channel.

        Args:
            channel_id: The platform channel to send to.
            content: Message content.
            **kwargs: Channel-specific options.
        """
        ...

    @abstractmethod
    def on_message(self, callback: MessageCallback) -> None:
        """Register a callback for incoming messages.

        Args:
            callback: Async function taking (message, channel) and returning None.
        """
        ...

    async def wait_closed(self) -> None:
        """Wait until the channel stops delivering messages on its own.

        Long-lived channels never close by themselves; the default waits forever.
        """
        await asyncio.Event().wait()
