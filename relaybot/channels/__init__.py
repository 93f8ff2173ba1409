"""Channel adapters (event sources) for relaybot."""

from relaybot.channels.base import ChannelAdapter, MessageCallback
from relaybot.channels.console import ConsoleChannel
from relaybot.channels.factory import create_channel

__all__ = ["ChannelAdapter", "ConsoleChannel", "MessageCallback", "create_channel"]
