"""Channel factory for creating channel adapters from configuration."""

import logging

from relaybot.channels.base import ChannelAdapter
from relaybot.core.config.models import ChannelConfig

logger = logging.getLogger(__name__)


def create_channel(config: ChannelConfig) -> ChannelAdapter:
    """Create a channel adapter from its configuration.

    Args:
        config: Channel configuration (type plus type-specific extras).

    Returns:
        Configured ChannelAdapter instance.

    Raises:
        ValueError: If the channel type is unsupported.
    """
    if config.type == "console":
        from relaybot.channels.console import ConsoleChannel

        extras = config.model_extra or {}
        return ConsoleChannel(
            channel_id=config.name or "console",
            user_name=extras.get("user_name", "console"),
        )
    raise ValueError(f"Unsupported channel type: {config.type}")
