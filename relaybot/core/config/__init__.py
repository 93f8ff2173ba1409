"""Configuration package for relaybot.

This package provides Pydantic configuration models and loading utilities.
"""

from relaybot.core.config.loader import (
    check_unexpanded_vars,
    expand_env_vars,
    expand_env_vars_recursive,
    load_config,
)
from relaybot.core.config.models import (
    BotConfig,
    ChannelConfig,
    CommandsConfig,
    Config,
    LoggingConfig,
    PrefixConfig,
    QueueConfig,
)

__all__ = [
    # Models
    "BotConfig",
    "ChannelConfig",
    "CommandsConfig",
    "Config",
    "LoggingConfig",
    "PrefixConfig",
    "QueueConfig",
    # Loaders
    "check_unexpanded_vars",
    "expand_env_vars",
    "expand_env_vars_recursive",
    "load_config",
]
