"""Core functionality for relaybot: configuration, logging, shared containers."""

from relaybot.core.config import Config, load_config
from relaybot.core.logging import setup_logging
from relaybot.core.synchronized import SynchronizedDict

__all__ = [
    "Config",
    "load_config",
    "setup_logging",
    "SynchronizedDict",
]
