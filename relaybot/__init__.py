"""relaybot - chat message to command dispatch pipeline."""

__version__ = "0.1.0"
