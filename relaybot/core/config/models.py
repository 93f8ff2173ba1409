"""Pydantic configuration models for relaybot.

This module defines all configuration models used throughout relaybot.
For loading logic, see loader.py.
"""

from pydantic import BaseModel, Field, field_validator


class BotConfig(BaseModel):
    """Identity and intake settings for the bot."""

    user_id: str = Field(default="relaybot", description="The bot's own user ID (used for mention prefixes)")
    name: str = Field(default="relaybot", description="Display name")
    ignore_bots: bool = Field(default=True, description="Drop messages authored by bot accounts")


class PrefixConfig(BaseModel):
    """Configuration for command prefixes."""

    values: list[str] = Field(default_factory=lambda: ["!"], description="Literal prefixes, tried in order")
    case_sensitive: bool = Field(default=True, description="Match literal prefixes case-sensitively")
    allow_mention: bool = Field(default=True, description="Accept a leading bot mention as a prefix")

    @field_validator("values")
    @classmethod
    def reject_empty_prefixes(cls, values: list[str]) -> list[str]:
        """Reject blank prefixes, which would match every message."""
        if any(not value.strip() for value in values):
            raise ValueError("Prefixes must be non-empty strings")
        return values


class QueueConfig(BaseModel):
    """Configuration for the command execution queue."""

    max_backlog: int | None = Field(
        default=None,
        ge=1,
        description="Max pending executions (None = unbounded). Overflowing posts are rejected.",
    )


class CommandsConfig(BaseModel):
    """Configuration for command loading and failure reporting."""

    modules: list[str] = Field(
        default_factory=list,
        description="Import paths ('pkg.mod' or 'pkg.mod:func') whose setup registers commands",
    )
    reply_on_failure: bool = Field(default=True, description="Reply to the channel when a command fails")


class ChannelConfig(BaseModel):
    """Event source binding."""

    type: str = Field(default="console", description="Channel type (console)")
    name: str | None = Field(default=None, description="Optional channel name override")

    model_config = {"extra": "allow"}


class LoggingConfig(BaseModel):
    """Configuration for logging system."""

    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    directory: str | None = Field(default="logs", description="Directory for log files (None = console only)")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB before rotation")
    backup_count: int = Field(default=5, description="Number of backup log files to keep")


class Config(BaseModel):
    """Root configuration for relaybot."""

    bot: BotConfig = Field(default_factory=BotConfig)
    prefixes: PrefixConfig = Field(default_factory=PrefixConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    commands: CommandsConfig = Field(default_factory=CommandsConfig)
    channels: list[ChannelConfig] = Field(default_factory=lambda: [ChannelConfig()])
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    model_config = {"extra": "allow"}
