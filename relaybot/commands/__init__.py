"""Command system: prefixes, contexts, results, and the command service."""

from relaybot.commands.base import (
    Check,
    CheckResult,
    CommandDefinition,
    CommandHandler,
    CommandModule,
    RequireDirect,
    RequireGuild,
)
from relaybot.commands.context import (
    DEFAULT_CONTEXT,
    GUILD_CONTEXT,
    ExecutionContext,
    GuildExecutionContext,
)
from relaybot.commands.loader import load_command_modules
from relaybot.commands.prefixes import (
    DefaultPrefixProvider,
    MentionPrefix,
    Prefix,
    PrefixProvider,
    StringPrefix,
    find_prefix,
)
from relaybot.commands.results import (
    ArgumentParseFailedResult,
    ChecksFailedResult,
    CommandNotFoundResult,
    CommandResult,
    ExecutionFailedResult,
    ExecutionStep,
    FailedResult,
    ReplyResult,
    Result,
    SuccessfulResult,
)
from relaybot.commands.service import (
    CommandExecutedEvent,
    CommandExecutionFailedEvent,
    CommandRegistrationError,
    CommandService,
    ContextTypeMismatchError,
)

__all__ = [
    "ArgumentParseFailedResult",
    "Check",
    "CheckResult",
    "ChecksFailedResult",
    "CommandDefinition",
    "CommandExecutedEvent",
    "CommandExecutionFailedEvent",
    "CommandHandler",
    "CommandModule",
    "CommandNotFoundResult",
    "CommandRegistrationError",
    "CommandResult",
    "CommandService",
    "ContextTypeMismatchError",
    "DEFAULT_CONTEXT",
    "DefaultPrefixProvider",
    "ExecutionContext",
    "ExecutionFailedResult",
    "ExecutionStep",
    "FailedResult",
    "GUILD_CONTEXT",
    "GuildExecutionContext",
    "MentionPrefix",
    "Prefix",
    "PrefixProvider",
    "ReplyResult",
    "RequireDirect",
    "RequireGuild",
    "Result",
    "StringPrefix",
    "SuccessfulResult",
    "find_prefix",
    "load_command_modules",
]
