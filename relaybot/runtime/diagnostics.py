"""Human-readable diagnostics for command failures."""

from relaybot.commands.base import CommandDefinition, RequireGuild
from relaybot.commands.context import DEFAULT_CONTEXT, GUILD_CONTEXT
from relaybot.commands.results import ChecksFailedResult, CommandNotFoundResult, FailedResult
from relaybot.commands.service import ContextTypeMismatchError

BUILTIN_CONTEXT_KINDS = frozenset({DEFAULT_CONTEXT, GUILD_CONTEXT})


def describe_context_mismatch(
    command: CommandDefinition | None,
    error: ContextTypeMismatchError,
    factory_name: str = "create_context",
) -> str:
    """Explain a context mismatch and suggest the likely fix.

    Args:
        command: The command that could not run.
        error: The mismatch reported by the command service.
        factory_name: Name of the bot's context factory hook, for the hint.
    """
    command_name = command.name if command else error.command.name
    message = (
        f"A command context type mismatch occurred while attempting to execute {command_name}. "
        f"The module expected {error.expected}, but got {error.actual}."
    )

    checks = (command or error.command).module_checks()
    if error.expected == GUILD_CONTEXT and not any(isinstance(check, RequireGuild) for check in checks):
        message += f" Did you forget to add the {RequireGuild.__name__} check to the module?"

    if error.expected not in BUILTIN_CONTEXT_KINDS:
        message += (
            f" If you have not overridden {factory_name}, you must do so and have it return "
            "the given context type. Otherwise ensure it returns the correct context types."
        )
    return message


def format_failure_reason(result: FailedResult) -> str | None:
    """Text to show a user for a failed command, or None to stay silent."""
    if isinstance(result, CommandNotFoundResult):
        return None
    if isinstance(result, ChecksFailedResult) and result.failures:
        reasons = "\n".join(f"- {failure.reason}" for failure in result.failures)
        return f"{result.reason}\n{reasons}"
    return result.reason
