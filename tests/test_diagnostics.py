"""Tests for failure diagnostics."""

from relaybot.commands.base import CheckResult, CommandDefinition, CommandModule, RequireGuild
from relaybot.commands.context import GUILD_CONTEXT
from relaybot.commands.results import (
    ArgumentParseFailedResult,
    CheckFailure,
    ChecksFailedResult,
    CommandNotFoundResult,
)
from relaybot.commands.service import ContextTypeMismatchError
from relaybot.runtime.diagnostics import describe_context_mismatch, format_failure_reason


def mismatch(definition: CommandDefinition, expected: str, actual: str = "default") -> ContextTypeMismatchError:
    return ContextTypeMismatchError(definition, expected, actual)


def test_guild_mismatch_without_guild_check_suggests_it() -> None:
    definition = CommandDefinition(name="kick", context_kind=GUILD_CONTEXT)

    message = describe_context_mismatch(definition, mismatch(definition, GUILD_CONTEXT))

    assert message.startswith(
        "A command context type mismatch occurred while attempting to execute kick. "
        "The module expected guild, but got default."
    )
    assert "Did you forget to add the RequireGuild check to the module?" in message
    assert "create_context" not in message


def test_guild_mismatch_with_guild_check_has_no_hint() -> None:
    module = CommandModule("moderation", checks=[RequireGuild()])
    definition = CommandDefinition(name="kick", module=module, context_kind=GUILD_CONTEXT)

    message = describe_context_mismatch(definition, mismatch(definition, GUILD_CONTEXT))

    assert "RequireGuild" not in message


def test_guild_check_on_parent_module_counts() -> None:
    parent = CommandModule("guild", checks=[RequireGuild()])
    definition = CommandDefinition(
        name="kick", module=CommandModule("moderation", parent=parent), context_kind=GUILD_CONTEXT
    )

    assert "RequireGuild" not in describe_context_mismatch(definition, mismatch(definition, GUILD_CONTEXT))


def test_custom_kind_points_at_context_factory() -> None:
    definition = CommandDefinition(name="play", context_kind="voice")

    message = describe_context_mismatch(definition, mismatch(definition, "voice"), factory_name="build_context")

    assert "The module expected voice, but got default." in message
    assert "If you have not overridden build_context" in message
    assert "RequireGuild" not in message


def test_command_falls_back_to_error_command() -> None:
    definition = CommandDefinition(name="play", context_kind="voice")

    assert "execute play." in describe_context_mismatch(None, mismatch(definition, "voice"))


def test_not_found_is_silent() -> None:
    assert format_failure_reason(CommandNotFoundResult()) is None


def test_checks_failed_lists_every_reason() -> None:
    result = ChecksFailedResult(
        reason="One or more checks failed.",
        failures=[
            CheckFailure(check=RequireGuild(), reason=CheckResult.failure("Guild only.").reason),
            CheckFailure(check=None, reason="Too soon."),
        ],
    )

    assert format_failure_reason(result) == "One or more checks failed.\n- Guild only.\n- Too soon."


def test_other_failures_use_reason() -> None:
    result = ArgumentParseFailedResult(reason="Failed to parse arguments: No closing quotation.")

    assert format_failure_reason(result) == "Failed to parse arguments: No closing quotation."
