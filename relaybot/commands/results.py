"""Results returned by the command service."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from relaybot.commands.base import CommandDefinition
    from relaybot.commands.context import ExecutionContext


class ExecutionStep(Enum):
    """Where in command execution a failure happened."""

    CHECKS = "checks"
    ARGUMENT_PARSING = "argument_parsing"
    COMMAND = "command"


class Result:
    """Base class for every execution outcome."""

    is_success: bool = True


class SuccessfulResult(Result):
    """A command ran and produced no side effect to execute."""

    def __repr__(self) -> str:
        return "SuccessfulResult()"


class CommandResult(Result):
    """A successful result carrying a side effect, executed after the command returns.

    The context is bound by the command service before the result is handed
    to observers.
    """

    context: "ExecutionContext | None" = None

    async def execute(self) -> None:
        """Perform the side effect (e.g., send a reply)."""
        raise NotImplementedError


class ReplyResult(CommandResult):
    """Reply to the channel the command came from."""

    def __init__(self, content: str, **kwargs: Any):
        self.content = content
        self.kwargs = kwargs

    async def execute(self) -> None:
        if self.context is None:
            raise RuntimeError("ReplyResult executed without a bound context")
        await self.context.reply(self.content, **self.kwargs)

    def __repr__(self) -> str:
        return f"ReplyResult({self.content!r})"


@dataclass
class FailedResult(Result):
    """Base class for failures."""

    reason: str

    is_success = False

    @property
    def failure_reason(self) -> str:
        return self.reason


@dataclass
class CommandNotFoundResult(FailedResult):
    """No registered command matches the input."""

    reason: str = "No command found matching the input."


@dataclass
class CheckFailure:
    """A single failed check."""

    check: Any
    reason: str


@dataclass
class ChecksFailedResult(FailedResult):
    """One or more checks rejected the invocation."""

    command: "CommandDefinition | None" = None
    failures: list[CheckFailure] = field(default_factory=list)


@dataclass
class ArgumentParseFailedResult(FailedResult):
    """The raw argument text could not be split."""

    command: "CommandDefinition | None" = None
    raw_arguments: str = ""


@dataclass
class ExecutionFailedResult(FailedResult):
    """An exception was raised while executing a command.

    Reported through the command service's execution-failed notification,
    never through the generic failure handler.
    """

    command: "CommandDefinition | None" = None
    exception: BaseException | None = None
    step: ExecutionStep = ExecutionStep.COMMAND
