"""Base abstractions for the command system."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from relaybot.commands.context import DEFAULT_CONTEXT, GUILD_CONTEXT
from relaybot.commands.results import CommandResult

if TYPE_CHECKING:
    from relaybot.commands.context import ExecutionContext


@dataclass
class CheckResult:
    """Outcome of a single check."""

    passed: bool
    reason: str = ""

    @classmethod
    def success(cls) -> "CheckResult":
        return cls(passed=True)

    @classmethod
    def failure(cls, reason: str) -> "CheckResult":
        return cls(passed=False, reason=reason)


class Check(ABC):
    """A precondition evaluated before a command runs."""

    @abstractmethod
    async def check(self, context: "ExecutionContext") -> CheckResult:
        """Decide whether the invocation may proceed."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RequireGuild(Check):
    """Restricts a module or command to guild messages."""

    async def check(self, context: "ExecutionContext") -> CheckResult:
        if context.provides(GUILD_CONTEXT):
            return CheckResult.success()
        return CheckResult.failure("This can only be executed within a guild.")


class RequireDirect(Check):
    """Restricts a module or command to direct messages."""

    async def check(self, context: "ExecutionContext") -> CheckResult:
        if context.message.is_direct:
            return CheckResult.success()
        return CheckResult.failure("This can only be executed in direct messages.")


@dataclass
class CommandModule:
    """A group of commands sharing checks.

    Checks of parent modules apply to every nested module.
    """

    name: str
    checks: list[Check] = field(default_factory=list)
    parent: "CommandModule | None" = None

    def iter_checks(self) -> Iterator[Check]:
        """Yield checks from the outermost parent down to this module."""
        if self.parent is not None:
            yield from self.parent.iter_checks()
        yield from self.checks


@dataclass
class CommandDefinition:
    """Metadata for a registered command."""

    name: str  # e.g., "ping", "echo"
    description: str = ""
    aliases: tuple[str, ...] = ()
    module: CommandModule | None = None
    checks: list[Check] = field(default_factory=list)
    context_kind: str = DEFAULT_CONTEXT  # Context tag the handler requires
    hidden: bool = False

    def all_checks(self) -> list[Check]:
        """Module checks (outermost first) followed by the command's own checks."""
        return self.module_checks() + list(self.checks)

    def module_checks(self) -> list[Check]:
        return list(self.module.iter_checks()) if self.module else []


class CommandHandler(ABC):
    """Base class for command implementations."""

    @property
    @abstractmethod
    def definition(self) -> CommandDefinition:
        """Command metadata."""
        ...

    @abstractmethod
    async def handle(
        self,
        context: "ExecutionContext",
        args: tuple[str, ...],
    ) -> CommandResult | None:
        """Execute the command.

        Returns:
            A CommandResult whose side effect runs after the command returns,
            or None when there is nothing further to do.
        """
        ...
