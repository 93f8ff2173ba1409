"""Command service: lookup, checks, argument splitting, and invocation.

The service is the single entry point of the command engine. Besides
returning a result from ``execute`` it notifies two kinds of observers out
of band: executed observers for successful runs, and execution-failed
observers whenever a command (or one of its checks) raises or returns an
ExecutionFailedResult.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

from relaybot.commands.base import CommandDefinition, CommandHandler
from relaybot.commands.context import ExecutionContext
from relaybot.commands.parse import split_command_args, split_command_name
from relaybot.commands.results import (
    ArgumentParseFailedResult,
    CheckFailure,
    ChecksFailedResult,
    CommandNotFoundResult,
    CommandResult,
    ExecutionFailedResult,
    ExecutionStep,
    FailedResult,
    Result,
    SuccessfulResult,
)
from relaybot.core.synchronized import SynchronizedDict

logger = logging.getLogger(__name__)


class CommandRegistrationError(Exception):
    """Raised when a command name or alias is already taken."""


class ContextTypeMismatchError(Exception):
    """The constructed context does not provide the kind a handler requires."""

    def __init__(self, command: CommandDefinition, expected: str, actual: str):
        self.command = command
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Command '{command.name}' requires a '{expected}' context, but got '{actual}'."
        )


@dataclass
class CommandExecutedEvent:
    """A command ran to completion."""

    context: ExecutionContext
    command: CommandDefinition
    result: Result


@dataclass
class CommandExecutionFailedEvent:
    """A command or one of its checks raised, or the command returned an execution failure."""

    context: ExecutionContext
    result: ExecutionFailedResult


ExecutedObserver = Callable[[CommandExecutedEvent], Coroutine[Any, Any, None]]
ExecutionFailedObserver = Callable[[CommandExecutionFailedEvent], Coroutine[Any, Any, None]]


class CommandService:
    """Resolves command input to a handler and runs it."""

    def __init__(self) -> None:
        self._handlers: SynchronizedDict[str, CommandHandler] = SynchronizedDict()
        self._executed_observers: list[ExecutedObserver] = []
        self._execution_failed_observers: list[ExecutionFailedObserver] = []

    def register(self, handler: CommandHandler) -> None:
        """Register a command handler under its name and aliases.

        Raises:
            CommandRegistrationError: If any name is already registered.
        """
        definition = handler.definition
        names = [definition.name.lower(), *(alias.lower() for alias in definition.aliases)]
        added: list[str] = []
        for name in names:
            if not self._handlers.try_add(name, handler):
                for taken in added:
                    self._handlers.pop(taken)
                raise CommandRegistrationError(f"Command name '{name}' is already registered")
            added.append(name)
        logger.debug(f"Registered command: {definition.name}")

    def unregister(self, name: str) -> bool:
        """Remove a command and all of its aliases.

        Returns:
            True if the command was registered.
        """
        handler = self._handlers.get(name.lower())
        if handler is None:
            return False
        for key, value in self._handlers.items():
            if value is handler:
                self._handlers.pop(key)
        return True

    def get_handler(self, name: str) -> CommandHandler | None:
        """Get handler for a command name or alias."""
        return self._handlers.get(name.lower())

    def list_commands(self, include_hidden: bool = False) -> list[CommandDefinition]:
        """List registered commands once each, aliases excluded."""
        seen: list[CommandHandler] = []
        for handler in self._handlers.values():
            if handler not in seen:
                seen.append(handler)
        return [
            h.definition
            for h in seen
            if include_hidden or not h.definition.hidden
        ]

    def add_executed_observer(self, observer: ExecutedObserver) -> None:
        self._executed_observers.append(observer)

    def add_execution_failed_observer(self, observer: ExecutionFailedObserver) -> None:
        self._execution_failed_observers.append(observer)

    async def execute(self, input: str, context: ExecutionContext) -> Result:
        """Find and run the command named by ``input``.

        Args:
            input: Text after the prefix, e.g. ``"echo hi"``.
            context: The invocation's execution context.

        Returns:
            The command's result, or a FailedResult describing why it did not run.
        """
        name, args_text = split_command_name(input)
        handler = self.get_handler(name) if name else None
        if handler is None:
            return CommandNotFoundResult()

        definition = handler.definition

        try:
            failures = await self._run_checks(definition, context)
        except Exception as exc:
            return await self._execution_failed(context, definition, exc, ExecutionStep.CHECKS)
        if failures:
            return ChecksFailedResult(
                reason="One or more checks failed.",
                command=definition,
                failures=failures,
            )

        try:
            args = split_command_args(args_text)
        except ValueError as exc:
            return ArgumentParseFailedResult(
                reason=f"Failed to parse arguments: {exc}.",
                command=definition,
                raw_arguments=args_text,
            )

        if not context.provides(definition.context_kind):
            mismatch = ContextTypeMismatchError(definition, definition.context_kind, context.kind)
            return await self._execution_failed(context, definition, mismatch, ExecutionStep.COMMAND)

        try:
            returned = await handler.handle(context, args)
        except asyncio.CancelledError as exc:
            # A real cancellation of this task must keep propagating
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            return await self._execution_failed(context, definition, exc, ExecutionStep.COMMAND)
        except Exception as exc:
            return await self._execution_failed(context, definition, exc, ExecutionStep.COMMAND)

        if isinstance(returned, ExecutionFailedResult):
            if returned.command is None:
                returned.command = definition
            await self._notify_execution_failed(context, returned)
            return returned
        if isinstance(returned, FailedResult):
            return returned

        result: Result = returned if returned is not None else SuccessfulResult()
        if isinstance(result, CommandResult):
            result.context = context

        await self._notify(
            self._executed_observers,
            CommandExecutedEvent(context=context, command=definition, result=result),
            "command executed",
        )
        return result

    async def _run_checks(
        self, definition: CommandDefinition, context: ExecutionContext
    ) -> list[CheckFailure]:
        failures: list[CheckFailure] = []
        for check in definition.all_checks():
            outcome = await check.check(context)
            if not outcome.passed:
                failures.append(CheckFailure(check=check, reason=outcome.reason))
        return failures

    async def _execution_failed(
        self,
        context: ExecutionContext,
        definition: CommandDefinition,
        exc: BaseException,
        step: ExecutionStep,
    ) -> ExecutionFailedResult:
        result = ExecutionFailedResult(
            reason=f"An exception occurred while executing {definition.name}.",
            command=definition,
            exception=exc,
            step=step,
        )
        await self._notify_execution_failed(context, result)
        return result

    async def _notify_execution_failed(
        self, context: ExecutionContext, result: ExecutionFailedResult
    ) -> None:
        await self._notify(
            self._execution_failed_observers,
            CommandExecutionFailedEvent(context=context, result=result),
            "command execution failed",
        )

    async def _notify(self, observers: list[Any], event: Any, event_name: str) -> None:
        for observer in list(observers):
            try:
                await observer(event)
            except Exception as e:
                logger.error(f"An exception occurred in a {event_name} observer: {e}", exc_info=True)
