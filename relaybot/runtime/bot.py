"""Command bot: wires channels, intake, the execution queue, and result handling."""

import asyncio
import logging
from collections.abc import Callable, Coroutine, Mapping, Sequence
from typing import Any

from relaybot.channels.base import ChannelAdapter
from relaybot.channels.factory import create_channel
from relaybot.commands.context import ExecutionContext, GuildExecutionContext
from relaybot.commands.loader import load_command_modules
from relaybot.commands.prefixes import DefaultPrefixProvider, Prefix, PrefixProvider
from relaybot.commands.results import (
    CommandResult,
    ExecutionFailedResult,
    ExecutionStep,
    FailedResult,
    Result,
)
from relaybot.commands.service import (
    CommandExecutedEvent,
    CommandExecutionFailedEvent,
    CommandService,
    ContextTypeMismatchError,
)
from relaybot.core.config import Config
from relaybot.core.synchronized import SynchronizedDict
from relaybot.model.message import InboundMessage
from relaybot.runtime.diagnostics import describe_context_mismatch, format_failure_reason
from relaybot.runtime.intake import IntakeState, MessageIntake, default_stages
from relaybot.runtime.queue import CommandQueue
from relaybot.runtime.shutdown import OperationCanceledError, ShutdownSignal

FailureReporter = Callable[[ExecutionContext, FailedResult], Coroutine[Any, Any, None]]


def is_cancellation(exc: BaseException | None) -> bool:
    """Check if an exception means the operation was canceled."""
    return isinstance(exc, (OperationCanceledError, asyncio.CancelledError))


class CommandBot:
    """Turns inbound chat messages into queued command executions.

    Subclasses customize the pipeline by overriding the hooks
    ``check_message``, ``create_context``, ``before_executed``,
    ``handle_failed_result`` and ``report_execution_failure``.

    Every execution context created by the bot is disposed exactly once:
    by the success observer, the failure handler, the execution-failed
    observer, or intake when it aborts before queueing.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        commands: CommandService | None = None,
        prefix_provider: PrefixProvider | None = None,
        channels: Sequence[ChannelAdapter] = (),
        services: Mapping[str, Any] | None = None,
        queue: CommandQueue[str, ExecutionContext] | None = None,
        shutdown: ShutdownSignal | None = None,
        failure_reporter: FailureReporter | None = None,
    ):
        """Initialize the bot.

        Args:
            config: Application configuration (defaults apply if omitted).
            commands: Command service to dispatch to.
            prefix_provider: Source of candidate prefixes. Defaults to the
                configured literal prefixes plus an optional mention prefix.
            channels: Event sources to listen on once started.
            services: Shared services exposed to every execution context.
            queue: Execution queue (default: one sized from config).
            shutdown: Process-wide shutdown signal.
            failure_reporter: Replaces the default reply for every failed result,
                execution failures included.
        """
        self.config = config or Config()
        self.logger = logging.getLogger(f"{__name__}.{self.config.bot.name}")

        self.commands = commands or CommandService()
        self.prefix_provider = prefix_provider or self._default_prefix_provider()
        self.channels: list[ChannelAdapter] = list(channels)
        self.services: SynchronizedDict[str, Any] = SynchronizedDict(dict(services or {}))
        self.queue: CommandQueue[str, ExecutionContext] = queue or CommandQueue(
            max_backlog=self.config.queue.max_backlog
        )
        self.shutdown = shutdown or ShutdownSignal()
        self._failure_reporter = failure_reporter

        self._intake = MessageIntake(default_stages(self), self._dispose_context, self.logger)

        self.commands.add_executed_observer(self._on_command_executed)
        self.commands.add_execution_failed_observer(self._on_command_execution_failed)

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> "CommandBot":
        """Build a bot with the configured channels and command modules."""
        channels = [create_channel(channel_config) for channel_config in config.channels]
        bot = cls(config, channels=channels, **kwargs)
        load_command_modules(bot.commands, config.commands.modules)
        return bot

    def _default_prefix_provider(self) -> DefaultPrefixProvider:
        prefix_config = self.config.prefixes
        return DefaultPrefixProvider.from_strings(
            prefix_config.values,
            case_sensitive=prefix_config.case_sensitive,
            mention_user_id=self.config.bot.user_id if prefix_config.allow_mention else None,
        )

    # Hooks

    async def check_message(self, message: InboundMessage) -> bool:
        """Decide whether a message is considered at all. Default: ignore bots."""
        if self.config.bot.ignore_bots and message.author is not None and message.author.is_bot:
            return False
        return True

    def create_context(
        self, prefix: Prefix, message: InboundMessage, channel: ChannelAdapter
    ) -> ExecutionContext:
        """Build the execution context for an invocation.

        Guild messages get a GuildExecutionContext. Override to return a
        custom context type.
        """
        context_type = GuildExecutionContext if message.guild_id is not None else ExecutionContext
        return context_type(self, prefix, message, channel, services=dict(self.services.items()))

    async def before_executed(self, context: ExecutionContext) -> bool:
        """Last gate before the invocation is queued. Returning False drops it."""
        return True

    async def handle_failed_result(self, context: ExecutionContext, result: FailedResult) -> None:
        """Report a failed result (not an execution failure) to the user."""
        if self._failure_reporter is not None:
            await self._failure_reporter(context, result)
            return
        if not self.config.commands.reply_on_failure:
            return
        text = format_failure_reason(result)
        if text:
            await context.reply(text)

    async def report_execution_failure(
        self, context: ExecutionContext, result: ExecutionFailedResult
    ) -> None:
        """Report an exception raised by a command or its checks to the user.

        Goes to the failure reporter when one was given, otherwise replies
        with the failure reason.
        """
        if self._failure_reporter is not None:
            await self._failure_reporter(context, result)
            return
        if self.config.commands.reply_on_failure:
            await context.reply(result.reason)

    # Intake

    async def on_message_event(self, message: InboundMessage, channel: ChannelAdapter) -> None:
        """Handle one message from an event source.

        Returns once the invocation is queued or dropped; command execution
        happens on the queue's worker.
        """
        if not isinstance(message, InboundMessage) or not message.is_user_message:
            return
        await self._intake.process(IntakeState(message=message, channel=channel))

    # Execution

    async def execute(self, input: str, context: ExecutionContext) -> Result:
        """Execute command input with a context, bypassing the queue.

        Failed results other than execution failures are routed to the
        failure handler. Execution failures are handled by the
        execution-failed observer.
        """
        result = await self.commands.execute(input, context)
        if not isinstance(result, FailedResult):
            return result

        if isinstance(result, ExecutionFailedResult):
            return result

        await self._handle_failed(context, result)
        return result

    async def run_queued(self, input: str, context: ExecutionContext) -> None:
        """Queue callback: execute, then make sure the context is released."""
        try:
            await self.execute(input, context)
        except Exception as e:
            self.logger.error(f"An exception occurred while executing {input!r}: {e}", exc_info=True)
        finally:
            await self._dispose_context(context)

    # Result handling

    async def _handle_failed(self, context: ExecutionContext, result: FailedResult) -> None:
        try:
            await self.handle_failed_result(context, result)
        except Exception as e:
            self.logger.error(
                f"An exception occurred while handling the failed result of type {type(result).__name__}: {e}",
                exc_info=True,
            )
        await self._dispose_context(context)

    async def _dispose_context(self, context: ExecutionContext) -> None:
        try:
            await context.dispose()
        except Exception as e:
            self.logger.error(f"An exception occurred while disposing of the execution context: {e}", exc_info=True)

    async def _on_command_executed(self, event: CommandExecutedEvent) -> None:
        result = event.result
        if isinstance(result, CommandResult):
            try:
                await result.execute()
            except Exception as e:
                self.logger.error(
                    f"An exception occurred when handling command result of type {type(result).__name__}: {e}",
                    exc_info=True,
                )
        await self._dispose_context(event.context)

    async def _on_command_execution_failed(self, event: CommandExecutionFailedEvent) -> None:
        result = event.result
        exception = result.exception

        if result.step is ExecutionStep.COMMAND and isinstance(exception, ContextTypeMismatchError):
            self.logger.error(describe_context_mismatch(result.command, exception))
        elif is_cancellation(exception) and self.shutdown.is_requested:
            # Expected while stopping
            await self._dispose_context(event.context)
            return
        elif exception is None:
            # Returned by the command rather than raised
            self.logger.error(result.reason)
        else:
            self.logger.error(f"{result.reason} {exception!r}", exc_info=exception)

        try:
            await self.report_execution_failure(event.context, result)
        except Exception as e:
            self.logger.error(f"An exception occurred while reporting the execution failure: {e}", exc_info=True)
        await self._dispose_context(event.context)

    # Lifecycle

    async def start(self) -> None:
        """Start the queue worker and every channel."""
        self.logger.info(f"Starting bot '{self.config.bot.name}' with {len(self.channels)} channel(s)")
        self.queue.start()
        for channel in self.channels:
            channel.on_message(self.on_message_event)
            await channel.start()
        self.logger.info(f"Bot '{self.config.bot.name}' is running")

    async def stop(self) -> None:
        """Signal shutdown, stop channels, release pending contexts, then stop the queue.

        A command that is already running is not cancelled; stop returns once
        it has finished.
        """
        self.logger.info(f"Stopping bot '{self.config.bot.name}'")
        self.shutdown.request()

        for channel in self.channels:
            try:
                await channel.stop()
            except Exception as e:
                self.logger.error(f"Error stopping channel '{channel.name}': {e}")

        pending = self.queue.drain()
        for item in pending:
            await self._dispose_context(item.context)
        if pending:
            self.logger.info(f"Discarded {len(pending)} pending execution(s)")

        # The running command, if any, finishes before the worker exits
        await self.queue.stop()

        self.logger.info(f"Bot '{self.config.bot.name}' stopped")
