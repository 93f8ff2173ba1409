"""Message intake: the gate chain between an inbound event and the queue.

Each stage is a small unit that either lets the message continue or aborts
it. ``MessageIntake`` runs the stages in order, isolating faults: an
exception in one stage is logged with that stage's description and ends
processing for that message only.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from relaybot.commands.context import ExecutionContext
from relaybot.commands.prefixes import Prefix, find_prefix
from relaybot.model.message import InboundMessage

if TYPE_CHECKING:
    from relaybot.channels.base import ChannelAdapter
    from relaybot.runtime.bot import CommandBot

logger = logging.getLogger(__name__)


class StageOutcome(Enum):
    """Whether intake proceeds past a stage."""

    CONTINUE = "continue"
    ABORT = "abort"


@dataclass
class IntakeState:
    """Everything intake learns about one message as it moves through the stages."""

    message: InboundMessage
    channel: "ChannelAdapter"
    prefixes: Sequence[Prefix | None] | None = None
    prefix: Prefix | None = None
    remainder: str | None = None
    context: ExecutionContext | None = None
    enqueued: bool = False


class IntakeStage(ABC):
    """One gate in the intake chain."""

    name: str = "stage"
    description: str = "running an intake stage"  # Completes "An exception occurred while ..."

    @abstractmethod
    async def run(self, state: IntakeState) -> StageOutcome:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CheckMessageStage(IntakeStage):
    """Asks the bot whether the message should be considered at all."""

    name = "check_message"
    description = "executing the check message callback"

    def __init__(self, bot: "CommandBot"):
        self.bot = bot

    async def run(self, state: IntakeState) -> StageOutcome:
        if not await self.bot.check_message(state.message):
            return StageOutcome.ABORT
        return StageOutcome.CONTINUE


class ResolvePrefixesStage(IntakeStage):
    """Fetches the ordered candidate prefixes for the message."""

    name = "resolve_prefixes"
    description = "getting the prefixes"

    def __init__(self, bot: "CommandBot"):
        self.bot = bot

    async def run(self, state: IntakeState) -> StageOutcome:
        prefixes = await self.bot.prefix_provider.get_prefixes(state.message)
        if not prefixes:
            return StageOutcome.ABORT
        state.prefixes = prefixes
        return StageOutcome.CONTINUE


class MatchPrefixStage(IntakeStage):
    """Selects the first matching prefix and the text after it."""

    name = "match_prefix"
    description = "finding the prefixes in the message"

    async def run(self, state: IntakeState) -> StageOutcome:
        match = find_prefix(state.prefixes or (), state.message)
        if match is None:
            return StageOutcome.ABORT
        state.prefix, state.remainder = match
        return StageOutcome.CONTINUE


class CreateContextStage(IntakeStage):
    """Builds the execution context for the invocation."""

    name = "create_context"
    description = "creating the execution context"

    def __init__(self, bot: "CommandBot"):
        self.bot = bot

    async def run(self, state: IntakeState) -> StageOutcome:
        state.context = self.bot.create_context(state.prefix, state.message, state.channel)
        return StageOutcome.CONTINUE


class BeforeExecutedStage(IntakeStage):
    """Runs the bot's post-context hook."""

    name = "before_executed"
    description = "executing the before executed callback"

    def __init__(self, bot: "CommandBot"):
        self.bot = bot

    async def run(self, state: IntakeState) -> StageOutcome:
        if not await self.bot.before_executed(state.context):
            return StageOutcome.ABORT
        return StageOutcome.CONTINUE


class EnqueueStage(IntakeStage):
    """Posts the invocation to the bot's execution queue."""

    name = "enqueue"
    description = "posting the execution to the command queue"

    def __init__(self, bot: "CommandBot"):
        self.bot = bot

    async def run(self, state: IntakeState) -> StageOutcome:
        self.bot.queue.post(state.remainder, state.context, self.bot.run_queued)
        state.enqueued = True
        return StageOutcome.CONTINUE


def default_stages(bot: "CommandBot") -> list[IntakeStage]:
    """The standard gate chain, in order."""
    return [
        CheckMessageStage(bot),
        ResolvePrefixesStage(bot),
        MatchPrefixStage(),
        CreateContextStage(bot),
        BeforeExecutedStage(bot),
        EnqueueStage(bot),
    ]


class MessageIntake:
    """Runs intake stages in order with per-stage fault isolation."""

    def __init__(
        self,
        stages: Sequence[IntakeStage],
        dispose_context: Callable[[ExecutionContext], Awaitable[None]],
        log: logging.Logger | None = None,
    ):
        """Initialize the intake driver.

        Args:
            stages: Stages to run, in order.
            dispose_context: Called for a context that was created but never
                enqueued because a later stage aborted or failed.
            log: Logger for stage faults (default: this module's logger).
        """
        self.stages = list(stages)
        self._dispose_context = dispose_context
        self._logger = log or logger

    async def process(self, state: IntakeState) -> bool:
        """Run every stage until one aborts or fails.

        Returns:
            True if every stage continued (the invocation was handed off).
        """
        completed = True
        for stage in self.stages:
            try:
                outcome = await stage.run(state)
            except Exception as e:
                self._logger.error(f"An exception occurred while {stage.description}: {e}", exc_info=True)
                completed = False
                break
            if outcome is StageOutcome.ABORT:
                self._logger.debug(f"Intake stopped at stage '{stage.name}' for message {state.message.id}")
                completed = False
                break

        if not completed and state.context is not None and not state.enqueued:
            await self._dispose_context(state.context)
        return completed
