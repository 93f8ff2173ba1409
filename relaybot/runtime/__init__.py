"""Runtime services for relaybot.

This package provides message intake, the execution queue, the command bot,
and shutdown signalling.
"""

from relaybot.runtime.bot import CommandBot, is_cancellation
from relaybot.runtime.diagnostics import describe_context_mismatch, format_failure_reason
from relaybot.runtime.intake import (
    BeforeExecutedStage,
    CheckMessageStage,
    CreateContextStage,
    EnqueueStage,
    IntakeStage,
    IntakeState,
    MatchPrefixStage,
    MessageIntake,
    ResolvePrefixesStage,
    StageOutcome,
    default_stages,
)
from relaybot.runtime.queue import CommandQueue, QueuedExecution, QueueFullError
from relaybot.runtime.shutdown import OperationCanceledError, ShutdownSignal

__all__ = [
    "BeforeExecutedStage",
    "CheckMessageStage",
    "CommandBot",
    "CommandQueue",
    "CreateContextStage",
    "EnqueueStage",
    "IntakeStage",
    "IntakeState",
    "MatchPrefixStage",
    "MessageIntake",
    "OperationCanceledError",
    "QueueFullError",
    "QueuedExecution",
    "ResolvePrefixesStage",
    "ShutdownSignal",
    "StageOutcome",
    "default_stages",
    "describe_context_mismatch",
    "format_failure_reason",
    "is_cancellation",
]
