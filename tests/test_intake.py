"""Tests for message intake (the gate chain before the execution queue)."""

import logging
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from relaybot.channels.base import ChannelAdapter, MessageCallback
from relaybot.commands.context import ExecutionContext, GuildExecutionContext
from relaybot.commands.prefixes import Prefix, PrefixProvider, StringPrefix
from relaybot.core.config import Config, QueueConfig
from relaybot.model.message import Author, InboundMessage, MessageKind
from relaybot.runtime.bot import CommandBot
from relaybot.runtime.intake import IntakeStage, IntakeState, MessageIntake, StageOutcome


class FakeChannel(ChannelAdapter):
    name = "fake"

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def send_message(self, channel_id: str, content: str, **kwargs: Any) -> None:
        self.sent.append((channel_id, content))

    def on_message(self, callback: MessageCallback) -> None:
        pass


class RecordingBot(CommandBot):
    """Bot whose hooks can be toggled and whose contexts record their release."""

    def __init__(self, *args: Any, allow: bool = True, accept: bool = True, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.allow = allow
        self.accept = accept
        self.created: list[tuple[ExecutionContext, AsyncMock]] = []

    async def check_message(self, message: InboundMessage) -> bool:
        return self.allow and await super().check_message(message)

    def create_context(self, prefix: Prefix, message: InboundMessage, channel: ChannelAdapter) -> ExecutionContext:
        context = super().create_context(prefix, message, channel)
        release = AsyncMock()
        context.add_cleanup(release)
        self.created.append((context, release))
        return context

    async def before_executed(self, context: ExecutionContext) -> bool:
        return self.accept


class StaticPrefixes(PrefixProvider):
    def __init__(self, prefixes: list[Prefix | None] | None) -> None:
        self.prefixes = prefixes
        self.calls = 0

    async def get_prefixes(self, message: InboundMessage) -> list[Prefix | None] | None:
        self.calls += 1
        return self.prefixes


def make_message(
    content: str,
    is_bot: bool = False,
    kind: MessageKind = MessageKind.USER,
    guild_id: str | None = None,
) -> InboundMessage:
    return InboundMessage(
        id="m1",
        channel_id="c1",
        author=Author(id="u1", name="user", is_bot=is_bot),
        content=content,
        kind=kind,
        guild_id=guild_id,
    )


def error_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.levelno >= logging.ERROR]


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.mark.asyncio
async def test_rejected_precheck_skips_prefix_provider(channel: FakeChannel) -> None:
    provider = StaticPrefixes([StringPrefix("!")])
    bot = RecordingBot(prefix_provider=provider, allow=False)

    await bot.on_message_event(make_message("!ping"), channel)

    assert provider.calls == 0
    assert bot.created == []
    assert len(bot.queue) == 0


@pytest.mark.asyncio
async def test_bot_authors_are_ignored_by_default(channel: FakeChannel) -> None:
    provider = StaticPrefixes([StringPrefix("!")])
    bot = RecordingBot(prefix_provider=provider)

    await bot.on_message_event(make_message("!ping", is_bot=True), channel)

    assert provider.calls == 0


@pytest.mark.asyncio
async def test_system_messages_have_no_side_effects(channel: FakeChannel) -> None:
    provider = StaticPrefixes([StringPrefix("!")])
    bot = RecordingBot(prefix_provider=provider)
    bot.check_message = AsyncMock(return_value=True)  # type: ignore[method-assign]

    await bot.on_message_event(make_message("!ping", kind=MessageKind.SYSTEM), channel)

    bot.check_message.assert_not_awaited()
    assert provider.calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("prefixes", [None, []])
async def test_missing_prefixes_drop_silently(
    channel: FakeChannel, caplog: pytest.LogCaptureFixture, prefixes: list[Prefix] | None
) -> None:
    bot = RecordingBot(prefix_provider=StaticPrefixes(prefixes))

    await bot.on_message_event(make_message("!ping"), channel)

    assert bot.created == []
    assert error_records(caplog) == []


@pytest.mark.asyncio
async def test_no_matching_prefix_creates_no_context(channel: FakeChannel) -> None:
    bot = RecordingBot(prefix_provider=StaticPrefixes([StringPrefix("!"), None, StringPrefix("?")]))

    await bot.on_message_event(make_message("hello there"), channel)

    assert bot.created == []
    assert len(bot.queue) == 0


@pytest.mark.asyncio
async def test_accepted_message_is_queued_with_remainder(channel: FakeChannel) -> None:
    bot = RecordingBot(prefix_provider=StaticPrefixes([StringPrefix("!"), StringPrefix("?")]))

    await bot.on_message_event(make_message("?ping now"), channel)

    pending = bot.queue.drain()
    assert len(pending) == 1
    assert pending[0].input == "ping now"
    context = pending[0].context
    assert context is bot.created[0][0]
    assert context.prefix == StringPrefix("?")
    assert context.channel is channel
    assert not context.disposed


@pytest.mark.asyncio
async def test_guild_messages_get_guild_context(channel: FakeChannel) -> None:
    bot = RecordingBot(prefix_provider=StaticPrefixes([StringPrefix("!")]))

    await bot.on_message_event(make_message("!ping", guild_id="g1"), channel)

    context = bot.queue.drain()[0].context
    assert isinstance(context, GuildExecutionContext)
    assert context.guild_id == "g1"


@pytest.mark.asyncio
async def test_prefix_provider_failure_is_logged_and_dropped(
    channel: FakeChannel, caplog: pytest.LogCaptureFixture
) -> None:
    provider = AsyncMock(spec=PrefixProvider)
    provider.get_prefixes.side_effect = RuntimeError("prefix store down")
    bot = RecordingBot(prefix_provider=provider)

    await bot.on_message_event(make_message("!ping"), channel)

    errors = error_records(caplog)
    assert len(errors) == 1
    assert "getting the prefixes" in errors[0].getMessage()
    assert bot.created == []


@pytest.mark.asyncio
async def test_context_factory_failure_is_logged(channel: FakeChannel, caplog: pytest.LogCaptureFixture) -> None:
    bot = RecordingBot(prefix_provider=StaticPrefixes([StringPrefix("!")]))
    bot.create_context = MagicMock(side_effect=ValueError("bad factory"))  # type: ignore[method-assign]

    await bot.on_message_event(make_message("!ping"), channel)

    errors = error_records(caplog)
    assert len(errors) == 1
    assert "creating the execution context" in errors[0].getMessage()
    assert len(bot.queue) == 0


@pytest.mark.asyncio
async def test_rejected_before_executed_disposes_context(channel: FakeChannel) -> None:
    bot = RecordingBot(prefix_provider=StaticPrefixes([StringPrefix("!")]), accept=False)

    await bot.on_message_event(make_message("!ping"), channel)

    context, release = bot.created[0]
    assert context.disposed
    release.assert_awaited_once()
    assert len(bot.queue) == 0


@pytest.mark.asyncio
async def test_failing_before_executed_disposes_context(
    channel: FakeChannel, caplog: pytest.LogCaptureFixture
) -> None:
    bot = RecordingBot(prefix_provider=StaticPrefixes([StringPrefix("!")]))
    bot.before_executed = AsyncMock(side_effect=RuntimeError("hook broke"))  # type: ignore[method-assign]

    await bot.on_message_event(make_message("!ping"), channel)

    _, release = bot.created[0]
    release.assert_awaited_once()
    errors = error_records(caplog)
    assert len(errors) == 1
    assert "before executed callback" in errors[0].getMessage()


@pytest.mark.asyncio
async def test_full_queue_rejects_and_disposes(channel: FakeChannel, caplog: pytest.LogCaptureFixture) -> None:
    config = Config(queue=QueueConfig(max_backlog=1))
    bot = RecordingBot(config, prefix_provider=StaticPrefixes([StringPrefix("!")]))

    await bot.on_message_event(make_message("!one"), channel)
    await bot.on_message_event(make_message("!two"), channel)

    (first, first_release), (second, second_release) = bot.created
    assert not first.disposed
    first_release.assert_not_awaited()
    second_release.assert_awaited_once()
    errors = error_records(caplog)
    assert len(errors) == 1
    assert "posting the execution to the command queue" in errors[0].getMessage()
    assert [item.input for item in bot.queue.drain()] == ["one"]


class RecordStage(IntakeStage):
    def __init__(self, name: str, log: list[str], outcome: StageOutcome = StageOutcome.CONTINUE) -> None:
        self.name = name
        self.description = f"running {name}"
        self.log = log
        self.outcome = outcome

    async def run(self, state: IntakeState) -> StageOutcome:
        self.log.append(self.name)
        return self.outcome


@pytest.mark.asyncio
async def test_intake_driver_stops_at_first_abort(channel: FakeChannel) -> None:
    log: list[str] = []
    dispose = AsyncMock()
    intake = MessageIntake(
        [RecordStage("a", log), RecordStage("b", log, StageOutcome.ABORT), RecordStage("c", log)],
        dispose,
    )

    completed = await intake.process(IntakeState(message=make_message("!x"), channel=channel))

    assert completed is False
    assert log == ["a", "b"]
    dispose.assert_not_awaited()


@pytest.mark.asyncio
async def test_intake_driver_completes(channel: FakeChannel) -> None:
    log: list[str] = []
    intake = MessageIntake([RecordStage("a", log), RecordStage("b", log)], AsyncMock())

    assert await intake.process(IntakeState(message=make_message("!x"), channel=channel)) is True
    assert log == ["a", "b"]
