"""Tests for the serialized command queue."""

import asyncio

import pytest

from relaybot.runtime.queue import CommandQueue, QueueFullError


@pytest.mark.asyncio
async def test_items_run_one_at_a_time_in_post_order() -> None:
    """A's callback fully completes before B's begins."""
    queue: CommandQueue[str, None] = CommandQueue()
    events: list[str] = []

    async def callback(item: str, context: None) -> None:
        events.append(f"start:{item}")
        await asyncio.sleep(0.01)
        events.append(f"end:{item}")

    queue.post("A", None, callback)
    queue.post("B", None, callback)
    queue.post("C", None, callback)
    queue.start()
    await asyncio.wait_for(queue.join(), timeout=2)
    await queue.stop()

    assert events == ["start:A", "end:A", "start:B", "end:B", "start:C", "end:C"]


@pytest.mark.asyncio
async def test_post_does_not_run_callback_inline() -> None:
    queue: CommandQueue[str, None] = CommandQueue()
    ran: list[str] = []

    async def callback(item: str, context: None) -> None:
        ran.append(item)

    queue.start()
    queue.post("A", None, callback)
    assert ran == []

    await asyncio.wait_for(queue.join(), timeout=2)
    await queue.stop()
    assert ran == ["A"]


@pytest.mark.asyncio
async def test_failing_callback_does_not_stop_worker(caplog: pytest.LogCaptureFixture) -> None:
    queue: CommandQueue[str, None] = CommandQueue()
    ran: list[str] = []

    async def callback(item: str, context: None) -> None:
        if item == "bad":
            raise RuntimeError("boom")
        ran.append(item)

    queue.start()
    queue.post("bad", None, callback)
    queue.post("good", None, callback)
    await asyncio.wait_for(queue.join(), timeout=2)
    await queue.stop()

    assert ran == ["good"]
    assert any("boom" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_concurrent_sources_keep_their_own_order() -> None:
    queue: CommandQueue[str, None] = CommandQueue()
    ran: list[str] = []

    async def callback(item: str, context: None) -> None:
        await asyncio.sleep(0)
        ran.append(item)

    async def source(name: str) -> None:
        for i in range(5):
            queue.post(f"{name}{i}", None, callback)
            await asyncio.sleep(0)

    queue.start()
    await asyncio.gather(source("a"), source("b"))
    await asyncio.wait_for(queue.join(), timeout=2)
    await queue.stop()

    assert [item for item in ran if item.startswith("a")] == [f"a{i}" for i in range(5)]
    assert [item for item in ran if item.startswith("b")] == [f"b{i}" for i in range(5)]


@pytest.mark.asyncio
async def test_bounded_queue_rejects_overflow() -> None:
    queue: CommandQueue[str, None] = CommandQueue(max_backlog=2)

    async def callback(item: str, context: None) -> None:
        pass

    queue.post("A", None, callback)
    queue.post("B", None, callback)
    with pytest.raises(QueueFullError):
        queue.post("C", None, callback)

    assert len(queue) == 2


def test_invalid_backlog() -> None:
    with pytest.raises(ValueError):
        CommandQueue(max_backlog=0)


@pytest.mark.asyncio
async def test_drain_returns_pending_items() -> None:
    queue: CommandQueue[str, str] = CommandQueue()

    async def callback(item: str, context: str) -> None:
        pass

    queue.post("A", "ctx-a", callback)
    queue.post("B", "ctx-b", callback)

    pending = queue.drain()

    assert [(item.input, item.context) for item in pending] == [("A", "ctx-a"), ("B", "ctx-b")]
    assert len(queue) == 0
    await asyncio.wait_for(queue.join(), timeout=1)


@pytest.mark.asyncio
async def test_stats() -> None:
    queue: CommandQueue[str, None] = CommandQueue(max_backlog=5, name="main")

    async def callback(item: str, context: None) -> None:
        pass

    queue.post("A", None, callback)
    assert queue.get_stats() == {
        "name": "main",
        "queued": 1,
        "active": 0,
        "processed": 0,
        "max_backlog": 5,
        "running": False,
    }

    queue.start()
    await asyncio.wait_for(queue.join(), timeout=2)
    stats = queue.get_stats()
    await queue.stop()

    assert stats["processed"] == 1
    assert stats["queued"] == 0
    assert stats["running"] is True


@pytest.mark.asyncio
async def test_stop_lets_running_callback_finish() -> None:
    """stop() waits for the running callback instead of cancelling it."""
    queue: CommandQueue[str, None] = CommandQueue()
    started = asyncio.Event()
    finished: list[str] = []

    async def callback(item: str, context: None) -> None:
        started.set()
        await asyncio.sleep(0.05)
        finished.append(item)

    queue.post("A", None, callback)
    queue.post("B", None, callback)
    queue.start()
    await asyncio.wait_for(started.wait(), timeout=2)

    await asyncio.wait_for(queue.stop(), timeout=2)

    assert finished == ["A"]
    assert not queue.is_running
    assert [item.input for item in queue.drain()] == ["B"]


@pytest.mark.asyncio
async def test_queue_can_restart_after_stop() -> None:
    queue: CommandQueue[str, None] = CommandQueue()
    ran: list[str] = []

    async def callback(item: str, context: None) -> None:
        ran.append(item)

    queue.start()
    await queue.stop()
    queue.post("A", None, callback)
    queue.start()
    await asyncio.wait_for(queue.join(), timeout=2)
    await queue.stop()

    assert ran == ["A"]
