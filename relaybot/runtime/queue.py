"""Serialized FIFO execution queue for command invocations."""

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

I = TypeVar("I")
C = TypeVar("C")

QueueCallback = Callable[[I, C], Coroutine[Any, Any, Any]]


class QueueFullError(Exception):
    """Raised by post() when a bounded queue has no room."""


@dataclass
class QueuedExecution(Generic[I, C]):
    """An item waiting in the queue."""

    input: I
    context: C
    callback: "QueueCallback[I, C]"


class CommandQueue(Generic[I, C]):
    """Single-consumer queue that runs callbacks one at a time in post order.

    ``post`` only appends, so it never blocks the caller on execution. One
    worker task pops the head and awaits its callback to completion before
    taking the next item.
    """

    def __init__(self, max_backlog: int | None = None, name: str = "commands"):
        """Initialize the queue.

        Args:
            max_backlog: Max pending items (None = unbounded). Posting to a
                full queue raises QueueFullError.
            name: Name used in logs and stats.
        """
        if max_backlog is not None and max_backlog < 1:
            raise ValueError("max_backlog must be at least 1")
        self.name = name
        self.max_backlog = max_backlog
        self._items: deque[QueuedExecution[I, C]] = deque()
        self._item_available = asyncio.Event()
        self._idle = asyncio.Event()
        self._idle.set()
        self._active = False
        self._processed = 0
        self._worker: asyncio.Task[None] | None = None
        self._stopping = False

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def __len__(self) -> int:
        return len(self._items)

    def post(self, input: I, context: C, callback: "QueueCallback[I, C]") -> None:
        """Append an execution to the tail of the queue.

        Raises:
            QueueFullError: If the queue is bounded and full.
        """
        if self.max_backlog is not None and len(self._items) >= self.max_backlog:
            raise QueueFullError(
                f"Queue '{self.name}' is full ({self.max_backlog} pending executions)"
            )
        self._items.append(QueuedExecution(input, context, callback))
        self._idle.clear()
        self._item_available.set()

    def start(self) -> None:
        """Start the worker task on the running loop."""
        if self.is_running:
            return
        self._stopping = False
        self._worker = asyncio.create_task(self._process(), name=f"queue:{self.name}")
        logger.debug(f"Queue '{self.name}' started")

    async def stop(self) -> None:
        """Stop the worker once the running callback, if any, has finished.

        The running callback is never cancelled. Pending items stay queued;
        see drain().
        """
        if self._worker is None:
            return
        self._stopping = True
        self._item_available.set()
        if self._worker is asyncio.current_task():
            # Called from a queued callback; the worker exits after it returns
            return
        await self._worker
        self._worker = None
        if not self._items:
            self._idle.set()
        logger.debug(f"Queue '{self.name}' stopped")

    def drain(self) -> list[QueuedExecution[I, C]]:
        """Remove and return every pending item."""
        pending = list(self._items)
        self._items.clear()
        self._item_available.clear()
        if not self._active:
            self._idle.set()
        return pending

    async def join(self) -> None:
        """Wait until the queue is empty and no callback is running."""
        await self._idle.wait()

    async def _process(self) -> None:
        while not self._stopping:
            if not self._items:
                self._item_available.clear()
                if not self._active:
                    self._idle.set()
                await self._item_available.wait()
                continue

            item = self._items.popleft()
            self._active = True
            try:
                await item.callback(item.input, item.context)
            except Exception as e:
                logger.error(
                    f"An exception occurred while executing a queued item in '{self.name}': {e}",
                    exc_info=True,
                )
            finally:
                self._active = False
                self._processed += 1

    def get_stats(self) -> dict[str, Any]:
        """Get current queue statistics."""
        return {
            "name": self.name,
            "queued": len(self._items),
            "active": 1 if self._active else 0,
            "processed": self._processed,
            "max_backlog": self.max_backlog,
            "running": self.is_running,
        }
