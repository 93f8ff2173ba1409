"""Console channel adapter reading messages from a text stream.

Each input line becomes one user message in a single console channel.
Replies are written to the output stream. Used by the CLI to drive the
dispatch pipeline locally.
"""

import asyncio
import logging
import sys
from typing import Any, TextIO

from relaybot.channels.base import ChannelAdapter, MessageCallback
from relaybot.model.message import Author, InboundMessage

logger = logging.getLogger(__name__)


class ConsoleChannel(ChannelAdapter):
    """Terminal channel adapter."""

    name = "console"

    def __init__(
        self,
        input_stream: TextIO | None = None,
        output_stream: TextIO | None = None,
        channel_id: str = "console",
        user_name: str = "console",
    ):
        """Initialize the console channel.

        Args:
            input_stream: Stream to read lines from (default: stdin).
            output_stream: Stream replies are written to (default: stdout).
            channel_id: Channel ID assigned to every message.
            user_name: Author name assigned to every message.
        """
        self._input = input_stream or sys.stdin
        self._output = output_stream or sys.stdout
        self.channel_id = channel_id
        self.user_name = user_name
        self._message_callback: MessageCallback | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._counter = 0
        self._closed = asyncio.Event()

    def on_message(self, callback: MessageCallback) -> None:
        """Register callback for incoming messages."""
        self._message_callback = callback

    async def start(self) -> None:
        """Start reading lines in the background."""
        self._reader_task = asyncio.create_task(self._read_loop())
        logger.info("Console channel started")

    async def stop(self) -> None:
        """Stop reading input."""
        if self._reader_task:
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
            self._reader_task = None
            logger.info("Console channel stopped")

    async def send_message(self, channel_id: str, content: str, **kwargs: Any) -> None:
        """Write a reply to the output stream."""
        self._output.write(f"[{channel_id}] {content}\n")
        self._output.flush()

    async def wait_closed(self) -> None:
        """Wait until the input stream reaches EOF."""
        await self._closed.wait()

    def build_message(self, line: str) -> InboundMessage:
        """Convert one input line to an InboundMessage."""
        self._counter += 1
        return InboundMessage(
            id=str(self._counter),
            channel_id=self.channel_id,
            author=Author(id=self.user_name, name=self.user_name),
            content=line.rstrip("\r\n"),
        )

    async def _read_loop(self) -> None:
        while True:
            line = await asyncio.to_thread(self._input.readline)
            if not line:
                logger.info("Console input closed")
                self._closed.set()
                return
            if not line.strip():
                continue
            await self.deliver(line)

    async def deliver(self, line: str) -> None:
        """Deliver one line to the registered callback and wait for intake to finish."""
        if self._message_callback is None:
            logger.warning("Console message received before a callback was registered")
            return
        await self._message_callback(self.build_message(line), self)
