"""Per-invocation execution contexts."""

import logging
import uuid
from collections.abc import Awaitable, Callable, Mapping
from contextlib import AbstractAsyncContextManager, AsyncExitStack
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from relaybot.model.message import InboundMessage

if TYPE_CHECKING:
    from relaybot.channels.base import ChannelAdapter
    from relaybot.commands.prefixes import Prefix
    from relaybot.runtime.bot import CommandBot

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT = "default"
GUILD_CONTEXT = "guild"

T = TypeVar("T")


class ExecutionContext:
    """Correlates one command invocation with its source and shared services.

    A context owns the resources registered on it and must be disposed
    exactly once when the invocation ends. ``dispose`` is idempotent.

    Subclasses declare a ``kind`` tag. ``kinds`` holds the tags of the class
    and all of its context bases, and is what command handlers are checked
    against at dispatch time.
    """

    kind: ClassVar[str] = DEFAULT_CONTEXT
    kinds: ClassVar[frozenset[str]] = frozenset({DEFAULT_CONTEXT})

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.kinds = frozenset(
            klass.__dict__["kind"] for klass in cls.__mro__ if "kind" in klass.__dict__
        )

    def __init__(
        self,
        bot: "CommandBot",
        prefix: "Prefix",
        message: InboundMessage,
        channel: "ChannelAdapter",
        services: Mapping[str, Any] | None = None,
    ):
        self.bot = bot
        self.prefix = prefix
        self.message = message
        self.channel = channel
        self.services: Mapping[str, Any] = services or {}
        self.correlation_id = uuid.uuid4().hex
        self._resources = AsyncExitStack()
        self._disposed = False

    @property
    def author(self):
        return self.message.author

    @property
    def channel_id(self) -> str:
        return self.message.channel_id

    @property
    def disposed(self) -> bool:
        return self._disposed

    def provides(self, kind: str) -> bool:
        """Check whether this context satisfies handlers requiring ``kind``."""
        return kind in self.kinds

    def get_service(self, name: str) -> Any:
        """Look up a shared bot service by name.

        Raises:
            KeyError: If no such service is registered.
        """
        return self.services[name]

    async def reply(self, content: str, **kwargs: Any) -> None:
        """Send a message to the channel the invocation came from."""
        await self.channel.send_message(self.channel_id, content, **kwargs)

    def add_cleanup(self, callback: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> None:
        """Register an async callback to run when the context is disposed.

        Callbacks run in reverse registration order.
        """
        self._resources.push_async_callback(callback, *args, **kwargs)

    async def enter_resource(self, resource: AbstractAsyncContextManager[T]) -> T:
        """Enter an async context manager owned by this context until disposal."""
        return await self._resources.enter_async_context(resource)

    async def dispose(self) -> None:
        """Release every resource owned by the context.

        Only the first call does any work. Errors raised by cleanup callbacks
        propagate to the caller.
        """
        if self._disposed:
            return
        self._disposed = True
        await self._resources.aclose()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message.id!r}, "
            f"channel={self.channel_id!r}, correlation_id={self.correlation_id!r})"
        )


class GuildExecutionContext(ExecutionContext):
    """Context for messages sent inside a guild."""

    kind: ClassVar[str] = GUILD_CONTEXT

    @property
    def guild_id(self) -> str:
        # Only created for messages that carry a guild ID
        return self.message.guild_id  # type: ignore[return-value]
