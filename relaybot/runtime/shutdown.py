"""Process-wide shutdown signal."""

import threading


class OperationCanceledError(Exception):
    """Raised by work that stops early because shutdown was requested."""


class ShutdownSignal:
    """A readable, thread-safe cancellation flag.

    The flag is advisory: setting it does not cancel in-flight work. Commands
    may poll it, and failure reporting uses it to tell expected cancellation
    during shutdown apart from genuine errors.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def is_requested(self) -> bool:
        return self._event.is_set()

    def request(self) -> None:
        """Mark the process as shutting down."""
        self._event.set()

    def raise_if_requested(self) -> None:
        """Raise OperationCanceledError if shutdown has been requested."""
        if self._event.is_set():
            raise OperationCanceledError("Shutdown requested")
