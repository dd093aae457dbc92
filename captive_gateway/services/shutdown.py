"""Process-wide shutdown coordination.

Request handlers and the network controller record why the process has
to stop; the server run loop waits on the context and stops the
listener. Only the first signal is kept.
"""

import logging
import threading
from dataclasses import dataclass

from captive_gateway.core.errors import ErrorKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShutdownSignal:
    """A classified failure that ends the process."""

    kind: ErrorKind
    error: BaseException

    @property
    def description(self) -> str:
        return self.kind.description


class ShutdownContext:
    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._signal: ShutdownSignal | None = None

    @property
    def is_set(self) -> bool:
        return self._event.is_set()

    @property
    def signal(self) -> ShutdownSignal | None:
        """The failure that triggered shutdown, or None for a normal stop."""
        return self._signal

    @property
    def exit_code(self) -> int:
        return 1 if self._signal is not None else 0

    def fail(self, signal: ShutdownSignal) -> bool:
        """Record a fatal failure. Returns False if shutdown was already underway.

        Never blocks beyond a short critical section.
        """
        with self._lock:
            if self._event.is_set():
                logger.debug("Shutdown already in progress, ignoring %s", signal.kind.value)
                return False
            self._signal = signal
            self._event.set()
        logger.critical("%s: %s", signal.description, signal.error)
        return True

    def finish(self) -> bool:
        """Request a normal stop (e.g. the device joined a network)."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
        logger.info("Shutdown requested")
        return True

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)
