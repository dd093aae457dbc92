"""Shared state handed to every request handler.

The controller channel pair is a single serial resource. Handlers reach
it only through RequestState.acquire(), which holds one lock for the
whole round trip so commands from concurrent requests never interleave.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from ipaddress import IPv4Address

from captive_gateway.core.errors import PortalStopping
from captive_gateway.services.bridge import ControllerBridge
from captive_gateway.services.commands import Command, ControllerResponse
from captive_gateway.services.shutdown import ShutdownContext


class ControllerSession:
    """Access to the controller granted while the state lock is held."""

    def __init__(self, bridge: ControllerBridge) -> None:
        self._bridge = bridge
        self._active = True

    def close(self) -> None:
        self._active = False

    def call(self, command: Command) -> ControllerResponse:
        """Raises RuntimeError once the lock that granted this session is released."""
        if not self._active:
            raise RuntimeError("Controller session used after the state lock was released")
        return self._bridge.call(command)


class RequestState:
    def __init__(
        self,
        gateway: IPv4Address,
        bridge: ControllerBridge,
        shutdown: ShutdownContext,
    ) -> None:
        self._gateway = gateway
        self._bridge = bridge
        self._lock = threading.Lock()
        self.shutdown = shutdown

    @property
    def gateway(self) -> IPv4Address:
        # Immutable after construction, safe to read without the lock
        return self._gateway

    @contextmanager
    def acquire(self) -> Iterator[ControllerSession]:
        """Hold the state lock for one controller round trip.

        Raises PortalStopping once shutdown has been signalled.
        """
        with self._lock:
            if self.shutdown.is_set:
                raise PortalStopping()
            session = ControllerSession(self._bridge)
            try:
                yield session
            finally:
                session.close()
