"""Network controller: the single consumer of portal commands.

Runs on its own thread, takes commands one at a time from the command
channel and answers each with exactly one response. Any unexpected
error signals shutdown and closes the response channel so the waiting
request escalates.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from captive_gateway.core.errors import ErrorKind, GatewayError
from captive_gateway.services.channel import Channel, ChannelClosed
from captive_gateway.services.commands import (
    Activate,
    Command,
    Connect,
    Connecting,
    ControllerResponse,
    Network,
    Networks,
)
from captive_gateway.services.shutdown import ShutdownContext, ShutdownSignal

logger = logging.getLogger(__name__)


class NetworkBackend(Protocol):
    def scan(self) -> list[Network]: ...

    def start_hotspot(self, ssid: str, passphrase: str) -> bool: ...

    def stop_hotspot(self) -> None: ...

    def connect(self, ssid: str, identity: str, passphrase: str) -> bool: ...


class HotspotStartFailed(GatewayError):
    kind = ErrorKind.HOTSPOT_START_FAILED


class NetworkController:
    def __init__(
        self,
        commands: Channel[Command],
        responses: Channel[ControllerResponse],
        shutdown: ShutdownContext,
        backend: NetworkBackend,
        ssid: str,
        passphrase: str = "",
    ) -> None:
        self._commands = commands
        self._responses = responses
        self._shutdown = shutdown
        self._backend = backend
        self._ssid = ssid
        self._passphrase = passphrase
        self._networks: tuple[Network, ...] = ()
        self._hotspot_active = False
        self._thread: threading.Thread | None = None

    @property
    def networks(self) -> tuple[Network, ...]:
        return self._networks

    @property
    def hotspot_active(self) -> bool:
        return self._hotspot_active

    def prepare(self) -> bool:
        """Scan networks, then bring up the portal hotspot.

        Scanning happens first because most adapters cannot scan while
        serving an access point. Returns False (and signals shutdown) if
        the hotspot cannot be started.
        """
        self._networks = tuple(self._backend.scan())
        logger.info("Found %d networks", len(self._networks))

        if not self._backend.start_hotspot(self._ssid, self._passphrase):
            self._shutdown.fail(
                ShutdownSignal(ErrorKind.HOTSPOT_START_FAILED, HotspotStartFailed())
            )
            return False
        self._hotspot_active = True
        return True

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run, name="network-controller", daemon=True)
        self._thread.start()
        return self._thread

    def run(self) -> None:
        """Serve commands until the command channel closes."""
        try:
            while True:
                try:
                    command = self._commands.recv()
                except ChannelClosed:
                    logger.info("Command channel closed, network controller stopping")
                    break
                self.handle(command)
        except Exception as e:
            logger.exception("Network controller failed")
            self._shutdown.fail(ShutdownSignal(ErrorKind.NETWORK_CONTROLLER_FAILED, e))
        finally:
            self._commands.close()
            self._responses.close()

    def handle(self, command: Command) -> None:
        logger.debug("Handling %r", command)
        if isinstance(command, Activate):
            self._responses.send(Networks(self._networks))
        elif isinstance(command, Connect):
            self._responses.send(Connecting(command.ssid))
            self._connect(command)
        else:
            raise TypeError(f"Unsupported network command: {command!r}")

    def _connect(self, command: Connect) -> None:
        if self._hotspot_active:
            self._backend.stop_hotspot()
            self._hotspot_active = False

        if self._backend.connect(command.ssid, command.identity, command.passphrase):
            logger.info("Internet connectivity established via %s", command.ssid)
            self._shutdown.finish()
            return

        logger.warning("Connection to %s failed, restarting portal hotspot", command.ssid)
        self._networks = tuple(self._backend.scan())
        if self._backend.start_hotspot(self._ssid, self._passphrase):
            self._hotspot_active = True
        else:
            self._shutdown.fail(
                ShutdownSignal(ErrorKind.HOTSPOT_START_FAILED, HotspotStartFailed())
            )

    def stop(self, timeout: float = 5.0) -> None:
        """Stop serving commands and tear down the hotspot."""
        self._commands.close()
        if self._thread is not None:
            self._thread.join(timeout)
        if self._hotspot_active:
            self._backend.stop_hotspot()
            self._hotspot_active = False
