"""Pytest configuration and fixtures for captive gateway tests."""

import threading
import time
from collections.abc import Callable, Generator
from ipaddress import IPv4Address

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from captive_gateway.core.config import Settings
from captive_gateway.main import create_app
from captive_gateway.services.bridge import ControllerBridge
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
from captive_gateway.services.shutdown import ShutdownContext
from captive_gateway.services.state import RequestState

GATEWAY = IPv4Address("192.168.42.1")

HOME_NETWORKS = (Network(ssid="Home", signal_strength=80, security="wpa2"),)


class StubController:
    """Background consumer that records commands and answers from a script.

    `reply` maps a command to its response; by default Activate is answered
    with the configured networks and Connect with an acknowledgement.
    """

    def __init__(
        self,
        commands: Channel[Command],
        responses: Channel[ControllerResponse],
        networks: tuple[Network, ...] = HOME_NETWORKS,
        reply: Callable[[Command], ControllerResponse] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.commands = commands
        self.responses = responses
        self.networks = networks
        self.reply = reply or self.default_reply
        self.delay = delay
        self.received: list[Command] = []
        self.overlaps = 0
        self._thread = threading.Thread(target=self.run, daemon=True)

    def default_reply(self, command: Command) -> ControllerResponse:
        if isinstance(command, Activate):
            return Networks(self.networks)
        if isinstance(command, Connect):
            return Connecting(command.ssid)
        raise TypeError(command)

    def start(self) -> "StubController":
        self._thread.start()
        return self

    def run(self) -> None:
        while True:
            try:
                command = self.commands.recv()
            except ChannelClosed:
                return
            self.received.append(command)
            if self.delay:
                time.sleep(self.delay)
            # Another command queued while this one is unanswered breaks serialization
            if self.commands.pending():
                self.overlaps += 1
            try:
                self.responses.send(self.reply(command))
            except ChannelClosed:
                return

    def stop(self) -> None:
        self.commands.close()
        self._thread.join(timeout=5)


@pytest.fixture
def commands() -> Channel[Command]:
    return Channel(name="commands")


@pytest.fixture
def responses() -> Channel[ControllerResponse]:
    return Channel(name="responses")


@pytest.fixture
def shutdown() -> ShutdownContext:
    return ShutdownContext()


@pytest.fixture
def request_state(commands, responses, shutdown) -> RequestState:
    return RequestState(GATEWAY, ControllerBridge(commands, responses), shutdown)


@pytest.fixture
def controller(commands, responses) -> Generator[StubController, None, None]:
    """Stub controller answering Activate with the 'Home' network."""
    stub = StubController(commands, responses).start()
    yield stub
    stub.stop()


@pytest.fixture
def ui_dir(tmp_path):
    """Minimal UI directory with an index page and one stylesheet."""
    (tmp_path / "index.html").write_text("<html>portal</html>")
    (tmp_path / "css").mkdir()
    (tmp_path / "css" / "portal.css").write_text("body {}")
    return tmp_path


@pytest.fixture
def settings(ui_dir) -> Settings:
    return Settings(_env_file=None, gateway=GATEWAY, ui_directory=str(ui_dir))


@pytest.fixture
def app(request_state, settings) -> FastAPI:
    return create_app(request_state, settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Test client addressing the gateway directly, redirects not followed."""
    with TestClient(app, base_url=f"http://{GATEWAY}", follow_redirects=False) as c:
        yield c


@pytest.fixture
def make_controller(commands, responses) -> Generator[Callable[..., StubController], None, None]:
    """Factory for stub controllers with custom replies; stopped at teardown."""
    started: list[StubController] = []

    def factory(**kwargs) -> StubController:
        stub = StubController(commands, responses, **kwargs).start()
        started.append(stub)
        return stub

    yield factory
    for stub in started:
        stub.stop()


class FakeBackend:
    """In-memory network backend recording every call."""

    def __init__(self, networks=HOME_NETWORKS, hotspot_ok=True, connect_ok=True) -> None:
        self.networks = list(networks)
        self.hotspot_ok = hotspot_ok
        self.connect_ok = connect_ok
        self.calls: list[tuple] = []

    def scan(self) -> list[Network]:
        self.calls.append(("scan",))
        return list(self.networks)

    def start_hotspot(self, ssid: str, passphrase: str) -> bool:
        self.calls.append(("start_hotspot", ssid, passphrase))
        return self.hotspot_ok

    def stop_hotspot(self) -> None:
        self.calls.append(("stop_hotspot",))

    def connect(self, ssid: str, identity: str, passphrase: str) -> bool:
        self.calls.append(("connect", ssid, identity, passphrase))
        if isinstance(self.connect_ok, Exception):
            raise self.connect_ok
        return self.connect_ok

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()
