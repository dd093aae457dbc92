"""Messages exchanged with the network controller.

Commands flow from request handlers to the controller; each command is
answered by exactly one response of the type listed in
EXPECTED_RESPONSES.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Network:
    """A wireless network visible to the device."""

    ssid: str
    signal_strength: int
    security: str


class Command:
    """Base class for commands sent to the network controller."""

    @property
    def name(self) -> str:
        return type(self).__name__.lower()


@dataclass(frozen=True)
class Activate(Command):
    """Request the current list of visible networks."""


@dataclass(frozen=True)
class Connect(Command):
    """Join the given network with the supplied credentials."""

    ssid: str
    identity: str
    passphrase: str = field(repr=False)


class ControllerResponse:
    """Base class for controller replies."""


@dataclass(frozen=True)
class Networks(ControllerResponse):
    networks: tuple[Network, ...] = ()


@dataclass(frozen=True)
class Connecting(ControllerResponse):
    """Acknowledges a Connect command before the controller acts on it."""

    ssid: str


EXPECTED_RESPONSES: dict[type[Command], type[ControllerResponse]] = {
    Activate: Networks,
    Connect: Connecting,
}


def expected_response(command: Command) -> type[ControllerResponse]:
    """Return the response type a command must be answered with."""
    try:
        return EXPECTED_RESPONSES[type(command)]
    except KeyError:
        raise TypeError(f"Unsupported network command: {command!r}") from None
