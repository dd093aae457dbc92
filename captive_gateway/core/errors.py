"""Error classification for the portal gateway.

Failures are classified by ErrorKind. Caller errors (bad request
parameters) are answered locally; every other kind means the network
controller can no longer be trusted and shuts the process down.
"""

from enum import Enum


class ErrorKind(str, Enum):
    PARAM_MISSING = "param_missing"
    PARAM_TYPE_MISMATCH = "param_type_mismatch"
    PARAMS_UNREADABLE = "params_unreadable"
    COMMAND_SEND_FAILED = "command_send_failed"
    RESPONSE_RECV_FAILED = "response_recv_failed"
    RESPONSE_SERIALIZE_FAILED = "response_serialize_failed"
    UNEXPECTED_RESPONSE = "unexpected_response"
    SERVER_BIND_FAILED = "server_bind_failed"
    HOTSPOT_START_FAILED = "hotspot_start_failed"
    NETWORK_CONTROLLER_FAILED = "network_controller_failed"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def is_fatal(self) -> bool:
        return self not in _LOCAL_KINDS


_DESCRIPTIONS = {
    ErrorKind.PARAM_MISSING: "Required request parameter missing",
    ErrorKind.PARAM_TYPE_MISMATCH: "Unexpected request parameter type",
    ErrorKind.PARAMS_UNREADABLE: "Getting request params failed",
    ErrorKind.COMMAND_SEND_FAILED: "Sending network command failed",
    ErrorKind.RESPONSE_RECV_FAILED: "Receiving network command response failed",
    ErrorKind.RESPONSE_SERIALIZE_FAILED: "Serializing access point list failed",
    ErrorKind.UNEXPECTED_RESPONSE: "Network controller sent an unexpected response",
    ErrorKind.SERVER_BIND_FAILED: "Starting HTTP server failed",
    ErrorKind.HOTSPOT_START_FAILED: "Creating the captive portal access point failed",
    ErrorKind.NETWORK_CONTROLLER_FAILED: "Network controller stopped unexpectedly",
}

_LOCAL_KINDS = frozenset(
    {ErrorKind.PARAM_MISSING, ErrorKind.PARAM_TYPE_MISMATCH, ErrorKind.PARAMS_UNREADABLE}
)


class GatewayError(Exception):
    """Base class for classified gateway failures."""

    kind: ErrorKind

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.kind.description)


class ParamError(GatewayError):
    """A request parameter was missing, mistyped, or unreadable."""

    def __init__(self, kind: ErrorKind, name: str | None = None) -> None:
        self.kind = kind
        self.name = name
        if kind == ErrorKind.PARAM_MISSING:
            message = f"'{name}' not found in request params"
        elif kind == ErrorKind.PARAM_TYPE_MISMATCH:
            message = f"Unexpected type for '{name}'"
        else:
            message = kind.description
        super().__init__(message)


class BridgeError(GatewayError):
    """Communication with the network controller broke down."""

    def __init__(self, command: object, message: str | None = None) -> None:
        self.command = command
        super().__init__(message)


class CommandSendFailed(BridgeError):
    kind = ErrorKind.COMMAND_SEND_FAILED


class ResponseRecvFailed(BridgeError):
    kind = ErrorKind.RESPONSE_RECV_FAILED


class UnexpectedResponse(BridgeError):
    kind = ErrorKind.UNEXPECTED_RESPONSE

    def __init__(self, command: object, response: object) -> None:
        self.response = response
        super().__init__(
            command,
            f"{type(response).__name__} is not a valid reply to {type(command).__name__}",
        )


class ServerBindFailed(GatewayError):
    kind = ErrorKind.SERVER_BIND_FAILED

    def __init__(self, address: str, reason: str) -> None:
        self.address = address
        super().__init__(f"Cannot start HTTP server on '{address}': {reason}")


class PortalStopping(GatewayError):
    """Raised when a request arrives after a shutdown has been signalled."""

    def __init__(self) -> None:
        super().__init__("Portal is shutting down")
