from dataclasses import dataclass

from fastapi import Request

from captive_gateway.core.params import collect_params, require_str
from captive_gateway.services.state import RequestState


def get_request_state(request: Request) -> RequestState:
    """Return the shared state injected into the app at construction."""
    return request.app.state.request_state


@dataclass(frozen=True)
class ConnectParams:
    ssid: str
    identity: str
    passphrase: str


async def get_connect_params(request: Request) -> ConnectParams:
    """Extract the required connect parameters before any shared state is touched."""
    params = await collect_params(request)
    return ConnectParams(
        ssid=require_str(params, "ssid"),
        identity=require_str(params, "identity"),
        passphrase=require_str(params, "passphrase"),
    )
