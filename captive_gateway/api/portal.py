"""Portal API: list visible networks and request a connection."""

import logging

from fastapi import APIRouter, Depends, Response, status

from captive_gateway.api.deps import ConnectParams, get_connect_params, get_request_state
from captive_gateway.core.errors import BridgeError, ErrorKind
from captive_gateway.core.escalation import escalate
from captive_gateway.schemas.common import DetailResponse, HealthResponse
from captive_gateway.schemas.network import NETWORK_LIST
from captive_gateway.services.commands import Activate, Connect
from captive_gateway.services.state import RequestState

logger = logging.getLogger(__name__)
router = APIRouter()

ERROR_RESPONSES = {
    500: {"model": DetailResponse, "description": "Bad parameters or controller failure"},
    503: {"model": DetailResponse, "description": "Portal is shutting down"},
}


@router.get("/networks", responses=ERROR_RESPONSES)
def list_networks(state: RequestState = Depends(get_request_state)) -> Response:
    """
    Return the access points seen by the network controller.

    Response body is a JSON array of {ssid, signalStrength, security},
    in the order the controller reported them.
    """
    logger.info("User connected to the captive portal")

    with state.acquire() as controller:
        try:
            response = controller.call(Activate())
        except BridgeError as e:
            return escalate(state.shutdown, e, e.kind)

        try:
            networks = NETWORK_LIST.validate_python(list(response.networks), from_attributes=True)
            body = NETWORK_LIST.dump_json(networks, by_alias=True)
        except ValueError as e:
            return escalate(state.shutdown, e, ErrorKind.RESPONSE_SERIALIZE_FAILED)

    return Response(content=body, media_type="application/json")


@router.post("/connect", responses=ERROR_RESPONSES)
def connect(
    params: ConnectParams = Depends(get_connect_params),
    state: RequestState = Depends(get_request_state),
) -> Response:
    """
    Ask the network controller to join a network.

    Missing or non-string parameters fail with 500 without reaching
    the controller.
    """
    logger.info("Incoming `connect` to access point `%s` request", params.ssid)

    command = Connect(ssid=params.ssid, identity=params.identity, passphrase=params.passphrase)
    with state.acquire() as controller:
        try:
            controller.call(command)
        except BridgeError as e:
            return escalate(state.shutdown, e, e.kind)

    return Response(status_code=status.HTTP_200_OK)


@router.get("/health", response_model=HealthResponse)
def health_check(state: RequestState = Depends(get_request_state)) -> HealthResponse:
    """Liveness probe for the process supervisor."""
    return HealthResponse(status="stopping" if state.shutdown.is_set else "ok")
