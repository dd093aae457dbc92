from captive_gateway.schemas.common import DetailResponse, HealthResponse
from captive_gateway.schemas.network import NETWORK_LIST, NetworkSchema

__all__ = [
    "DetailResponse",
    "HealthResponse",
    "NETWORK_LIST",
    "NetworkSchema",
]
