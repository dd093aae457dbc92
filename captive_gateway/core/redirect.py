"""Captive portal redirect enforcement.

Any failed request that was not addressed to the gateway itself is
answered with a redirect to the gateway, which is what makes client
operating systems pop up the portal page.
"""

import logging
from ipaddress import IPv4Address
from urllib.parse import urlsplit

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)


def request_hostname(request: Request) -> str | None:
    """Return the hostname from the Host header without its port, if present."""
    host = request.headers.get("host")
    if not host:
        return None
    try:
        return urlsplit(f"//{host}").hostname
    except ValueError:
        return host


def should_redirect(failed: bool, hostname: str | None, gateway: IPv4Address) -> bool:
    """Decide whether a response must be replaced by a redirect to the gateway."""
    return failed and hostname is not None and hostname != str(gateway)


class CaptiveRedirectMiddleware(BaseHTTPMiddleware):
    """Redirect failed requests for foreign hosts to the portal.

    Must be the innermost middleware so it sees every failure response.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"detail": "Internal server error"},
            )

        gateway = request.app.state.request_state.gateway
        hostname = request_hostname(request)
        if should_redirect(response.status_code >= 400, hostname, gateway):
            logger.info("Redirecting request to %s to gateway: %s", hostname, gateway)
            return RedirectResponse(f"http://{gateway}/", status_code=status.HTTP_302_FOUND)

        return response
