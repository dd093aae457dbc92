"""Request/response logging middleware for FastAPI."""

import logging
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request and its final status under a per-request id."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        logger.info("REQ (%s): %s %s", request_id, request.method, request.url)

        response = await call_next(request)

        logger.info(
            "RES (%s): %s %s (%d)",
            request_id,
            request.method,
            request.url,
            response.status_code,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
