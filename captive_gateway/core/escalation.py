"""Turn channel failures into a process-wide shutdown."""

import logging

from fastapi import status
from fastapi.responses import JSONResponse

from captive_gateway.core.errors import ErrorKind
from captive_gateway.services.shutdown import ShutdownContext, ShutdownSignal

logger = logging.getLogger(__name__)


def escalate(shutdown: ShutdownContext, error: BaseException, kind: ErrorKind) -> JSONResponse:
    """Signal shutdown for a fatal failure and build the client's 500 response.

    The response carries only the classification, never the error text.
    """
    logger.error("%s: %r", kind.description, error)
    shutdown.fail(ShutdownSignal(kind=kind, error=error))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": kind.description},
    )
