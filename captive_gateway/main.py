import logging
from pathlib import Path

from fastapi import FastAPI, status
from fastapi import Request as FastAPIRequest
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from captive_gateway.api import api_router
from captive_gateway.api.ui import mount_ui
from captive_gateway.core.config import Settings, get_settings
from captive_gateway.core.errors import ParamError, PortalStopping
from captive_gateway.core.redirect import CaptiveRedirectMiddleware
from captive_gateway.core.request_logging import RequestLoggingMiddleware
from captive_gateway.services.state import RequestState

logger = logging.getLogger(__name__)

# Explicit CORS methods for non-wildcard origins - must include every HTTP method used by the API
CORS_ALLOW_METHODS = ["GET", "POST", "OPTIONS"]


async def param_error_handler(request: FastAPIRequest, exc: ParamError) -> JSONResponse:
    """Caller error: answered locally, never escalated."""
    logger.error("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


async def portal_stopping_handler(request: FastAPIRequest, exc: PortalStopping) -> JSONResponse:
    logger.warning("Refusing %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


def create_app(request_state: RequestState, settings: Settings | None = None) -> FastAPI:
    """Build the portal application around an injected request state."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Captive Portal Gateway",
        description="Wireless network selection for unconfigured devices",
        version="0.1.0",
        # Disable API docs in production
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
        openapi_url=None if settings.is_production else "/openapi.json",
    )
    app.state.request_state = request_state

    app.add_exception_handler(ParamError, param_error_handler)
    app.add_exception_handler(PortalStopping, portal_stopping_handler)

    app.include_router(api_router)
    mount_ui(app, Path(settings.resolved_ui_directory))

    # Redirect enforcement is added first so it runs innermost, after every
    # failure-producing stage; request logging then records the final status.
    app.add_middleware(CaptiveRedirectMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # CORS
    if settings.cors_origins.strip() == "*":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        origins = [origin.strip() for origin in settings.cors_origins.split(",")]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=CORS_ALLOW_METHODS,
            allow_headers=["Content-Type"],
        )

    return app
