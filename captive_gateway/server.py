"""HTTP listener lifecycle.

The listening socket is bound before uvicorn starts so a bind failure
can be classified and escalated like any other fatal error. A watcher
thread stops the server as soon as the shutdown context is set.
"""

import logging
import socket
import threading

import uvicorn
from fastapi import FastAPI

from captive_gateway.core.config import Settings
from captive_gateway.core.errors import ErrorKind, ServerBindFailed
from captive_gateway.services.shutdown import ShutdownContext, ShutdownSignal

logger = logging.getLogger(__name__)


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind a listening TCP socket. Raises ServerBindFailed."""
    address = f"{host}:{port}"
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise ServerBindFailed(address, str(e)) from e
    sock.set_inheritable(True)
    return sock


def _stop_on_shutdown(shutdown: ShutdownContext, server: uvicorn.Server) -> None:
    shutdown.wait()
    logger.info("Stopping HTTP server")
    server.should_exit = True


def serve(app: FastAPI, settings: Settings, shutdown: ShutdownContext) -> None:
    """Run the HTTP server until shutdown is signalled or the process is interrupted."""
    try:
        sock = bind_socket(str(settings.gateway), settings.listening_port)
    except ServerBindFailed as e:
        shutdown.fail(ShutdownSignal(ErrorKind.SERVER_BIND_FAILED, e))
        return

    config = uvicorn.Config(
        app,
        log_config=None,
        access_log=False,
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )
    server = uvicorn.Server(config)

    watcher = threading.Thread(
        target=_stop_on_shutdown,
        args=(shutdown, server),
        name="shutdown-watcher",
        daemon=True,
    )
    watcher.start()

    logger.info("Starting HTTP server on %s:%d", settings.gateway, settings.listening_port)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
        # Interrupted by a signal rather than by the shutdown context
        shutdown.finish()
