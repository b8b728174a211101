"""
Process entry point: resolve settings, bind the fixed port, then serve.
Restarts and health-based recycling are left to the orchestrator.
"""
import logging
import socket

import uvicorn
from uvicorn.config import LOG_LEVELS

from kube_greeter.app import create_app
from kube_greeter.config import HOST, PORT, Settings, load_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Matches uvicorn's default listen backlog.
BACKLOG = 2048


def configure_logging(level: str = "INFO") -> None:
    """Send application and uvicorn logs to one root handler."""
    logging.basicConfig(level=LOG_LEVELS[level.lower()], format=LOG_FORMAT)


def bind_socket(host: str = HOST, port: int = PORT) -> socket.socket:
    """Bind and listen on the service port, exiting the process on failure.

    There is no retry and no alternative port: the probe and Service
    configuration only know about ``port``.

    Args:
        host: Interface address to bind
        port: TCP port to bind

    Returns:
        A listening socket ready to hand to uvicorn

    Raises:
        SystemExit: with status 1 when the port cannot be bound
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
        sock.listen(BACKLOG)
    except OSError as exc:
        sock.close()
        logger.error("could not bind %s:%d: %s", host, port, exc)
        raise SystemExit(1) from exc
    return sock


def serve(settings: Settings, sock: socket.socket) -> None:
    """Run uvicorn on an already-bound socket until a signal stops it."""
    config = uvicorn.Config(
        create_app(settings),
        log_config=None,
        log_level=settings.log_level.lower(),
        backlog=BACKLOG,
    )
    server = uvicorn.Server(config)
    port = sock.getsockname()[1]
    logger.info("Server running on port %d", port)
    server.run(sockets=[sock])


def main() -> None:
    """Resolve settings, bind the fixed port and serve until signalled."""
    settings = load_settings()
    configure_logging(settings.log_level)
    sock = bind_socket()
    serve(settings, sock)
