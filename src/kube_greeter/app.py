"""
FastAPI application answering the root path with an environment greeting.
The same route is the orchestrator's liveness probe target.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kube_greeter import __version__
from kube_greeter.config import Settings, load_settings

logger = logging.getLogger(__name__)


def greeting(settings: Settings) -> str:
    """Greeting body served on the root path."""
    return f"Hello from Kubernetes! Environment: {settings.app_env}"


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info("server startup complete")
    yield
    logger.info("server shutdown complete")


async def plain_text_http_error(
    request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    """Render routing errors (404, 405) as plain text instead of JSON."""
    return PlainTextResponse(
        str(exc.detail), status_code=exc.status_code, headers=exc.headers
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around an already-resolved configuration.

    Args:
        settings: Process settings; resolved from the environment when omitted

    Returns:
        FastAPI application serving the greeting on ``GET /``
    """
    if settings is None:
        settings = load_settings()

    body = greeting(settings)

    app = FastAPI(title="Kube Greeter", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.add_exception_handler(StarletteHTTPException, plain_text_http_error)

    # HEAD is answered like GET, without a body.
    @app.api_route("/", methods=["GET", "HEAD"], response_class=PlainTextResponse)
    async def root() -> str:
        """Greeting endpoint, also polled by the liveness probe."""
        return body

    return app
