"""
FastAPI Bridge Application Factory
==================================

This is the main entry point for the bridge that sits between mobile
clients (Android/iOS) and the Branch.io API.

Architecture:
    Mobile Apps → Bridge (this service) → api3.branch.io (iOS) / api2.branch.io (others)

Routers:
    - /health       : Health check endpoint
    - /*            : Any other path and method, forwarded to Branch when the
                      body carries an allowed branch_key

Environment Variables:
    - ALLOWED_BRANCH_KEYS: Comma-separated Branch keys (e.g., "key_live_a,key_live_b")
    - PORT: Listening port (default: 3000)
    - BRIDGE_HOST: Bind address (default: 0.0.0.0)
    - UPSTREAM_TIMEOUT_SECONDS: Upstream call timeout (default: 30)
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn branch_bridge.app.main:app --reload --port 3000

    Production:
        branch-bridge
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AbstractSet, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from branch_bridge import __version__
from branch_bridge.app.config import Settings, get_settings, validate_configuration
from branch_bridge.app.errors import BridgeError, InternalBridgeError, bridge_error_handler, error_response
from branch_bridge.app.models import HealthResponse
from branch_bridge.app.proxy import proxy_router
from branch_bridge.app.proxy.upstream import create_upstream_client


# Configure structured JSON logging
def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


class AppState:
    """
    Per-application state container.

    Holds the read-only allow-list and the shared upstream client. Nothing
    in here changes while requests are being served.
    """
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings: Settings = settings
        self.allow_list: AbstractSet[str] = settings.allowed_keys
        self.transport = transport
        self.upstream_client: Optional[httpx.AsyncClient] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup tasks:
        - Configure logging
        - Report configuration warnings (an empty allow-list blocks everything)
        - Create the shared upstream HTTP client

    Shutdown tasks:
        - Close the upstream client and its connection pool
    """
    app_state: AppState = app.state.app_state
    settings = app_state.settings

    setup_logging(settings.LOG_LEVEL)
    logger = logging.getLogger("branch_bridge.main")

    status = validate_configuration(settings)
    for warning in status["warnings"]:
        logger.warning(f"WARNING: {warning}")

    if app_state.allow_list:
        logger.info(f"Allowed Branch keys loaded: {status['allowed_key_count']}")
        logger.debug(f"Allowed Branch keys: {sorted(app_state.allow_list)}")

    app_state.upstream_client = create_upstream_client(
        settings.UPSTREAM_TIMEOUT_SECONDS,
        transport=app_state.transport,
    )
    logger.info(
        "Branch.io API Bridge started",
        extra={"port": settings.PORT, "version": __version__}
    )

    yield

    logger.info("Shutting down Branch.io API Bridge")
    await app_state.upstream_client.aclose()
    app_state.upstream_client = None
    logger.info("Bridge shutdown complete")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Application factory function.

    Args:
        settings: Configuration to use; loaded from the environment when omitted
        transport: Optional httpx transport for the upstream client (tests
            pass an httpx.MockTransport here)

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Branch.io API Bridge",
        description="Allow-list gate and reverse proxy in front of the Branch.io API",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.app_state = AppState(settings, transport=transport)

    app.add_exception_handler(BridgeError, bridge_error_handler)

    # Health check, registered before the catch-all proxy route
    @app.api_route("/health", methods=["GET", "HEAD"], response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        return HealthResponse(status="ok", service="branch-bridge", version=__version__)

    app.include_router(proxy_router, tags=["Branch Proxy"])

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler for unhandled errors.

        Logs the error and answers with the fixed internal error message,
        never a stack trace.
        """
        logger = logging.getLogger("branch_bridge.main")
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__
            },
            exc_info=True
        )
        return error_response(InternalBridgeError())

    return app


# Create app instance for uvicorn
app = create_app()


def run() -> None:
    """Console entry point: load settings, configure logging, serve."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    logger = logging.getLogger("branch_bridge.main")
    logger.info(f"Branch.io API Bridge running on http://{settings.BRIDGE_HOST}:{settings.PORT}")
    logger.info(f"Dynamic endpoint available directly at the root: http://{settings.BRIDGE_HOST}:{settings.PORT}/<any-branch-api-path>")

    uvicorn.run(
        app,
        host=settings.BRIDGE_HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
