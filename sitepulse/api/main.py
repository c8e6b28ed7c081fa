# ==============================================================================
# FastAPI Application
# ==============================================================================
"""
Application factory for the SitePulse HTTP API.

Stores are created from Settings (or injected, for tests), connected in the
lifespan handler and kept on app.state for the request dependencies.
Domain errors are mapped to JSON responses of the form {"error": message}.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sitepulse import __version__
from sitepulse.api.auth import AuthenticationError
from sitepulse.api.routes import analytics, events, health, heatmap, session
from sitepulse.base import EventRepository, SessionRepository
from sitepulse.core import InvalidRequestError, StoreError
from sitepulse.infrastructure.factory import create_event_repository, create_session_repository
from sitepulse.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"Invalid request: {location} {message}" if location else f"Invalid request: {message}"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _first_validation_message(exc)})

    @app.exception_handler(AuthenticationError)
    async def auth_handler(request: Request, exc: AuthenticationError):
        return JSONResponse(status_code=401, content={"error": str(exc)})

    @app.exception_handler(StoreError)
    async def store_handler(request: Request, exc: StoreError):
        logger.error("Unhandled store failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Settings | None = None,
    event_repository: EventRepository | None = None,
    session_repository: SessionRepository | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (defaults to get_settings())
        event_repository: Event store to use instead of the configured backend
        session_repository: Session store to use instead of Valkey

    Returns:
        Configured FastAPI instance
    """
    settings = settings or get_settings()
    event_repository = event_repository or create_event_repository(settings)
    session_repository = session_repository or create_session_repository(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting SitePulse API (store=%s)", settings.store.backend)
        event_repository.connect()
        try:
            yield
        finally:
            event_repository.close()
            session_repository.close()
            logger.info("SitePulse API shutdown complete")

    app = FastAPI(
        title="SitePulse",
        description="Web interaction analytics: ingestion, sessions, heatmaps",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.event_repository = event_repository
    app.state.session_repository = session_repository

    # The collector is embedded in third-party pages
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    app.include_router(events.router, prefix=API_PREFIX, tags=["ingestion"])
    app.include_router(session.router, prefix=API_PREFIX, tags=["sessions"])
    app.include_router(analytics.router, prefix=f"{API_PREFIX}/analytics", tags=["analytics"])
    app.include_router(heatmap.router, prefix=f"{API_PREFIX}/heatmap", tags=["heatmap"])
    app.include_router(health.router, tags=["health"])

    return app
