"""
Trackmate REST API

FastAPI application for the lap-timing service: tracks, cars, laps,
leaderboards, driver pages, timing deep links and the phone-session ingest
endpoint used by the Timing app.

Run:
    trackmate serve --port 8000
    # or
    uvicorn trackmate.api.main:create_app --factory --port 8000

API Docs: http://localhost:8000/docs
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..auth import TokenVerifier
from ..config import Settings, load_settings
from ..database import DatabaseManager, TrackmateRepository
from ..errors import TrackmateError
from ..laps import LapService
from ..phone_sessions import PhoneSessionIngestor
from .routes import catalog, community, laps, phone_sessions, timing

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return 'Invalid request'
    first = errors[0]
    field = '.'.join(str(part) for part in first.get('loc', ()) if part != 'body')
    return f"Invalid {field}: {first.get('msg')}" if field else first.get('msg', 'Invalid request')


def create_app(settings: Optional[Settings] = None,
               db_manager: Optional[DatabaseManager] = None) -> FastAPI:
    """
    Build the application

    Args:
        settings: Configuration (defaults to load_settings())
        db_manager: Database manager to use; one is created from settings if omitted

    Returns:
        Configured FastAPI app
    """
    settings = settings or load_settings()
    if db_manager is None:
        db_manager = DatabaseManager(settings.database_url, echo=settings.sql_echo)
    db_manager.initialize()

    app = FastAPI(
        title="Trackmate API",
        description="Lap times, leaderboards and timing handoff for track-day drivers",
        version=__version__
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    repository = TrackmateRepository(db_manager)
    app.state.settings = settings
    app.state.db_manager = db_manager
    app.state.repository = repository
    app.state.verifier = TokenVerifier(repository)
    app.state.lap_service = LapService(repository)
    app.state.ingestor = PhoneSessionIngestor(repository)

    @app.exception_handler(TrackmateError)
    async def handle_trackmate_error(request: Request, exc: TrackmateError):
        if exc.status_code >= 500:
            logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("[API] Unexpected error in %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/")
    def root():
        """API root"""
        return {
            "name": "Trackmate API",
            "version": __version__,
            "docs": "/docs"
        }

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    app.include_router(catalog.router)
    app.include_router(laps.router)
    app.include_router(community.router)
    app.include_router(timing.router)
    app.include_router(phone_sessions.router)

    return app
