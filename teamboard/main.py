"""
Teamboard API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI

from teamboard.core.config import get_settings
from teamboard.core.database import init_db
from teamboard.core.errors import register_error_handlers
from teamboard.api.v1 import router as api_v1_router

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Teamboard",
        description="Team collaboration backend: teams, projects and tasks.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    register_error_handlers(app)

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.on_event("startup")
    async def on_startup():
        if settings.debug:
            await init_db()
        log.info("Teamboard starting", debug=settings.debug)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("Teamboard shutting down")

    return app


app = create_app()
