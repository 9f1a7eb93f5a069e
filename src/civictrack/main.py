# src/civictrack/main.py
"""Main entry point for the CivicTrack application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from civictrack.api import admin_router, comments_router, issues_router, users_router
from civictrack.core.errors import register_exception_handlers
from civictrack.core.logging import configure_logging
from civictrack.core.settings import Settings
from civictrack.core.settings import settings as default_settings
from civictrack.storage import Storage, build_storage

logger = logging.getLogger(__name__)

DESCRIPTION = "Municipal issue reporting: report, follow, vote on and moderate civic problems"


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    """Build a FastAPI application around one storage instance.

    Args:
        settings: Configuration to use; defaults to the environment-derived settings
        storage: Storage backend; defaults to the one ``settings`` selects

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description=DESCRIPTION,
        version=settings.app_version,
    )
    app.state.settings = settings
    app.state.storage = storage if storage is not None else build_storage(settings)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Add GZip middleware for compression
    app.add_middleware(GZipMiddleware)

    register_exception_handlers(app)

    # Include API routers
    app.include_router(issues_router, prefix="/api")
    app.include_router(comments_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "description": DESCRIPTION,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    logger.info(
        "%s %s ready with %s storage",
        settings.app_name,
        settings.app_version,
        type(app.state.storage).__name__,
    )
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("civictrack.main:app", host="0.0.0.0", port=8000, reload=default_settings.debug)
