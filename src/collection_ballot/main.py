# src/collection_ballot/main.py
"""Main entry point for the collection ballot service."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from collection_ballot.api.v1 import (
    admin_router,
    period_router,
    submissions_router,
    votes_router,
    winners_router,
)
from collection_ballot.api.v1.errors import register_error_handlers
from collection_ballot.core.settings import settings
from collection_ballot.db.session import Database
from collection_ballot.services.metadata import get_metadata_client

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Community ballot for nominating, voting on and ranking NFT collections",
    version=settings.app_version,
)

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

register_error_handlers(app)

# Include API routers
app.include_router(period_router, prefix="/api/v1")
app.include_router(submissions_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(winners_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging(settings.log_level)
    # Tests attach their own database before the app starts.
    if getattr(app.state, "database", None) is None:
        app.state.database = Database.from_settings(settings)
        logger.info("Opened database %s", app.state.database.engine.url)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_metadata_client().close()
    database: Database | None = getattr(app.state, "database", None)
    if database is not None:
        database.dispose()
        app.state.database = None


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
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("collection_ballot.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
