"""
FastAPI Main Application - REST entry point.

Run with: uvicorn mcpadvisor.interfaces.api:create_app --factory
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mcpadvisor import __version__
from mcpadvisor.config import Settings, get_settings
from mcpadvisor.interfaces.services import SearchServices, build_services

from .middleware import ErrorHandlerMiddleware, LatencyMiddleware, RequestIDMiddleware
from .routes import health, search

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    services: SearchServices | None = None,
) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        settings: Application settings (loaded from the environment if omitted)
        services: Prebuilt services; built from settings at startup if omitted
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting MCP Advisor API...")
        app.state.services = services or build_services(settings)
        await app.state.services.start(monitor=True)
        logger.info("  Services initialized")

        yield

        logger.info("Shutting down MCP Advisor API...")
        await app.state.services.close()

    app = FastAPI(
        title="MCP Advisor API",
        description="Recommend MCP servers across search providers",
        version=__version__,
        lifespan=lifespan,
        debug=settings.api_debug,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LatencyMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(health.router, tags=["Health"])
    app.include_router(search.router, prefix="/api/search", tags=["Search"])

    return app
