"""
Main API application module for StudyGate.

This module creates and configures the FastAPI application with all routers
and middleware.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studygate.api.exception_handlers import setup_exception_handlers
from studygate.api.routers import local as local
from studygate.api.routers import studies as studies
from studygate.settings import Settings, get_settings
from studygate.utils.bootstrap import create_services
from studygate.utils.logger import logger


def create_app(settings: Settings | None = None, root_path: str = "/") -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to build services from; the cached settings if omitted
        root_path: The root path for the application

    Returns:
        Configured FastAPI application
    """
    app_settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Create the shared HTTP client, registry and services."""
        services = create_services(app_settings)
        app.state.services = services
        logger.info("Application startup complete")

        try:
            yield
        finally:
            await services.aclose()
            logger.info("Application shutdown")

    app = FastAPI(
        title="StudyGate",
        description="Study search and local archive ingestion for medical image viewers",
        version="0.1.0",
        debug=app_settings.debug,
        lifespan=lifespan,
        root_path=root_path.rstrip("/"),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(studies.router, prefix="/api/studies", tags=["Studies"])
    app.include_router(local.router, tags=["Local"])

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


# Create default application instance
app = create_app(root_path=get_settings().root_url)
