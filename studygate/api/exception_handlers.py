"""
Exception handlers for converting domain exceptions to HTTP responses.

This module maps domain exceptions to appropriate HTTP status codes
and response formats for the API layer using FastAPI decorators.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


def setup_exception_handlers(app: FastAPI) -> None:
    """Setup exception handlers using decorators.

    Args:
        app: FastAPI application instance
    """
    from studygate.exceptions.domain import (
        IngestionError,
        NoDataSourceFoundError,
        SearchFailedError,
        ValidationError,
    )
    from studygate.utils.logger import logger

    @app.exception_handler(NoDataSourceFoundError)
    async def handle_no_data_source(_: Request, exc: NoDataSourceFoundError) -> JSONResponse:
        """Convert NoDataSourceFoundError to 404 response."""
        logger.error(str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc)},
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        """Convert ValidationError to 422 response."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc) if str(exc) else "Validation failed"},
        )

    @app.exception_handler(SearchFailedError)
    async def handle_search_failed(_: Request, exc: SearchFailedError) -> JSONResponse:
        """Convert SearchFailedError to 502 response."""
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc)},
        )

    @app.exception_handler(IngestionError)
    async def handle_ingestion_error(_: Request, exc: IngestionError) -> JSONResponse:
        """Convert IngestionError to 502 response."""
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc) if str(exc) else "Local ingestion failed"},
        )
