"""
Centralized error handlers for the API.

No stack traces or internal details are exposed to clients.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..engine.models import ValidationErrors
from ..engine.validator import summarize_errors

logger = logging.getLogger(__name__)


class InvalidPackageError(Exception):
    """A package failed validation at the API boundary."""

    def __init__(self, errors: ValidationErrors):
        super().__init__(summarize_errors(errors))
        self.errors = errors


def register_error_handlers(app: FastAPI) -> None:
    """Register error handlers on the FastAPI application."""

    @app.exception_handler(InvalidPackageError)
    async def handle_invalid_package(_request: Request, exc: InvalidPackageError) -> JSONResponse:
        logger.info("Rejected package: %s", exc.errors)
        return JSONResponse(
            status_code=422,
            content={"error": str(exc), "errors": exc.errors},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
