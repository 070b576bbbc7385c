"""Translate engine errors into JSON responses.

Permission checks never raise, so these handlers only see failures from the
administrative surface: config and maintenance mutation, roles, audit queries.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gatekeeper.core.config import get_settings
from gatekeeper.domain.exceptions import GatekeeperException

logger = logging.getLogger(__name__)

# Unlisted codes fall back to 400.
_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "NOT_CONFIGURABLE": 409,
    "DUPLICATE_ASSIGNMENT": 409,
    "PERSISTENCE_ERROR": 503,
    "CACHE_UNAVAILABLE": 503,
}


def _gatekeeper_exception_handler(request: Request, exc: GatekeeperException) -> JSONResponse:
    """Return JSON from GatekeeperException.to_dict() with appropriate status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.error("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors()),
        },
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install every handler on app; call once from create_app()."""
    app.add_exception_handler(GatekeeperException, _gatekeeper_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
