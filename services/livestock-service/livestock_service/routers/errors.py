"""
Error responses and exception-to-status mapping.

Every error body has the same shape. Validation errors carry field-level
detail; persistence and unexpected errors never expose internals.
"""

from typing import Any, Dict, List, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..domain.exceptions import (
    DuplicateIdentifierException,
    InvalidStateTransitionException,
    LivestockNotFoundException,
    LivestockServiceException,
    ReferencedEntityMissingException,
)

logger = structlog.get_logger(__name__)

DOMAIN_STATUS = {
    LivestockNotFoundException: status.HTTP_404_NOT_FOUND,
    DuplicateIdentifierException: status.HTTP_409_CONFLICT,
    ReferencedEntityMissingException: status.HTTP_409_CONFLICT,
    InvalidStateTransitionException: status.HTTP_409_CONFLICT,
}


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    details: dict = Field(default_factory=dict, description="Additional error details")


def _error(
    status_code: int, error: str, message: str, details: Optional[dict] = None
) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details or {})
    return JSONResponse(status_code=status_code, content=body.model_dump())


def field_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """Reduce pydantic errors to JSON-safe loc/msg/type triples."""
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = field_errors(exc)
    logger.info("Request validation failed", path=request.url.path, errors=len(errors))
    return _error(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Request does not match the contract schema",
        {"errors": errors},
    )


async def domain_exception_handler(
    request: Request, exc: LivestockServiceException
) -> JSONResponse:
    status_code = DOMAIN_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info(
        "Domain rule violated",
        path=request.url.path,
        error=exc.error_code,
        status_code=status_code,
    )
    return _error(status_code, exc.error_code, exc.message, exc.details)


async def integrity_exception_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    return _error(
        status.HTTP_409_CONFLICT,
        "conflict",
        "The request conflicts with the current state of the resource",
    )


async def persistence_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    return _error(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "persistence_error",
        "The data store is currently unavailable",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_server_error",
        "An unexpected error occurred",
        {"request_id": request.headers.get("X-Request-ID")},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install all error handlers on the application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(LivestockServiceException, domain_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
    app.add_exception_handler(SQLAlchemyError, persistence_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
