"""Centralized error handling for the API layer.

This module provides consistent error handling across all API endpoints,
mapping domain exceptions to HTTP responses through their failure class.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ...domain.exceptions import CollaboratorError, DomainException, FailureClass

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


class ErrorDetail(BaseModel):
    """Standard error detail model."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    details: dict[str, Any] | None = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail = Field(..., description="Error information")


# Mapping of failure classes to HTTP status codes
FAILURE_STATUS_MAP = {
    FailureClass.BAD_INPUT: status.HTTP_400_BAD_REQUEST,
    FailureClass.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureClass.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    FailureClass.SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_error_response(
    status_code: int, code: str, message: str, details: dict[str, Any] | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    error_response = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=error_response.model_dump())


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Handle domain-specific exceptions.

    Args:
        request: The request that caused the exception
        exc: The domain exception

    Returns:
        JSONResponse with the status of the exception's failure class
    """
    status_code = FAILURE_STATUS_MAP[exc.failure_class]
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"Domain exception on {request.method} {request.url.path}: "
        f"{exc.message} (code: {exc.error_code})"
    )
    return create_error_response(status_code, exc.error_code, exc.message, exc.details or None)


async def collaborator_exception_handler(request: Request, exc: CollaboratorError) -> JSONResponse:
    """Handle collaborator failures raised outside the workflows."""
    logger.error(f"{exc.collaborator} failure on {request.method} {request.url.path}: {exc}")
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "UPSTREAM_FAILURE",
        f"Failed to read from {exc.collaborator}",
        {"collaborator": exc.collaborator},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation exceptions."""
    errors = exc.errors()
    logger.warning(f"Validation error on {request.method} {request.url.path}: {len(errors)} errors")

    first_error = errors[0] if errors else {}
    field = ".".join(str(loc) for loc in first_error.get("loc", []))
    msg = first_error.get("msg", "Invalid input data")

    details = {
        "field": field,
        "errors": [
            {
                "field": ".".join(str(loc) for loc in e.get("loc", [])),
                "message": e.get("msg", ""),
                "type": e.get("type", ""),
            }
            for e in errors
        ],
    }
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        f"Validation failed for field '{field}': {msg}",
        details,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions with consistent format."""
    logger.info(
        f"HTTP exception on {request.method} {request.url.path}: {exc.status_code} - {exc.detail}"
    )
    return create_error_response(exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal server error occurred",
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(CollaboratorError, collaborator_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
