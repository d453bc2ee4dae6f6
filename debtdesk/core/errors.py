"""
DebtDesk - Error Handling

Structured error responses for API consistency. Domain failures raised as
DebtDeskError (or a MalformedFileError from the import pipeline) map to
4xx responses; anything else is a logged 500 with a generic message.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..ingest.errors import MalformedFileError
from .middleware import get_request_id

logger = logging.getLogger(__name__)


# =============================================================================
# Error Response Models
# =============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information for debugging."""

    field: str | None = None
    message: str
    code: str | None = None


class ErrorResponse(BaseModel):
    """Standardized error body returned by every failing endpoint."""

    error: str  # Machine-readable error code
    message: str  # Human-readable error message
    status_code: int
    request_id: str | None = None
    details: list[ErrorDetail] | None = None


# =============================================================================
# Error Codes
# =============================================================================

ERROR_VALIDATION = "validation_error"
ERROR_NOT_FOUND = "not_found"
ERROR_BAD_REQUEST = "bad_request"
ERROR_MALFORMED_FILE = "malformed_file"
ERROR_PAYLOAD_TOO_LARGE = "payload_too_large"
ERROR_INTERNAL = "internal_error"


# =============================================================================
# Exceptions
# =============================================================================


class DebtDeskError(Exception):
    """Base exception for DebtDesk business logic errors."""

    def __init__(
        self,
        message: str,
        error_code: str = ERROR_INTERNAL,
        status_code: int = 500,
        details: list[ErrorDetail] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details


class PayloadTooLargeError(DebtDeskError):
    """Upload exceeds the configured size limit."""

    def __init__(self, limit: int):
        super().__init__(
            message=f"Upload exceeds the limit of {limit} bytes",
            error_code=ERROR_PAYLOAD_TOO_LARGE,
            status_code=413,
        )


# =============================================================================
# Exception Handlers
# =============================================================================


def create_error_response(
    status_code: int,
    error: str,
    message: str,
    details: list[ErrorDetail] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    request_id = get_request_id()

    response = ErrorResponse(
        error=error,
        message=message,
        status_code=status_code,
        request_id=request_id if request_id else None,
        details=details,
    )

    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(exclude_none=True),
    )


async def debtdesk_exception_handler(request: Request, exc: DebtDeskError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")

    return create_error_response(
        status_code=exc.status_code,
        error=exc.error_code,
        message=exc.message,
        details=exc.details,
    )


async def malformed_file_handler(request: Request, exc: MalformedFileError) -> JSONResponse:
    logger.warning(
        f"Rejected undecodable upload on {request.url.path}: {exc.reason}",
        extra={"upload_filename": exc.filename},
    )

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        error=ERROR_MALFORMED_FILE,
        message=str(exc),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_map = {
        400: ERROR_BAD_REQUEST,
        404: ERROR_NOT_FOUND,
        413: ERROR_PAYLOAD_TOO_LARGE,
    }
    error_code = error_map.get(exc.status_code, ERROR_INTERNAL)

    if exc.status_code >= 500:
        logger.error(
            f"HTTP {exc.status_code}: {exc.detail}",
            extra={"path": request.url.path, "status_code": exc.status_code},
        )

    return create_error_response(
        status_code=exc.status_code,
        error=error_code,
        message=str(exc.detail),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Converts request validation errors to field-level details."""
    details = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field = ".".join(str(x) for x in loc) if loc else None

        details.append(
            ErrorDetail(
                field=field,
                message=error.get("msg", "Validation error"),
                code=error.get("type", "validation"),
            )
        )

    logger.warning(
        f"Validation error on {request.url.path}: {len(details)} errors",
        extra={"path": request.url.path, "error_count": len(details)},
    )

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        error=ERROR_VALIDATION,
        message="Request validation failed",
        details=details,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Logs the full traceback but returns a generic error to the client."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
        exc_info=True,
    )

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error=ERROR_INTERNAL,
        message="An unexpected error occurred. Please try again later.",
    )


def setup_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the FastAPI app."""
    app.add_exception_handler(DebtDeskError, debtdesk_exception_handler)
    app.add_exception_handler(MalformedFileError, malformed_file_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Error handlers registered")
