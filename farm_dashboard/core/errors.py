"""
Error Handling Utilities
Provides sanitized error messages and consistent error responses.
"""

import logging
from enum import Enum
from typing import Optional

from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from farm_dashboard.auth.roles import ACCESS_DENIED
from farm_dashboard.store.exceptions import (
    RecordNotFoundError,
    StoreReadError,
    StoreWriteError,
)

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Error codes for frontend handling."""

    # Authorization
    ACCESS_DENIED = "access_denied"
    NOT_AUTHENTICATED = "not_authenticated"

    # Data store
    RECORD_NOT_FOUND = "record_not_found"
    STORE_READ_FAILED = "store_read_failed"
    STORE_WRITE_FAILED = "store_write_failed"

    # Reports
    EXPORT_FAILED = "export_failed"

    # General errors
    VALIDATION_ERROR = "validation_error"
    INTERNAL_ERROR = "internal_error"
    SERVICE_UNAVAILABLE = "service_unavailable"


# User-friendly error messages
ERROR_MESSAGES = {
    ErrorCode.ACCESS_DENIED: ACCESS_DENIED,
    ErrorCode.NOT_AUTHENTICATED: "Please sign in to continue.",
    ErrorCode.RECORD_NOT_FOUND: "The requested record could not be found.",
    ErrorCode.STORE_READ_FAILED: "Unable to load farm data. Please try again in a moment.",
    ErrorCode.STORE_WRITE_FAILED: "Unable to save your changes. Please try again in a moment.",
    ErrorCode.EXPORT_FAILED: "Unable to export the report. Please try again later.",
    ErrorCode.VALIDATION_ERROR: "Invalid request. Please check your input and try again.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again later.",
    ErrorCode.SERVICE_UNAVAILABLE: "Service temporarily unavailable. Please try again in a moment.",
}

DEFAULT_STATUS = {
    ErrorCode.ACCESS_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_AUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.RECORD_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.STORE_READ_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.STORE_WRITE_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.SERVICE_UNAVAILABLE: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
}


def sanitize_error_message(
    exception: Exception,
    error_code: ErrorCode,
    log_details: bool = True,
) -> str:
    """
    Sanitize error message for user-facing responses.

    Logs full exception details internally but returns user-friendly message.

    Args:
        exception: The exception that occurred
        error_code: Error code for categorization
        log_details: Whether to log full exception details

    Returns:
        User-friendly error message
    """
    if log_details:
        logger.error(
            "Error [%s]: %s",
            error_code.value,
            str(exception),
            exc_info=exception,
        )

    return ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR])


def get_error_code_for_exception(exception: Exception) -> tuple[ErrorCode, int]:
    """
    Map exception types to error codes and HTTP status codes.

    Args:
        exception: The exception that occurred

    Returns:
        Tuple of (error_code, http_status_code)
    """
    if isinstance(exception, RecordNotFoundError):
        return ErrorCode.RECORD_NOT_FOUND, status.HTTP_404_NOT_FOUND

    if isinstance(exception, StoreWriteError):
        return ErrorCode.STORE_WRITE_FAILED, status.HTTP_502_BAD_GATEWAY

    if isinstance(exception, StoreReadError):
        return ErrorCode.STORE_READ_FAILED, status.HTTP_502_BAD_GATEWAY

    if isinstance(exception, ValueError):
        return ErrorCode.VALIDATION_ERROR, status.HTTP_400_BAD_REQUEST

    # Default to internal error
    return ErrorCode.INTERNAL_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR


async def global_exception_handler(_request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for FastAPI.

    Catches all unhandled exceptions and returns sanitized error responses.
    Excludes HTTPException (intentional responses) and ValidationError (FastAPI validation).
    """
    # Don't handle HTTPException - those are intentional responses
    if isinstance(exc, HTTPException):
        raise exc

    # Don't handle RequestValidationError - FastAPI handles this
    if isinstance(exc, RequestValidationError):
        raise exc

    error_code, http_status = get_error_code_for_exception(exc)
    message = sanitize_error_message(exc, error_code)

    return JSONResponse(
        status_code=http_status,
        content={
            "error_code": error_code.value,
            "message": message,
        },
    )


def create_error_response(
    error_code: ErrorCode,
    message: Optional[str] = None,
    http_status: Optional[int] = None,
) -> HTTPException:
    """
    Create a standardized HTTPException with error code.

    Args:
        error_code: Error code enum
        message: Optional custom message (uses default if not provided)
        http_status: Optional HTTP status code (uses default if not provided)

    Returns:
        HTTPException with standardized format
    """
    if message is None:
        message = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR])

    if http_status is None:
        http_status = DEFAULT_STATUS.get(error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    headers = None
    if error_code == ErrorCode.NOT_AUTHENTICATED:
        headers = {"WWW-Authenticate": "Bearer"}

    return HTTPException(
        status_code=http_status,
        detail={
            "error_code": error_code.value,
            "message": message,
        },
        headers=headers,
    )
