"""Centralized error handling with consistent categorisation.

Every failure leaves the API in the same envelope:
``{"error": {"category", "code", "detail", "suggestions"?, "metadata"?}}``.
"""

import logging
from typing import Any
from uuid import UUID

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, OperationalError

from eduspark.auth.exceptions import AuthorizationError, InvalidCredentialsError, TokenExpiredError
from eduspark.database.operations import is_unique_violation
from eduspark.exceptions import (
    DuplicateSubmissionError,
    OracleUnavailableError,
    ResourceNotFoundError,
    StorageFailureError,
    ValidationError,
)


logger = logging.getLogger(__name__)


# === Error Categories ===


class ErrorCategory:
    """Error category constants."""

    VALIDATION = "VALIDATION_ERROR"
    AUTHENTICATION = "AUTHENTICATION_ERROR"
    AUTHORIZATION = "AUTHORIZATION_ERROR"
    DATABASE = "DATABASE_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFLICT = "CONFLICT_ERROR"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE_ERROR"
    INTERNAL = "INTERNAL_ERROR"


class ErrorCode:
    """Specific error codes for better client handling."""

    # Validation errors
    INVALID_INPUT = "INVALID_INPUT"

    # Authentication / authorization
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    FORBIDDEN = "FORBIDDEN"

    # Database errors
    DB_CONNECTION_FAILED = "DB_CONNECTION_FAILED"
    DB_CONSTRAINT_VIOLATION = "DB_CONSTRAINT_VIOLATION"
    DB_UNIQUE_VIOLATION = "DB_UNIQUE_VIOLATION"
    STORAGE_FAILURE = "STORAGE_FAILURE"

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    DUPLICATE_SUBMISSION = "DUPLICATE_SUBMISSION"

    # External service errors
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # Internal errors
    INTERNAL = "INTERNAL_ERROR"


# === Error Response Formatting ===


def format_error_response(
    category: str,
    code: str,
    detail: str,
    status_code: int,
    suggestions: list[str] | None = None,
    metadata: dict[str, Any] | None = None,
) -> JSONResponse:
    """Format a consistent error response."""
    content: dict[str, Any] = {
        "error": {
            "category": category,
            "code": code,
            "detail": detail,
        }
    }

    if suggestions:
        content["error"]["suggestions"] = suggestions

    if metadata:
        content["error"]["metadata"] = metadata

    return JSONResponse(status_code=status_code, content=content)


# === Exception Handlers ===


async def handle_not_found_errors(_request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    return format_error_response(
        category=ErrorCategory.RESOURCE_NOT_FOUND,
        code=ErrorCode.NOT_FOUND,
        detail=str(exc),
        status_code=status.HTTP_404_NOT_FOUND,
        metadata={"resource_type": exc.resource_type, "resource_id": exc.resource_id},
    )


async def handle_validation_errors(request: Request, exc: Exception) -> JSONResponse:
    """Handle validation errors from Pydantic and domain validators."""
    logger.info(f"Validation error on {request.method} {request.url.path}", extra={"error": str(exc)})

    if isinstance(exc, RequestValidationError | PydanticValidationError):
        errors = []
        for error in exc.errors():
            field = " -> ".join(str(loc) for loc in error["loc"])
            errors.append({"field": field, "message": error["msg"], "type": error["type"]})

        return format_error_response(
            category=ErrorCategory.VALIDATION,
            code=ErrorCode.INVALID_INPUT,
            detail="Invalid input data",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            metadata={"errors": errors},
        )

    metadata = {"field": exc.field} if isinstance(exc, ValidationError) and exc.field else None
    return format_error_response(
        category=ErrorCategory.VALIDATION,
        code=ErrorCode.INVALID_INPUT,
        detail=str(exc),
        status_code=status.HTTP_400_BAD_REQUEST,
        metadata=metadata,
    )


async def handle_duplicate_submission_errors(request: Request, exc: DuplicateSubmissionError) -> JSONResponse:
    logger.info(f"Duplicate submission on {request.method} {request.url.path}: {exc.target_id}")
    return format_error_response(
        category=ErrorCategory.CONFLICT,
        code=ErrorCode.DUPLICATE_SUBMISSION,
        detail=str(exc),
        status_code=status.HTTP_409_CONFLICT,
    )


async def handle_conflict_errors(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle resource conflicts such as signing up with an email that is taken."""
    logger.info(f"Conflict on {request.method} {request.url.path}: {exc.detail}")
    return format_error_response(
        category=ErrorCategory.CONFLICT,
        code=ErrorCode.ALREADY_EXISTS,
        detail=str(exc.detail),
        status_code=status.HTTP_409_CONFLICT,
    )


async def handle_authentication_errors(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle authentication-related errors."""
    logger.warning(
        f"Authentication error on {request.method} {request.url.path}: {exc.detail}",
        extra={
            "client_host": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
        },
    )

    if isinstance(exc, TokenExpiredError):
        code = ErrorCode.TOKEN_EXPIRED
        suggestions = ["Please log in again to continue"]
    elif isinstance(exc, InvalidCredentialsError):
        code = ErrorCode.INVALID_CREDENTIALS
        suggestions = ["Check your credentials and try again"]
    else:
        code = ErrorCode.AUTH_REQUIRED
        suggestions = ["Please log in to access this resource"]

    return format_error_response(
        category=ErrorCategory.AUTHENTICATION,
        code=code,
        detail=str(exc.detail),
        status_code=status.HTTP_401_UNAUTHORIZED,
        suggestions=suggestions,
    )


async def handle_authorization_errors(request: Request, exc: AuthorizationError) -> JSONResponse:
    """Handle authorization errors (403)."""
    logger.warning(f"Authorization error on {request.method} {request.url.path}: {exc.detail}")
    return format_error_response(
        category=ErrorCategory.AUTHORIZATION,
        code=ErrorCode.FORBIDDEN,
        detail=str(exc.detail),
        status_code=status.HTTP_403_FORBIDDEN,
    )


async def handle_storage_failure_errors(request: Request, exc: StorageFailureError) -> JSONResponse:
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return format_error_response(
        category=ErrorCategory.DATABASE,
        code=ErrorCode.STORAGE_FAILURE,
        detail=str(exc),
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        suggestions=["No changes were saved", "Please try again"],
        metadata={"retryable": exc.retryable},
    )


async def handle_database_errors(request: Request, exc: Exception) -> JSONResponse:
    """Handle database errors that escaped the service layer."""
    logger.exception(
        f"Database error on {request.method} {request.url.path}: {exc}",
        extra={"error_type": type(exc).__name__},
        exc_info=(type(exc), exc, exc.__traceback__),
    )

    if isinstance(exc, IntegrityError) and is_unique_violation(exc):
        return format_error_response(
            category=ErrorCategory.DATABASE,
            code=ErrorCode.DB_UNIQUE_VIOLATION,
            detail="This resource already exists",
            status_code=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, IntegrityError):
        return format_error_response(
            category=ErrorCategory.DATABASE,
            code=ErrorCode.DB_CONSTRAINT_VIOLATION,
            detail="Required data is missing or invalid",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, OperationalError):
        return format_error_response(
            category=ErrorCategory.DATABASE,
            code=ErrorCode.DB_CONNECTION_FAILED,
            detail="Database connection error",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            suggestions=["Please try again later"],
        )

    return format_error_response(
        category=ErrorCategory.DATABASE,
        code=ErrorCode.INTERNAL,
        detail="A database error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def handle_oracle_errors(request: Request, exc: OracleUnavailableError) -> JSONResponse:
    """Handle AI oracle failures."""
    logger.error(f"AI oracle '{exc.oracle}' failed on {request.method} {request.url.path}: {exc}")
    if exc.retryable:
        suggestions = ["The AI service is temporarily unavailable", "Please try again later"]
    else:
        suggestions = ["The AI service could not produce a usable answer", "Contact your teacher if this persists"]
    return format_error_response(
        category=ErrorCategory.EXTERNAL_SERVICE,
        code=ErrorCode.SERVICE_UNAVAILABLE,
        detail=str(exc),
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        suggestions=suggestions,
        metadata={"oracle": exc.oracle, "retryable": exc.retryable},
    )


# === Utility Functions ===


def log_error_context(request: Request, exc: Exception, error_id: UUID | None = None) -> None:
    """Log comprehensive error context for debugging."""
    context = {
        "error_id": str(error_id) if error_id else None,
        "method": request.method,
        "path": request.url.path,
        "query_params": dict(request.query_params),
        "client_host": request.client.host if request.client else "unknown",
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }

    # Add request headers (excluding sensitive ones)
    safe_headers = {k: v for k, v in request.headers.items() if k.lower() not in ["authorization", "cookie"]}
    context["headers"] = safe_headers

    logger.error("Request failed", extra=context, exc_info=exc)
