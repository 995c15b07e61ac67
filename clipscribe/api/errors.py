"""Conversion of domain exceptions into uniform error responses."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..domain.exceptions import (
    AuthenticationRequiredError,
    RecordNotFoundError,
    StorageError,
    TranscriptionProviderError,
    ValidationFailedError,
)
from .schemas import ErrorResponseSchema

logger = logging.getLogger(__name__)

# Error codes for consistent error handling
ERROR_CODES = {
    "AUTHENTICATION_REQUIRED": "AUTHENTICATION_REQUIRED",
    "NOT_FOUND": "NOT_FOUND",
    "VALIDATION_FAILED": "VALIDATION_FAILED",
    "UPSTREAM_FAILURE": "UPSTREAM_FAILURE",
    "INTERNAL_ERROR": "INTERNAL_ERROR",
}


def create_error_response(
    status_code: int,
    error: str,
    error_code: str,
    fields: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a consistent error response with error, error_code, and timestamp."""
    error_data = ErrorResponseSchema(
        error=error,
        error_code=error_code,
        timestamp=datetime.now(timezone.utc),
        fields=fields,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_data.model_dump(mode="json", exclude_none=True),
    )


def _field_name(loc: tuple) -> str:
    # Drop the request part ("body", "query", ...) from the location
    parts = [str(part) for part in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


async def authentication_required_handler(
    request: Request, exc: AuthenticationRequiredError
) -> JSONResponse:
    logger.warning(f"Unauthenticated request to {request.url.path}")
    return create_error_response(
        status_code=status.HTTP_401_UNAUTHORIZED,
        error=str(exc),
        error_code=ERROR_CODES["AUTHENTICATION_REQUIRED"],
    )


async def record_not_found_handler(
    request: Request, exc: RecordNotFoundError
) -> JSONResponse:
    logger.warning(f"{exc.kind} not found or access denied: {exc.record_id}")
    return create_error_response(
        status_code=status.HTTP_404_NOT_FOUND,
        error=str(exc),
        error_code=ERROR_CODES["NOT_FOUND"],
    )


async def validation_failed_handler(
    request: Request, exc: ValidationFailedError
) -> JSONResponse:
    logger.warning(f"Validation error on '{exc.field}': {exc.message}")
    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        error=exc.message,
        error_code=ERROR_CODES["VALIDATION_FAILED"],
        fields={exc.field: exc.message},
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = {_field_name(tuple(err["loc"])): err["msg"] for err in exc.errors()}
    logger.warning(f"Request validation failed for {request.url.path}: {fields}")
    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        error="Invalid request",
        error_code=ERROR_CODES["VALIDATION_FAILED"],
        fields=fields,
    )


async def transcription_provider_handler(
    request: Request, exc: TranscriptionProviderError
) -> JSONResponse:
    logger.error(f"Transcription provider failure: {exc}")
    return create_error_response(
        status_code=status.HTTP_502_BAD_GATEWAY,
        error="Failed to request transcription",
        error_code=ERROR_CODES["UPSTREAM_FAILURE"],
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(f"Storage failure: {exc}")
    return create_error_response(
        status_code=status.HTTP_502_BAD_GATEWAY,
        error=str(exc),
        error_code=ERROR_CODES["UPSTREAM_FAILURE"],
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unexpected error on {request.url.path}: {exc}", exc_info=True)
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error="An unexpected error occurred",
        error_code=ERROR_CODES["INTERNAL_ERROR"],
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers that render every failure as an error envelope."""
    app.add_exception_handler(
        AuthenticationRequiredError, authentication_required_handler
    )
    app.add_exception_handler(RecordNotFoundError, record_not_found_handler)
    app.add_exception_handler(ValidationFailedError, validation_failed_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(
        TranscriptionProviderError, transcription_provider_handler
    )
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
