"""API error handling and response helpers."""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from church_ledger.services.errors import (
    CredentialsError,
    DuplicateControlNumberError,
    DuplicateFieldError,
    PersistenceError,
    RecordNotFoundError,
    RecordValidationError,
    SheetsAPIError,
)

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class InvalidWebhookSecretError(AppError):
    """Relayed submission did not carry the shared secret."""

    def __init__(self, message: str = "Invalid or missing webhook secret"):
        super().__init__(message, "invalid_webhook_secret", status.HTTP_401_UNAUTHORIZED)


class NotFoundError(AppError):
    """Requested resource does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found", status.HTTP_404_NOT_FOUND)


class InvalidQueryError(AppError):
    """Query parameter out of range (e.g. month 13)."""

    def __init__(self, message: str):
        super().__init__(message, "invalid_query", status.HTTP_400_BAD_REQUEST)


def error_response(error: AppError, **extra: Any) -> Dict[str, Any]:
    """Create a standardized error response."""
    body = {"code": error.code, "message": error.message}
    body.update(extra)
    return {"error": body}


def _json(error: AppError, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=error.http_status, content=error_response(error, **extra))


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    return _json(exc)


async def handle_validation_error(request: Request, exc: RecordValidationError) -> JSONResponse:
    error = AppError("Validation failed", "validation_failed", status.HTTP_400_BAD_REQUEST)
    return _json(error, issues=[issue.to_dict() for issue in exc.issues])


async def handle_not_found(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return _json(NotFoundError(str(exc)))


async def handle_duplicate_control_number(
    request: Request, exc: DuplicateControlNumberError
) -> JSONResponse:
    return _json(AppError(str(exc), "duplicate_control_number", status.HTTP_409_CONFLICT))


async def handle_duplicate_field(request: Request, exc: DuplicateFieldError) -> JSONResponse:
    return _json(AppError(str(exc), "duplicate_field", status.HTTP_409_CONFLICT))


async def handle_persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return _json(
        AppError("Failed to save record", "persistence_error", status.HTTP_500_INTERNAL_SERVER_ERROR)
    )


async def handle_sheets_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Google Sheets export failed: {exc}")
    return _json(AppError(str(exc), "sheets_export_failed", status.HTTP_502_BAD_GATEWAY))


def register_error_handlers(app: FastAPI) -> None:
    """Map domain exceptions onto the error envelope."""
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RecordValidationError, handle_validation_error)
    app.add_exception_handler(RecordNotFoundError, handle_not_found)
    app.add_exception_handler(DuplicateControlNumberError, handle_duplicate_control_number)
    app.add_exception_handler(DuplicateFieldError, handle_duplicate_field)
    app.add_exception_handler(PersistenceError, handle_persistence_error)
    app.add_exception_handler(SheetsAPIError, handle_sheets_error)
    app.add_exception_handler(CredentialsError, handle_sheets_error)
