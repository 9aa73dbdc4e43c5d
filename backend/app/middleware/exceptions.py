"""Application errors and the handlers that render them.

Every error leaves the API in the same envelope:

    {"error": {"code": "ERROR_CODE", "message": "...", "details": {...}}}

Store and mail failures are logged here before being surfaced, so route
handlers can simply raise.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: dict | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class ValidationFailed(AppError):
    """Missing required field, empty cart, mixed customers in a reply batch."""

    def __init__(self, message: str, error_code: str = "VALIDATION_FAILED"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
        )


class ResourceNotFoundError(AppError):
    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
        )


class WorkflowConflict(AppError):
    """The requested action is not possible in the entity's current state."""

    def __init__(self, message: str, error_code: str = "WORKFLOW_CONFLICT", details: dict | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code=error_code,
            details=details,
        )


class MailNotConfiguredError(AppError):
    def __init__(self, message: str = "SMTP is not configured on the server"):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="SMTP_NOT_CONFIGURED",
        )


class MailTransportError(AppError):
    def __init__(self, message: str = "Failed to send email"):
        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="MAIL_SEND_FAILED",
        )


def error_body(code: str, message: str, details=None) -> dict:
    body = {"code": code, "message": message}
    if details:
        body["details"] = details
    return {"error": body}


def error_response(status_code: int, code: str, message: str, details=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_body(code, message, details),
        headers=headers,
    )


def _log_request_error(level: int, request: Request, summary: str, *, exc_info: bool = False, **extra) -> None:
    logger.log(
        level,
        "%s %s: %s",
        request.method,
        request.url.path,
        summary,
        extra={"path": request.url.path, "method": request.method, **extra},
        exc_info=exc_info,
    )


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    _log_request_error(level, request, f"{exc.error_code} {exc.message}", error_code=exc.error_code)
    return error_response(exc.status_code, exc.error_code, exc.message, exc.details)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        _log_request_error(logging.ERROR, request, f"HTTP {exc.status_code} {exc.detail}")
    return error_response(
        exc.status_code,
        f"HTTP_{exc.status_code}",
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError | ValidationError) -> JSONResponse:
    problems = [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    _log_request_error(logging.WARNING, request, f"{len(problems)} invalid field(s)")
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request data is invalid",
        {"errors": problems},
    )


# Constraint fragment in the driver message → (code, message)
_CONSTRAINT_ERRORS = (
    ("unique", "DUPLICATE_RECORD", "That value is already taken"),
    ("foreign key", "FOREIGN_KEY_VIOLATION", "A referenced record is missing"),
    ("not null", "NULL_VALUE_NOT_ALLOWED", "A required value is missing"),
)


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    raw = str(getattr(exc, "orig", None) or exc)
    _log_request_error(logging.ERROR, request, f"constraint violated: {raw}")
    lowered = raw.lower()
    for fragment, code, message in _CONSTRAINT_ERRORS:
        if fragment in lowered:
            break
    else:
        code, message = "INTEGRITY_ERROR", "A data constraint was violated"
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, code, message)


async def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    if isinstance(exc, OperationalError):
        _log_request_error(logging.ERROR, request, f"database unreachable: {exc}")
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "DATABASE_UNAVAILABLE",
            "The database is unavailable, try again shortly",
        )
    _log_request_error(logging.ERROR, request, f"database error: {exc}", exc_info=True)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "DATABASE_ERROR",
        "The operation failed. Please try again.",
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    _log_request_error(logging.ERROR, request, f"unhandled {type(exc).__name__}: {exc}", exc_info=True)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "Something went wrong on our side",
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(SQLAlchemyError, handle_store_error)
    app.add_exception_handler(Exception, handle_unexpected)
