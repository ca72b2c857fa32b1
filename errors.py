"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handlers
convert AppError subclasses, request validation failures and unexpected
exceptions into the same JSON envelope:

    {"success": false, "error": "<message>", "code": "<error_code>"}
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {
            "success": False,
            "error": self.message,
            "code": self.error_code,
        }
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class ConflictError(AppError):
    # The mobile client treats every signup rejection as a 400.
    status_code = 400
    error_code = "conflict"


class InvalidOrExpiredTokenError(AppError):
    status_code = 400
    error_code = "invalid_or_expired_token"


class AlreadyVerifiedError(AppError):
    status_code = 400
    error_code = "already_verified"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "authentication_error"


class ForbiddenError(AppError):
    status_code = 403
    error_code = "forbidden"


class EmailNotVerifiedError(ForbiddenError):
    error_code = "email_not_verified"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class EmailDeliveryError(AppError):
    status_code = 500
    error_code = "email_delivery_failed"


def _first_validation_message(exc: RequestValidationError) -> tuple[str, Optional[str]]:
    errors = exc.errors()
    if not errors:
        return "Invalid request", None
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = loc[-1] if loc else None
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return message, field


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message, field = _first_validation_message(exc)
        return JSONResponse(
            status_code=400,
            content=ValidationError(message, field=field).to_dict(),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "An internal server error occurred.",
                "code": "internal_error",
            },
        )
