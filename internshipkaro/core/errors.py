"""
Error taxonomy and the FastAPI handlers that turn it into HTTP responses.

Services raise these exceptions; route handlers never build error responses
themselves. Anything not derived from AppError is logged with its traceback
and answered with a generic 500.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base exception for all application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the error envelope returned to clients."""
        body: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Malformed or missing input. details is a list of {field, message}."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class ConflictError(AppError):
    """Resource already exists (e.g. duplicate email). Answered with 400."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "CONFLICT"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class AuthenticationError(AppError):
    """Bad credentials, bad token, or the token's user is gone."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "AUTHENTICATION_ERROR"


class MissingTokenError(AuthenticationError):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="MISSING_TOKEN")


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT is malformed, wrongly signed, or lacks required claims."""

    def __init__(self, message: str = "Invalid authentication token") -> None:
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    def __init__(self, message: str = "Authentication token has expired") -> None:
        super().__init__(message, code="TOKEN_EXPIRED")


class WrongTokenTypeError(AuthenticationError):
    """Raised when an access token is presented where a refresh token is required, or vice versa."""

    def __init__(self, expected: str, actual: str | None) -> None:
        super().__init__(
            "Invalid token type",
            code="WRONG_TOKEN_TYPE",
            details={"expected": expected, "actual": actual},
        )


class TokenReuseError(AuthenticationError):
    """Raised when a refresh token that was already rotated or revoked is presented again."""

    def __init__(self, message: str = "Refresh token has been revoked") -> None:
        super().__init__(message, code="TOKEN_REVOKED")


def _validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        details.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return details


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "Request failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "error_code": exc.code,
            "reason": exc.message[:200],
        },
    )
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError("Validation failed", details=_validation_details(exc))
    return await _app_error_handler(request, err)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail), "code": "HTTP_ERROR"},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s: %s", request.method, request.url.path, exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal server error",
            "code": AppError.default_code,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error-envelope handlers to the application."""
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
