from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class AppError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, errors: list[str] | None = None):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation error"


class InvalidIdError(AppError):
    status_code = 400
    default_message = "Invalid identifier"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class PrincipalNotFoundError(NotFoundError):
    default_message = "Account not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class AuthError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class MissingTokenError(AuthError):
    default_message = "Access token missing"


class InvalidTokenError(AuthError):
    default_message = "Invalid access token"


class ExpiredTokenError(AuthError):
    default_message = "Token expired"


class InvalidCredentialsError(AuthError):
    default_message = "Invalid credentials"


class RefreshTokenMismatchError(AuthError):
    status_code = 403
    default_message = "Invalid refresh token"


class InternalError(AppError):
    status_code = 500
    default_message = "Internal server error"


def error_envelope(status_code: int, message: str, errors: list[str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "statusCode": status_code,
            "message": message,
            "errors": list(errors or []),
            "success": False,
        },
    )


def _format_request_errors(exc: RequestValidationError) -> list[str]:
    out = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        out.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return out


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("request_failed", path=request.url.path, error=exc.message)
            return error_envelope(exc.status_code, InternalError.default_message)
        return error_envelope(exc.status_code, exc.message, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return error_envelope(400, ValidationError.default_message, _format_request_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return error_envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def _store_error(request: Request, exc: SQLAlchemyError):
        logger.exception("store_error", path=request.url.path, method=request.method)
        return error_envelope(500, InternalError.default_message)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path, method=request.method)
        return error_envelope(500, InternalError.default_message)
