"""
Auth error taxonomy and global exception handlers. Prevents stack-trace
leakage to clients.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ozmevsim.core.middleware import SECURITY_HEADERS

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Geçersiz e-posta veya şifre"
SESSION_NOT_FOUND_MESSAGE = "Oturum bulunamadı"
STORE_UNAVAILABLE_MESSAGE = "Sunucu hatası oluştu"
INVALID_PAYLOAD_MESSAGE = "Geçersiz veri formatı"
RATE_LIMITED_MESSAGE = "Çok fazla istek gönderiyorsunuz. Lütfen bir dakika bekleyin."


# ── Error taxonomy ──────────────────────────────────────────────────
class AuthError(HTTPException):
    """Base class for authentication / session failures."""

    def __init__(self, status_code: int, detail: str, headers: dict[str, str] | None = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class InvalidCredentials(AuthError):
    """Unknown email, inactive account or wrong password, indistinguishable."""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS_MESSAGE,
        )


class TokenInvalid(AuthError):
    """Malformed, badly signed, expired or wrong-kind token."""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=SESSION_NOT_FOUND_MESSAGE,
        )


class SessionNotFound(TokenInvalid):
    """Well-formed token with no live session row behind it."""


class StoreUnavailable(AuthError):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=STORE_UNAVAILABLE_MESSAGE,
        )


class EmailAlreadyRegistered(AuthError):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Bu e-posta adresi zaten kayıtlı",
        )


class InsufficientRole(AuthError):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Bu işlem için yetkiniz yok",
        )


# ── Handlers ────────────────────────────────────────────────────────
async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=exc.headers,
    )


async def _validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected request payload: %s", exc.errors())
    return JSONResponse(
        status_code=400,
        content={"detail": INVALID_PAYLOAD_MESSAGE, "success": False},
    )


async def _rate_limit_handler(request: Request, _exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded on %s", request.url.path)
    return JSONResponse(
        status_code=429,
        content={"detail": RATE_LIMITED_MESSAGE, "success": False},
        headers={"Retry-After": "60"},
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": STORE_UNAVAILABLE_MESSAGE, "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    # Runs in ServerErrorMiddleware, outside SecurityHeadersMiddleware.
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": STORE_UNAVAILABLE_MESSAGE, "success": False},
        headers=SECURITY_HEADERS,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
