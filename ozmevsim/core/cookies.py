"""
Auth cookie directives: one HttpOnly cookie per token.
"""

from __future__ import annotations

from fastapi import Request, Response

from ozmevsim.core.config import settings
from ozmevsim.core.security import TokenPair


def set_auth_cookies(response: Response, tokens: TokenPair) -> None:
    """Emit both token cookies, each living as long as its token."""
    response.set_cookie(
        key=settings.ACCESS_COOKIE_NAME,
        value=tokens.access_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_MAX_AGE,
        path="/",
    )
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=tokens.refresh_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_MAX_AGE,
        path="/",
    )


def clear_auth_cookies(response: Response) -> None:
    """Emit Max-Age=0 directives for both token cookies."""
    for name in (settings.ACCESS_COOKIE_NAME, settings.REFRESH_COOKIE_NAME):
        response.delete_cookie(
            key=name,
            path="/",
            secure=settings.COOKIE_SECURE,
            httponly=True,
            samesite="lax",
        )


def read_access_token(request: Request) -> str | None:
    """Access token from the cookie, falling back to an Authorization header."""
    token = request.cookies.get(settings.ACCESS_COOKIE_NAME)
    if token:
        return token
    header = request.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def read_refresh_token(request: Request) -> str | None:
    return request.cookies.get(settings.REFRESH_COOKIE_NAME) or None
