"""
JWT token issuing / verification and password hashing (bcrypt).

Access and refresh tokens are signed with separate secrets and carry a
``type`` claim, so neither can stand in for the other.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from ozmevsim.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


def dummy_verify_password() -> None:
    """Burn one hash round so unknown accounts cost as much as wrong passwords."""
    pwd_context.dummy_verify()


# ── JWT tokens ──────────────────────────────────────────────────────
def _encode(subject: str, kind: str, secret: str, lifetime: timedelta) -> str:
    expire = datetime.now(timezone.utc) + lifetime
    return jwt.encode(
        {"exp": expire, "sub": str(subject), "type": kind, "jti": uuid.uuid4().hex},
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def _decode(token: str, kind: str, secret: str) -> str | None:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != kind:
        return None
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return subject


def issue_access_token(user_id: str) -> str:
    return _encode(
        user_id,
        ACCESS,
        settings.JWT_SECRET,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def issue_refresh_token(user_id: str) -> str:
    return _encode(
        user_id,
        REFRESH,
        settings.JWT_REFRESH_SECRET,
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def issue_token_pair(user_id: str) -> TokenPair:
    return TokenPair(
        access_token=issue_access_token(user_id),
        refresh_token=issue_refresh_token(user_id),
    )


def verify_access_token(token: str) -> str | None:
    """Return the subject id if *token* is a valid access token, else ``None``."""
    return _decode(token, ACCESS, settings.JWT_SECRET)


def verify_refresh_token(token: str) -> str | None:
    """Return the subject id if *token* is a valid refresh token, else ``None``."""
    return _decode(token, REFRESH, settings.JWT_REFRESH_SECRET)
