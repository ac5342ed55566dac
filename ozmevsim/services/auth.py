"""
Session store: credential checks, session lifecycle and revocation.

The ``sessions`` table is the only source of truth: a token is honoured
only while a live row carries that exact string, whatever its signature
says. A row is live while ``expires_at`` lies in the future and its user
exists and is active.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import Select, delete, or_, select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from ozmevsim.core.config import settings
from ozmevsim.core.exceptions import (
    InvalidCredentials,
    SessionNotFound,
    StoreUnavailable,
    TokenInvalid,
)
from ozmevsim.core.security import (
    TokenPair,
    dummy_verify_password,
    issue_token_pair,
    verify_access_token,
    verify_password,
    verify_refresh_token,
)
from ozmevsim.models.session import UserSession
from ozmevsim.models.user import User
from ozmevsim.schemas.user import UserRead

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: UserRead
    session: UserSession
    tokens: TokenPair


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def _store_errors() -> Iterator[None]:
    """Translate driver-level failures into a generic StoreUnavailable."""
    try:
        yield
    except DBAPIError as exc:
        logger.error("Session store failure: %s", exc, exc_info=True)
        raise StoreUnavailable() from exc


def _live_sessions(now: datetime) -> Select:
    return (
        select(UserSession)
        .join(User, User.id == UserSession.user_id)
        .where(UserSession.expires_at > now, User.is_active.is_(True))
    )


# ── Credentials ─────────────────────────────────────────────────────
async def authenticate(db: AsyncSession, email: str, password: str) -> UserRead:
    """Return the user for a correct email/password pair of an active account.

    Unknown email, inactive account and wrong password all raise the same
    ``InvalidCredentials``. Emails are compared after strip + lower-case.
    """
    email = email.strip().lower()
    with _store_errors():
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

    if user is None:
        dummy_verify_password()
        logger.info("Login rejected: unknown account %s", email)
        raise InvalidCredentials()

    password_ok = verify_password(password, user.hashed_password)
    if not password_ok or not user.is_active:
        logger.info("Login rejected for %s", email)
        raise InvalidCredentials()

    return UserRead.model_validate(user)


# ── Session lifecycle ───────────────────────────────────────────────
async def create_session(
    db: AsyncSession,
    user_id: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[UserSession, TokenPair]:
    """Mint a token pair and persist it as a new session row."""
    tokens = issue_token_pair(user_id)
    session = UserSession(
        user_id=user_id,
        token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_at=_utcnow() + timedelta(days=settings.SESSION_EXPIRE_DAYS),
        user_agent=user_agent[:512] if user_agent else None,
        ip_address=ip_address[:45] if ip_address else None,
    )
    with _store_errors():
        db.add(session)
        await db.commit()
    return session, tokens


async def login(
    db: AsyncSession,
    email: str,
    password: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> LoginResult:
    user = await authenticate(db, email, password)

    now = _utcnow()
    with _store_errors():
        await db.execute(update(User).where(User.id == user.id).values(last_login=now))
    session, tokens = await create_session(db, user.id, user_agent, ip_address)

    logger.info("Login succeeded for %s (session %s)", user.email, session.id)
    return LoginResult(
        user=user.model_copy(update={"last_login": now}),
        session=session,
        tokens=tokens,
    )


async def get_session(db: AsyncSession, access_token: str | None) -> UserSession | None:
    """Live session carrying *access_token*, or ``None``."""
    if not access_token:
        return None
    subject = verify_access_token(access_token)
    if subject is None:
        return None

    with _store_errors():
        result = await db.execute(
            _live_sessions(_utcnow()).where(
                UserSession.token == access_token,
                UserSession.user_id == subject,
            )
        )
        return result.scalar_one_or_none()


async def get_current_user(db: AsyncSession, access_token: str | None) -> UserRead | None:
    if not access_token:
        return None
    subject = verify_access_token(access_token)
    if subject is None:
        return None

    with _store_errors():
        result = await db.execute(
            select(User)
            .join(UserSession, UserSession.user_id == User.id)
            .where(
                UserSession.token == access_token,
                UserSession.user_id == subject,
                UserSession.expires_at > _utcnow(),
                User.is_active.is_(True),
            )
        )
        user = result.scalar_one_or_none()
    if user is None:
        return None
    return UserRead.model_validate(user)


async def refresh_session(db: AsyncSession, refresh_token: str | None) -> TokenPair:
    """Rotate the session holding *refresh_token* to a brand-new token pair.

    The row is overwritten in place, so the previous access and refresh
    tokens stop matching immediately. Concurrent refreshes of one row are
    last-writer-wins. The absolute expiry is left untouched.
    """
    subject = verify_refresh_token(refresh_token) if refresh_token else None
    if subject is None:
        raise TokenInvalid()

    with _store_errors():
        result = await db.execute(
            _live_sessions(_utcnow()).where(
                UserSession.refresh_token == refresh_token,
                UserSession.user_id == subject,
            )
        )
        session = result.scalar_one_or_none()
    if session is None:
        logger.info("Refresh rejected: no live session for user %s", subject)
        raise SessionNotFound()

    tokens = issue_token_pair(session.user_id)
    with _store_errors():
        session.token = tokens.access_token
        session.refresh_token = tokens.refresh_token
        await db.commit()

    logger.info("Session %s rotated", session.id)
    return tokens


async def destroy_session(
    db: AsyncSession,
    access_token: str | None,
    refresh_token: str | None = None,
) -> bool:
    """Delete the caller's session; ``False`` when there was none to delete.

    The access token locates the row; once it has lapsed, the refresh token
    is used instead so an idle client can still end its session.
    """
    session = await get_session(db, access_token)
    if session is None and refresh_token:
        subject = verify_refresh_token(refresh_token)
        if subject is not None:
            with _store_errors():
                result = await db.execute(
                    select(UserSession).where(
                        UserSession.refresh_token == refresh_token,
                        UserSession.user_id == subject,
                    )
                )
                session = result.scalar_one_or_none()
    if session is None:
        return False

    with _store_errors():
        await db.delete(session)
        await db.commit()
    logger.info("Session %s destroyed", session.id)
    return True


# ── Administration ──────────────────────────────────────────────────
async def list_user_sessions(db: AsyncSession, user_id: str) -> list[UserSession]:
    with _store_errors():
        result = await db.execute(
            select(UserSession)
            .where(UserSession.user_id == user_id, UserSession.expires_at > _utcnow())
            .order_by(UserSession.created_at.desc())
        )
        return list(result.scalars().all())


async def revoke_user_sessions(db: AsyncSession, user_id: str) -> int:
    """Delete every session of *user_id*; takes effect on the next request."""
    with _store_errors():
        result = await db.execute(
            delete(UserSession)
            .where(UserSession.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    revoked = result.rowcount or 0
    logger.info("Revoked %d session(s) of user %s", revoked, user_id)
    return revoked


async def purge_expired_sessions(db: AsyncSession) -> int:
    """Sweep expired and orphaned rows. Lookups never depend on this running."""
    with _store_errors():
        result = await db.execute(
            delete(UserSession).where(
                or_(
                    UserSession.expires_at <= _utcnow(),
                    UserSession.user_id.not_in(select(User.id)),
                )
            ).execution_options(synchronize_session=False)
        )
        await db.commit()
    purged = result.rowcount or 0
    if purged:
        logger.info("Purged %d expired session(s)", purged)
    return purged
