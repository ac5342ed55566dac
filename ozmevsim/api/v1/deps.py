"""
FastAPI dependencies: auth guards and database session.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ozmevsim.core.cookies import read_access_token
from ozmevsim.core.exceptions import InsufficientRole, TokenInvalid
from ozmevsim.db.session import async_session_factory
from ozmevsim.models.user import ROLE_ADMIN, ROLE_EDITOR
from ozmevsim.schemas.user import UserRead
from ozmevsim.services import auth as auth_service


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> UserRead:
    """Resolve the caller through the session store on every request."""
    user = await auth_service.get_current_user(db, read_access_token(request))
    if user is None:
        raise TokenInvalid()
    return user


async def require_editor(
    current_user: UserRead = Depends(get_current_user),
) -> UserRead:
    """Admin panel access: editors and administrators."""
    if current_user.role not in (ROLE_EDITOR, ROLE_ADMIN):
        raise InsufficientRole()
    return current_user


async def require_admin(
    current_user: UserRead = Depends(get_current_user),
) -> UserRead:
    """Only allow the ADMIN role to proceed."""
    if current_user.role != ROLE_ADMIN:
        raise InsufficientRole()
    return current_user
