"""
User administration endpoints: ADMIN role only.

Users are never hard-deleted: DELETE deactivates the account. Deactivation
and role-independent revocation both drop the user's sessions, so the change
takes effect on the user's very next request.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ozmevsim.api.v1.deps import get_db, require_admin
from ozmevsim.core.exceptions import EmailAlreadyRegistered
from ozmevsim.core.security import get_password_hash
from ozmevsim.models.user import ROLE_ADMIN, User
from ozmevsim.schemas.user import (
    DeleteResponse,
    RevokeResponse,
    SessionRead,
    UserCreate,
    UserRead,
    UserUpdate,
)
from ozmevsim.services import auth as auth_service

router = APIRouter(tags=["users"])
logger = logging.getLogger(__name__)

SELF_LOCKOUT_MESSAGE = "Kendi hesabınızı devre dışı bırakamazsınız"


async def _get_user_or_404(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="Kullanıcı bulunamadı")
    return user


@router.post("/users", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: UserRead = Depends(require_admin),
) -> User:
    """Create a new user account (admin only)."""
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise EmailAlreadyRegistered()

    user = User(
        email=body.email,
        hashed_password=get_password_hash(body.password),
        name=body.name,
        role=body.role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s (%s) created by %s", user.email, user.role, admin.email)
    return user


@router.get("/users", response_model=list[UserRead])
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    _admin: UserRead = Depends(require_admin),
) -> list[User]:
    result = await db.execute(
        select(User).order_by(User.created_at.desc(), User.email).offset(skip).limit(limit)
    )
    return list(result.scalars().all())


@router.get("/users/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: UserRead = Depends(require_admin),
) -> User:
    return await _get_user_or_404(db, user_id)


@router.patch("/users/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: UserRead = Depends(require_admin),
) -> User:
    """Change name, role, password or active flag."""
    user = await _get_user_or_404(db, user_id)
    changes = body.model_dump(exclude_unset=True)

    if user.id == admin.id and (
        changes.get("is_active") is False or changes.get("role") not in (None, ROLE_ADMIN)
    ):
        raise HTTPException(status_code=400, detail=SELF_LOCKOUT_MESSAGE)

    password = changes.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)
    for field, value in changes.items():
        if value is not None:
            setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    logger.info("User %s updated by %s: %s", user.email, admin.email, sorted(changes))

    if not user.is_active or password:
        await auth_service.revoke_user_sessions(db, user.id)
    return user


@router.delete("/users/{user_id}", response_model=DeleteResponse)
async def deactivate_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: UserRead = Depends(require_admin),
) -> DeleteResponse:
    """Soft-delete: deactivate the account and end all of its sessions."""
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail=SELF_LOCKOUT_MESSAGE)
    user = await _get_user_or_404(db, user_id)
    user.is_active = False
    await db.commit()
    await auth_service.revoke_user_sessions(db, user.id)
    logger.info("User %s deactivated by %s", user.email, admin.email)
    return DeleteResponse(success=True, message="Kullanıcı devre dışı bırakıldı")


@router.get("/users/{user_id}/sessions", response_model=list[SessionRead])
async def list_sessions(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: UserRead = Depends(require_admin),
):
    await _get_user_or_404(db, user_id)
    return await auth_service.list_user_sessions(db, user_id)


@router.delete("/users/{user_id}/sessions", response_model=RevokeResponse)
async def revoke_sessions(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: UserRead = Depends(require_admin),
) -> RevokeResponse:
    """Admin revocation: the user's tokens stop working immediately."""
    await _get_user_or_404(db, user_id)
    revoked = await auth_service.revoke_user_sessions(db, user_id)
    logger.info("Sessions of %s revoked by %s", user_id, admin.email)
    return RevokeResponse(revoked=revoked)


@router.delete("/sessions/expired", response_model=RevokeResponse)
async def purge_expired_sessions(
    db: AsyncSession = Depends(get_db),
    _admin: UserRead = Depends(require_admin),
) -> RevokeResponse:
    """Expiry sweep on demand."""
    purged = await auth_service.purge_expired_sessions(db)
    return RevokeResponse(revoked=purged)
