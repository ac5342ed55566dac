"""
Auth endpoints: login, current user, token refresh & logout.

Tokens travel only in HttpOnly cookies; response bodies never carry them.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ozmevsim.api.v1.deps import get_current_user, get_db, require_editor
from ozmevsim.core.config import settings
from ozmevsim.core.cookies import (
    clear_auth_cookies,
    read_access_token,
    read_refresh_token,
    set_auth_cookies,
)
from ozmevsim.core.exceptions import TokenInvalid
from ozmevsim.core.rate_limit import get_client_ip, get_user_agent, limiter
from ozmevsim.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    SessionUser,
)
from ozmevsim.schemas.user import UserRead
from ozmevsim.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Authenticate with email/password. Returns 200 OK with HttpOnly cookies."""
    result = await auth_service.login(
        db,
        body.email,
        body.password,
        user_agent=get_user_agent(request),
        ip_address=get_client_ip(request),
    )
    set_auth_cookies(response, result.tokens)
    return LoginResponse(user=SessionUser(**result.user.model_dump()))


@router.get("/me", response_model=MeResponse)
async def read_current_user(
    current_user: UserRead = Depends(get_current_user),
) -> MeResponse:
    """Return the profile of the caller's live session."""
    return MeResponse(data=SessionUser(**current_user.model_dump()))


@router.post("/refresh", response_model=MessageResponse)
@limiter.limit(settings.REFRESH_RATE_LIMIT)
async def refresh(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Rotate the session's token pair using the refresh cookie."""
    try:
        tokens = await auth_service.refresh_session(db, read_refresh_token(request))
    except TokenInvalid as exc:
        failed = JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "success": False},
        )
        clear_auth_cookies(failed)
        return failed

    set_auth_cookies(response, tokens)
    return MessageResponse(message="Oturum yenilendi")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """End the caller's session. Succeeds whether or not a session existed."""
    destroyed = await auth_service.destroy_session(
        db,
        read_access_token(request),
        read_refresh_token(request),
    )
    if not destroyed:
        logger.debug("Logout without a live session")
    clear_auth_cookies(response)
    return MessageResponse(message="Başarıyla çıkış yapıldı")


@router.get("/admin-access", response_model=MeResponse)
async def admin_access(
    current_user: UserRead = Depends(require_editor),
) -> MeResponse:
    """Gate for the admin panel: 200 for editors and administrators, 403 otherwise."""
    return MeResponse(data=SessionUser(**current_user.model_dump()))
