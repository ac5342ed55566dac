"""Pydantic schemas for User CRUD."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ozmevsim.models.user import ROLE_USER, ROLES


def normalise_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("Invalid email address")
    return v


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=6, max_length=128)
    name: str | None = None
    role: str = ROLE_USER

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        if v not in ROLES:
            raise ValueError(f"Role must be one of: {ROLES}")
        return v

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        return normalise_email(v)


class UserRead(BaseModel):
    id: str
    email: str
    name: str | None
    role: str
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    name: str | None = None
    role: str | None = None
    is_active: bool | None = None
    password: str | None = Field(default=None, min_length=6, max_length=128)

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str | None) -> str | None:
        if v is not None and v not in ROLES:
            raise ValueError(f"Role must be one of: {ROLES}")
        return v


class SessionRead(BaseModel):
    """Session metadata for the admin screen; token strings stay server-side."""

    id: str
    user_id: str
    expires_at: datetime
    user_agent: str | None
    ip_address: str | None
    created_at: datetime | None

    model_config = {"from_attributes": True}


class RevokeResponse(BaseModel):
    success: bool = True
    revoked: int


class DeleteResponse(BaseModel):
    success: bool
    message: str
