"""Pydantic schemas for login / session endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from ozmevsim.schemas.user import normalise_email


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        return normalise_email(v)


class SessionUser(BaseModel):
    id: str
    email: str
    name: str | None
    role: str


class LoginResponse(BaseModel):
    success: bool = True
    user: SessionUser


class MeResponse(BaseModel):
    success: bool = True
    data: SessionUser


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    db: bool
    redis: bool
