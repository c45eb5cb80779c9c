"""Identity schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from backoffice.core.enums import AdminRoleEnum


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    """Refresh token payload."""

    refresh_token: str


class TokenPair(BaseModel):
    """Access + refresh JWT response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AdminCreate(BaseModel):
    """Actor provisioning request."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8, max_length=128)
    role: AdminRoleEnum = AdminRoleEnum.ADMIN


class AdminDelete(BaseModel):
    """Optional reason attached to an actor removal."""

    model_config = ConfigDict(extra="forbid")

    reason: str | None = Field(default=None, max_length=500)


class AdminRead(BaseModel):
    """Actor output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    role: AdminRoleEnum
    is_active: bool
    last_login_at: datetime | None
    login_count: int
    created_at: datetime
    updated_at: datetime
