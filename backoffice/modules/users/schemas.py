"""Platform user schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from backoffice.core.enums import CreatorApplicationStatusEnum, UserRoleEnum


class UserRead(BaseModel):
    """User output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    username: str
    display_name: str | None
    role: UserRoleEnum
    is_verified: bool
    is_suspended: bool
    suspended_reason: str | None
    suspended_by: UUID | None
    suspended_at: datetime | None
    suspension_expires_at: datetime | None
    admin_notes: str | None
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


class UserDetail(UserRead):
    """User output enriched with activity counters."""

    post_count: int = 0
    comment_count: int = 0
    stream_count: int = 0
    report_count: int = 0
    coin_balance: int = 0


class UserNotesUpdate(BaseModel):
    """Admin notes replacement payload."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    admin_notes: str | None = Field(default=None, max_length=5000)


class CreatorApplicationRead(BaseModel):
    """Creator application output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    status: CreatorApplicationStatusEnum
    bio: str | None
    category: str | None
    reviewed_by: UUID | None
    reviewed_at: datetime | None
    rejection_reason: str | None
    review_note: str | None
    created_at: datetime
    updated_at: datetime
