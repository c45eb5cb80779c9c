"""Transition parameter and result schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backoffice.core.enums import ModerationActionEnum, SubjectKindEnum, SuspensionDurationEnum, TransitionKindEnum
from backoffice.shared.utils import ensure_utc, utc_now


class TransitionParams(BaseModel):
    """Base for per-transition parameter contracts."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class NoteParams(TransitionParams):
    note: str | None = Field(default=None, max_length=1000)


class OptionalReasonParams(TransitionParams):
    reason: str | None = Field(default=None, max_length=1000)


class ShortReasonParams(TransitionParams):
    """Reason of at least 5 characters (moderation actions)."""

    reason: str = Field(min_length=5, max_length=1000)


class LongReasonParams(TransitionParams):
    """Reason of at least 10 characters (account and money actions)."""

    reason: str = Field(min_length=10, max_length=1000)


class SuspendParams(LongReasonParams):
    """Suspension contract; temporary suspensions need a future expiry."""

    duration: SuspensionDurationEnum = SuspensionDurationEnum.PERMANENT
    expires_at: datetime | None = None

    @model_validator(mode="after")
    def validate_expiry(self) -> "SuspendParams":
        if self.duration == SuspensionDurationEnum.TEMPORARY:
            if self.expires_at is None:
                raise ValueError("expires_at is required for a temporary suspension")
            if ensure_utc(self.expires_at) <= utc_now():
                raise ValueError("expires_at must be in the future")
        elif self.expires_at is not None:
            raise ValueError("expires_at is only allowed for a temporary suspension")
        return self


class ResolveParams(TransitionParams):
    resolution: str = Field(min_length=5, max_length=2000)
    moderation_action: ModerationActionEnum = ModerationActionEnum.NO_ACTION
    note: str | None = Field(default=None, max_length=1000)


class RefundParams(LongReasonParams):
    note: str | None = Field(default=None, max_length=1000)


class TransitionResult(BaseModel):
    """Outcome of one applied transition."""

    subject_kind: SubjectKindEnum
    subject_id: UUID
    transition_kind: TransitionKindEnum
    from_status: str
    to_status: str
    audit_record_id: UUID
    subject: dict[str, Any]
