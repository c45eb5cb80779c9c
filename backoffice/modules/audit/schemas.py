"""Audit schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backoffice.core.enums import AuditActionEnum, SubjectKindEnum
from backoffice.shared.utils import ensure_utc


class AuditFilters(BaseModel):
    """Activity log filters."""

    model_config = ConfigDict(extra="forbid")

    actor_id: UUID | None = None
    subject_id: str | None = None
    subject_kind: SubjectKindEnum | None = None
    action_kind: AuditActionEnum | None = None
    affected_user_id: UUID | None = None
    search: str | None = Field(default=None, max_length=200)
    start_date: datetime | None = None
    end_date: datetime | None = None

    @model_validator(mode="after")
    def validate_date_range(self) -> "AuditFilters":
        if self.start_date and self.end_date and ensure_utc(self.start_date) > ensure_utc(self.end_date):
            raise ValueError("startDate must not be after endDate")
        return self


class AuditRecordRead(BaseModel):
    """Audit record response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    actor_id: UUID | None
    action: str
    subject_kind: str
    subject_id: str | None
    affected_user_id: UUID | None
    description: str
    details: dict[str, Any]
    created_at: datetime
