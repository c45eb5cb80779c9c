"""Report schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from backoffice.core.enums import ModerationActionEnum, ReportReasonEnum, ReportStatusEnum


class ReportRead(BaseModel):
    """Report output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    reporter_id: UUID
    reported_user_id: UUID | None
    target_type: str
    target_id: str | None
    reason: ReportReasonEnum
    description: str | None
    status: ReportStatusEnum
    reviewed_by: UUID | None
    reviewed_at: datetime | None
    resolution: str | None
    moderation_action: ModerationActionEnum | None
    created_at: datetime
    updated_at: datetime
