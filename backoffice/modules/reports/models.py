"""User report ORM models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.core.database import Base, BaseModelMixin, enum_values
from backoffice.core.enums import ModerationActionEnum, ReportReasonEnum, ReportStatusEnum


class Report(BaseModelMixin, Base):
    """Report filed by a user against content or another user."""

    __tablename__ = "reports"

    reporter_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reported_user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    target_type: Mapped[str] = mapped_column(String(32), nullable=False)
    target_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reason: Mapped[ReportReasonEnum] = mapped_column(
        SAEnum(
            ReportReasonEnum,
            name="report_reason_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=False,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ReportStatusEnum] = mapped_column(
        SAEnum(
            ReportStatusEnum,
            name="report_status_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=ReportStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    reviewed_by: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution: Mapped[str | None] = mapped_column(Text, nullable=True)
    moderation_action: Mapped[ModerationActionEnum | None] = mapped_column(
        SAEnum(
            ModerationActionEnum,
            name="moderation_action_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=True,
    )
