"""Platform user ORM models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.core.database import Base, BaseModelMixin, enum_values
from backoffice.core.enums import CreatorApplicationStatusEnum, UserRoleEnum


class User(BaseModelMixin, Base):
    """Platform member managed by the back office."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    role: Mapped[UserRoleEnum] = mapped_column(
        SAEnum(
            UserRoleEnum,
            name="user_role_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=UserRoleEnum.USER,
        nullable=False,
        index=True,
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    is_suspended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    suspended_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    suspended_by: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    suspended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    suspension_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class CreatorApplication(BaseModelMixin, Base):
    """Request from a user to become a creator."""

    __tablename__ = "creator_applications"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[CreatorApplicationStatusEnum] = mapped_column(
        SAEnum(
            CreatorApplicationStatusEnum,
            name="creator_application_status_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=CreatorApplicationStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reviewed_by: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    review_note: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped[User] = relationship(lazy="raise")
