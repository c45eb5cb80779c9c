"""Content ORM models: posts, comments, likes and live streams."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.core.database import Base, BaseModelMixin, CreatedAtMixin, UUIDMixin, enum_values
from backoffice.core.enums import ContentStatusEnum, PostTypeEnum, StreamStatusEnum


class Post(BaseModelMixin, Base):
    """User-authored post."""

    __tablename__ = "posts"

    author_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[PostTypeEnum] = mapped_column(
        SAEnum(
            PostTypeEnum,
            name="post_type_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=PostTypeEnum.TEXT,
        nullable=False,
    )
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    status: Mapped[ContentStatusEnum] = mapped_column(
        SAEnum(
            ContentStatusEnum,
            name="post_status_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=ContentStatusEnum.VISIBLE,
        nullable=False,
        index=True,
    )
    is_flagged: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    hidden_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    hidden_by: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    hidden_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    deleted_by: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Comment(BaseModelMixin, Base):
    """Comment on a post."""

    __tablename__ = "comments"

    post_id: Mapped[UUID] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ContentStatusEnum] = mapped_column(
        SAEnum(
            ContentStatusEnum,
            name="comment_status_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=ContentStatusEnum.VISIBLE,
        nullable=False,
        index=True,
    )
    hidden_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    hidden_by: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    hidden_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    deleted_by: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Like(UUIDMixin, CreatedAtMixin, Base):
    """Post like."""

    __tablename__ = "likes"
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_likes_post_user"),)

    post_id: Mapped[UUID] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class Stream(BaseModelMixin, Base):
    """Live stream session."""

    __tablename__ = "streams"

    host_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[StreamStatusEnum] = mapped_column(
        SAEnum(
            StreamStatusEnum,
            name="stream_status_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=StreamStatusEnum.LIVE,
        nullable=False,
        index=True,
    )
    viewer_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ended_by: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    end_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
