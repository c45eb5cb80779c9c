"""Content schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from backoffice.core.enums import ContentStatusEnum, PostTypeEnum, StreamStatusEnum


class PostRead(BaseModel):
    """Post output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    author_id: UUID
    type: PostTypeEnum
    content: str | None
    media_url: str | None
    status: ContentStatusEnum
    is_flagged: bool
    hidden_reason: str | None
    hidden_by: UUID | None
    hidden_at: datetime | None
    deleted_reason: str | None
    deleted_by: UUID | None
    deleted_at: datetime | None
    created_at: datetime
    updated_at: datetime


class CommentRead(BaseModel):
    """Comment output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: UUID
    author_id: UUID
    content: str
    status: ContentStatusEnum
    hidden_reason: str | None
    hidden_by: UUID | None
    hidden_at: datetime | None
    deleted_reason: str | None
    deleted_by: UUID | None
    deleted_at: datetime | None
    created_at: datetime
    updated_at: datetime


class StreamRead(BaseModel):
    """Stream output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    host_id: UUID
    title: str
    status: StreamStatusEnum
    viewer_count: int
    started_at: datetime | None
    ended_at: datetime | None
    ended_by: UUID | None
    end_reason: str | None
    created_at: datetime
    updated_at: datetime
