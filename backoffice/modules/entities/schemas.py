"""Typed list filters per entity kind."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from backoffice.core.enums import (
    AdminRoleEnum,
    ContentStatusEnum,
    CreatorApplicationStatusEnum,
    DiscountCodeTypeEnum,
    DiscountTypeEnum,
    PaymentStatusEnum,
    PostTypeEnum,
    ReportReasonEnum,
    ReportStatusEnum,
    StreamStatusEnum,
    UserRoleEnum,
)
from backoffice.shared.utils import ensure_utc

# Filter fields other than these map 1:1 onto a column of the same name.
RANGE_FIELDS = frozenset({"created_from", "created_to"})


class EntityFilters(BaseModel):
    """Base filter model; accepts camelCase query keys."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    created_from: datetime | None = None
    created_to: datetime | None = None

    @model_validator(mode="after")
    def validate_created_range(self):
        if (
            self.created_from
            and self.created_to
            and ensure_utc(self.created_from) > ensure_utc(self.created_to)
        ):
            raise ValueError("createdFrom must not be after createdTo")
        return self


class UserFilters(EntityFilters):
    role: UserRoleEnum | None = None
    is_suspended: bool | None = None
    is_verified: bool | None = None


class CreatorApplicationFilters(EntityFilters):
    status: CreatorApplicationStatusEnum | None = None
    user_id: UUID | None = None


class PostFilters(EntityFilters):
    status: ContentStatusEnum | None = None
    type: PostTypeEnum | None = None
    author_id: UUID | None = None
    is_flagged: bool | None = None


class CommentFilters(EntityFilters):
    status: ContentStatusEnum | None = None
    post_id: UUID | None = None
    author_id: UUID | None = None


class StreamFilters(EntityFilters):
    status: StreamStatusEnum | None = None
    host_id: UUID | None = None


class ReportFilters(EntityFilters):
    status: ReportStatusEnum | None = None
    reason: ReportReasonEnum | None = None
    reporter_id: UUID | None = None
    reported_user_id: UUID | None = None


class PaymentFilters(EntityFilters):
    status: PaymentStatusEnum | None = None
    user_id: UUID | None = None
    package_id: UUID | None = None
    currency: str | None = None


class DiscountCodeFilters(EntityFilters):
    is_active: bool | None = None
    discount_type: DiscountTypeEnum | None = None
    code_type: DiscountCodeTypeEnum | None = None
    creator_id: UUID | None = None


class GiftFilters(EntityFilters):
    is_active: bool | None = None
    category: str | None = None


class GiftTransactionFilters(EntityFilters):
    gift_id: UUID | None = None
    sender_id: UUID | None = None
    receiver_id: UUID | None = None
    stream_id: UUID | None = None


class AdminFilters(EntityFilters):
    role: AdminRoleEnum | None = None
    is_active: bool | None = None
