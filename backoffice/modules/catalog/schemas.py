"""Catalog schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from backoffice.core.enums import DiscountCodeTypeEnum, DiscountTypeEnum
from backoffice.shared.utils import ensure_utc


class DiscountCodeBase(BaseModel):
    """Fields shared by discount code create and update."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @field_validator("code", check_fields=False)
    @classmethod
    def normalize_code(cls, value: str | None) -> str | None:
        return value.upper() if value is not None else value

    @model_validator(mode="after")
    def validate_discount(self):
        discount_type = getattr(self, "discount_type", None)
        discount_value = getattr(self, "discount_value", None)
        if (
            discount_type == DiscountTypeEnum.PERCENTAGE
            and discount_value is not None
            and discount_value > 100
        ):
            raise ValueError("percentage discount_value must not exceed 100")

        starts_at = getattr(self, "starts_at", None)
        expires_at = getattr(self, "expires_at", None)
        if starts_at and expires_at and ensure_utc(starts_at) >= ensure_utc(expires_at):
            raise ValueError("expires_at must be after starts_at")
        return self


class DiscountCodeCreate(DiscountCodeBase):
    """Create discount code request."""

    code: str = Field(min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    description: str | None = Field(default=None, max_length=1000)
    discount_type: DiscountTypeEnum
    discount_value: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    code_type: DiscountCodeTypeEnum = DiscountCodeTypeEnum.PROMOTIONAL
    creator_id: UUID | None = None
    max_uses: int | None = Field(default=None, ge=1)
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    is_active: bool = True


class DiscountCodeUpdate(DiscountCodeBase):
    """Partial discount code update; the code itself is immutable."""

    description: str | None = Field(default=None, max_length=1000)
    discount_type: DiscountTypeEnum | None = None
    discount_value: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    max_uses: int | None = Field(default=None, ge=1)
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    is_active: bool | None = None


class DiscountCodeRead(BaseModel):
    """Discount code output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    description: str | None
    discount_type: DiscountTypeEnum
    discount_value: Decimal
    code_type: DiscountCodeTypeEnum
    creator_id: UUID | None
    max_uses: int | None
    used_count: int
    starts_at: datetime | None
    expires_at: datetime | None
    is_active: bool
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime


class GiftCreate(BaseModel):
    """Create gift request."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=128)
    description: str | None = Field(default=None, max_length=1000)
    image_url: str | None = Field(default=None, max_length=512)
    coin_cost: int = Field(ge=1)
    category: str | None = Field(default=None, max_length=64)
    sort_order: int = 0
    is_active: bool = True


class GiftUpdate(BaseModel):
    """Partial gift update."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=128)
    description: str | None = Field(default=None, max_length=1000)
    image_url: str | None = Field(default=None, max_length=512)
    coin_cost: int | None = Field(default=None, ge=1)
    category: str | None = Field(default=None, max_length=64)
    sort_order: int | None = None
    is_active: bool | None = None


class GiftRead(BaseModel):
    """Gift output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    image_url: str | None
    coin_cost: int
    category: str | None
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class GiftTransactionRead(BaseModel):
    """Gift transaction output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    gift_id: UUID | None
    sender_id: UUID
    receiver_id: UUID
    stream_id: UUID | None
    quantity: int
    total_coins: int
    created_at: datetime
