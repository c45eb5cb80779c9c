"""Catalog ORM models: discount codes and virtual gifts."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.core.database import Base, BaseModelMixin, CreatedAtMixin, UUIDMixin, enum_values
from backoffice.core.enums import DiscountCodeTypeEnum, DiscountTypeEnum


class DiscountCode(BaseModelMixin, Base):
    """Discount applicable to coin purchases."""

    __tablename__ = "discount_codes"

    code: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    discount_type: Mapped[DiscountTypeEnum] = mapped_column(
        SAEnum(
            DiscountTypeEnum,
            name="discount_type_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    discount_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    code_type: Mapped[DiscountCodeTypeEnum] = mapped_column(
        SAEnum(
            DiscountCodeTypeEnum,
            name="discount_code_type_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=DiscountCodeTypeEnum.PROMOTIONAL,
        nullable=False,
    )
    creator_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    max_uses: Mapped[int | None] = mapped_column(Integer, nullable=True)
    used_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    starts_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    created_by: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)


class DiscountRedemption(UUIDMixin, CreatedAtMixin, Base):
    """One use of a discount code on a purchase."""

    __tablename__ = "discount_redemptions"

    discount_code_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("discount_codes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("payments.id", ondelete="SET NULL"),
        nullable=True,
    )
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)


class Gift(BaseModelMixin, Base):
    """Virtual gift sendable during streams and on posts."""

    __tablename__ = "gifts"

    name: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    coin_cost: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)


class GiftTransaction(UUIDMixin, CreatedAtMixin, Base):
    """Gift sent from one user to another."""

    __tablename__ = "gift_transactions"

    gift_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("gifts.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    sender_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    receiver_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stream_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("streams.id", ondelete="SET NULL"),
        nullable=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    total_coins: Mapped[int] = mapped_column(Integer, nullable=False)
