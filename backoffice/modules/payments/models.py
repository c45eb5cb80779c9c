"""Coin purchase, wallet and ledger ORM models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.core.database import Base, BaseModelMixin, CreatedAtMixin, UUIDMixin, enum_values
from backoffice.core.enums import PaymentStatusEnum

if TYPE_CHECKING:
    from backoffice.modules.users.models import User


class CoinPackage(BaseModelMixin, Base):
    """Purchasable coin bundle."""

    __tablename__ = "coin_packages"

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    coins: Mapped[int] = mapped_column(Integer, nullable=False)
    bonus_coins: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Payment(BaseModelMixin, Base):
    """Coin purchase made by a user."""

    __tablename__ = "payments"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    package_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("coin_packages.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    total_coins: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[PaymentStatusEnum] = mapped_column(
        SAEnum(
            PaymentStatusEnum,
            name="payment_status_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=PaymentStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    order_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    transaction_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    failure_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    refunded_by: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(lazy="raise")


class CoinWallet(BaseModelMixin, Base):
    """Per-user coin balance."""

    __tablename__ = "coin_wallets"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    balance: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class BalanceLedgerEntry(UUIDMixin, CreatedAtMixin, Base):
    """Signed coin movement caused by an admin balance adjustment."""

    __tablename__ = "balance_ledger_entries"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_id: Mapped[UUID] = mapped_column(
        ForeignKey("payments.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    delta: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    shortfall: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
