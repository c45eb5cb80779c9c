"""Payment schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from backoffice.core.enums import PaymentStatusEnum


class PaymentRead(BaseModel):
    """Payment output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    package_id: UUID | None
    amount: Decimal
    currency: str
    total_coins: int
    status: PaymentStatusEnum
    order_id: str
    transaction_id: str | None
    failure_reason: str | None
    completed_at: datetime | None
    refunded_by: UUID | None
    refunded_at: datetime | None
    created_at: datetime
    updated_at: datetime
