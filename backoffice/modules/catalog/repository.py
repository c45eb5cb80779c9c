"""Catalog repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.modules.catalog.models import DiscountCode, Gift


class CatalogRepository:
    """DB operations for discount codes and gifts."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_discount_code(self, **fields) -> DiscountCode:
        discount_code = DiscountCode(**fields)
        self.session.add(discount_code)
        await self.session.flush()
        return discount_code

    async def get_discount_code(self, discount_code_id: UUID, for_update: bool = False) -> DiscountCode | None:
        stmt = select(DiscountCode).where(DiscountCode.id == discount_code_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return await self.session.scalar(stmt)

    async def get_discount_code_by_code(self, code: str) -> DiscountCode | None:
        return await self.session.scalar(select(DiscountCode).where(DiscountCode.code == code))

    async def list_discount_codes(self, limit: int, offset: int) -> tuple[list[DiscountCode], int]:
        stmt = (
            select(DiscountCode)
            .order_by(DiscountCode.created_at.desc(), DiscountCode.id.desc())
            .limit(limit)
            .offset(offset)
        )
        items = (await self.session.scalars(stmt)).all()
        total = await self.session.scalar(select(func.count()).select_from(DiscountCode))
        return list(items), int(total or 0)

    async def create_gift(self, **fields) -> Gift:
        gift = Gift(**fields)
        self.session.add(gift)
        await self.session.flush()
        return gift

    async def get_gift(self, gift_id: UUID, for_update: bool = False) -> Gift | None:
        stmt = select(Gift).where(Gift.id == gift_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return await self.session.scalar(stmt)

    async def get_gift_by_name(self, name: str) -> Gift | None:
        return await self.session.scalar(select(Gift).where(func.lower(Gift.name) == name.lower()))

    async def list_gifts(self, limit: int, offset: int) -> tuple[list[Gift], int]:
        stmt = select(Gift).order_by(Gift.sort_order.asc(), Gift.name.asc(), Gift.id.asc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        total = await self.session.scalar(select(func.count()).select_from(Gift))
        return list(items), int(total or 0)

    async def update(self, instance, **changes):
        for key, value in changes.items():
            setattr(instance, key, value)
        await self.session.flush()
        return instance

    async def delete(self, instance) -> None:
        await self.session.delete(instance)
        await self.session.flush()
