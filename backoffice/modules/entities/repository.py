"""Bounded list queries over registered entity kinds."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.enums import SortOrderEnum
from backoffice.modules.entities.registry import EntityDefinition
from backoffice.modules.entities.schemas import RANGE_FIELDS
from backoffice.shared.utils import ensure_utc, like_pattern


class EntityRepository:
    """DB operations for the generic list/detail endpoints."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def query(
        self,
        definition: EntityDefinition,
        filters: BaseModel,
        search: str | None,
        sort_column: Any,
        sort_order: SortOrderEnum,
        limit: int,
        offset: int,
    ) -> tuple[list[Any], int]:
        stmt = self._filtered(definition, filters, search)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        if sort_order == SortOrderEnum.ASC:
            ordering = (sort_column.asc(), definition.model.id.asc())
        else:
            ordering = (sort_column.desc(), definition.model.id.desc())
        stmt = stmt.order_by(*ordering).limit(limit).offset(offset)
        items = list((await self.session.scalars(stmt)).all())
        return items, total

    async def get(self, definition: EntityDefinition, entity_id: UUID) -> Any | None:
        return await self.session.get(definition.model, entity_id)

    @staticmethod
    def _filtered(definition: EntityDefinition, filters: BaseModel, search: str | None) -> Select:
        model = definition.model
        stmt = select(model)

        for name, value in filters.model_dump(exclude_none=True).items():
            if name in RANGE_FIELDS:
                continue
            stmt = stmt.where(getattr(model, name) == value)

        created_from = getattr(filters, "created_from", None)
        created_to = getattr(filters, "created_to", None)
        if created_from is not None:
            stmt = stmt.where(model.created_at >= ensure_utc(created_from))
        if created_to is not None:
            stmt = stmt.where(model.created_at <= ensure_utc(created_to))

        if search and definition.search is not None:
            stmt = stmt.where(definition.search(like_pattern(search)))
        return stmt
