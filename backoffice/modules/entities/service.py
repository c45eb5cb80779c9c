"""Paginated entity query service."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.access import authorize
from backoffice.core.database import get_db_session, run_read_with_retry
from backoffice.modules.entities.registry import get_entity_definition
from backoffice.modules.entities.repository import EntityRepository
from backoffice.shared.exceptions import InvalidInputException, NotFoundException
from backoffice.shared.pagination import PaginationParams, validate_pagination
from backoffice.shared.validation import validate_model


class EntityService:
    """Role-gated list and detail reads over registered entity kinds."""

    def __init__(self, repository: EntityRepository) -> None:
        self.repository = repository

    async def query(
        self,
        actor,
        entity_kind: str,
        raw_filters: Mapping[str, Any],
        search: str | None,
        pagination: PaginationParams,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return one page of serialized items plus the unpaged total.

        Pages past the end are empty rather than an error.
        """
        definition = get_entity_definition(entity_kind)
        authorize(actor, definition.required_level)
        validate_pagination(pagination.page, pagination.limit)

        filters = validate_model(definition.filters_model, dict(raw_filters))
        sort_key = pagination.sort_by or definition.default_sort
        sort_column = definition.sort_fields.get(sort_key)
        if sort_column is None:
            allowed = ", ".join(sorted(definition.sort_fields))
            raise InvalidInputException(f"Cannot sort {definition.kind.value} by '{sort_key}'; allowed: {allowed}")

        search = search.strip() if search else None
        if search and definition.search is None:
            raise InvalidInputException(f"Search is not supported for {definition.kind.value}")

        items, total = await run_read_with_retry(
            self.repository.session,
            lambda: self.repository.query(
                definition,
                filters,
                search,
                sort_column,
                pagination.sort_order,
                pagination.limit,
                pagination.offset,
            ),
        )
        return [definition.read_schema.model_validate(item).model_dump(mode="json") for item in items], total

    async def get(self, actor, entity_kind: str, entity_id: UUID) -> dict[str, Any]:
        definition = get_entity_definition(entity_kind)
        authorize(actor, definition.required_level)
        item = await run_read_with_retry(
            self.repository.session,
            lambda: self.repository.get(definition, entity_id),
        )
        if item is None:
            raise NotFoundException(f"{definition.kind.value} item not found")
        return definition.read_schema.model_validate(item).model_dump(mode="json")


async def get_entity_service(session: AsyncSession = Depends(get_db_session)) -> EntityService:
    """Dependency provider for entity service."""
    return EntityService(EntityRepository(session))
