"""Generic entity list API router."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from backoffice.modules.entities.service import EntityService, get_entity_service
from backoffice.modules.identity.service import get_current_actor
from backoffice.shared.pagination import Page, build_page, get_pagination_params
from backoffice.shared.responses import ApiResponse

router = APIRouter(prefix="/entities", tags=["entities"])

RESERVED_PARAMS = frozenset({"page", "limit", "search", "sortBy", "sortOrder"})


@router.get("/{entity_kind}", response_model=Page[dict[str, Any]])
async def list_entities(
    entity_kind: str,
    request: Request,
    search: str | None = Query(default=None, max_length=200),
    pagination=Depends(get_pagination_params),
    service: EntityService = Depends(get_entity_service),
    current_actor=Depends(get_current_actor),
) -> Page[dict[str, Any]]:
    """List one entity kind with typed filters, allow-listed sort and search."""
    raw_filters = {
        key: value for key, value in request.query_params.items() if key not in RESERVED_PARAMS
    }
    items, total = await service.query(current_actor, entity_kind, raw_filters, search, pagination)
    return build_page(items, total, pagination)


@router.get("/{entity_kind}/{entity_id}", response_model=ApiResponse[dict[str, Any]])
async def get_entity(
    entity_kind: str,
    entity_id: UUID,
    service: EntityService = Depends(get_entity_service),
    current_actor=Depends(get_current_actor),
) -> ApiResponse[dict[str, Any]]:
    """Fetch one item of an entity kind."""
    return ApiResponse(data=await service.get(current_actor, entity_kind, entity_id))
