"""Catalog API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from backoffice.modules.catalog.schemas import (
    DiscountCodeCreate,
    DiscountCodeRead,
    DiscountCodeUpdate,
    GiftCreate,
    GiftRead,
    GiftUpdate,
)
from backoffice.modules.catalog.service import CatalogService, get_catalog_service
from backoffice.modules.identity.service import get_current_actor
from backoffice.shared.pagination import Page, build_page, get_page_params
from backoffice.shared.responses import ApiResponse

router = APIRouter(tags=["catalog"])


@router.post(
    "/discount-codes",
    response_model=ApiResponse[DiscountCodeRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_discount_code(
    payload: DiscountCodeCreate,
    current_actor=Depends(get_current_actor),
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[DiscountCodeRead]:
    """Create discount code."""
    discount_code = await service.create_discount_code(current_actor, payload)
    return ApiResponse(data=DiscountCodeRead.model_validate(discount_code))


@router.get("/discount-codes", response_model=Page[DiscountCodeRead])
async def list_discount_codes(
    current_actor=Depends(get_current_actor),
    pagination=Depends(get_page_params),
    service: CatalogService = Depends(get_catalog_service),
) -> Page[DiscountCodeRead]:
    items, total = await service.list_discount_codes(current_actor, pagination)
    return build_page([DiscountCodeRead.model_validate(item) for item in items], total, pagination)


@router.get("/discount-codes/{discount_code_id}", response_model=ApiResponse[DiscountCodeRead])
async def get_discount_code(
    discount_code_id: UUID,
    current_actor=Depends(get_current_actor),
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[DiscountCodeRead]:
    discount_code = await service.get_discount_code(current_actor, discount_code_id)
    return ApiResponse(data=DiscountCodeRead.model_validate(discount_code))


@router.patch("/discount-codes/{discount_code_id}", response_model=ApiResponse[DiscountCodeRead])
async def update_discount_code(
    discount_code_id: UUID,
    payload: DiscountCodeUpdate,
    current_actor=Depends(get_current_actor),
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[DiscountCodeRead]:
    """Update discount code."""
    discount_code = await service.update_discount_code(current_actor, discount_code_id, payload)
    return ApiResponse(data=DiscountCodeRead.model_validate(discount_code))


@router.delete("/discount-codes/{discount_code_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_discount_code(
    discount_code_id: UUID,
    current_actor=Depends(get_current_actor),
    service: CatalogService = Depends(get_catalog_service),
) -> Response:
    await service.delete_discount_code(current_actor, discount_code_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/gifts", response_model=ApiResponse[GiftRead], status_code=status.HTTP_201_CREATED)
async def create_gift(
    payload: GiftCreate,
    current_actor=Depends(get_current_actor),
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[GiftRead]:
    """Create gift."""
    gift = await service.create_gift(current_actor, payload)
    return ApiResponse(data=GiftRead.model_validate(gift))


@router.get("/gifts", response_model=Page[GiftRead])
async def list_gifts(
    current_actor=Depends(get_current_actor),
    pagination=Depends(get_page_params),
    service: CatalogService = Depends(get_catalog_service),
) -> Page[GiftRead]:
    items, total = await service.list_gifts(current_actor, pagination)
    return build_page([GiftRead.model_validate(item) for item in items], total, pagination)


@router.get("/gifts/{gift_id}", response_model=ApiResponse[GiftRead])
async def get_gift(
    gift_id: UUID,
    current_actor=Depends(get_current_actor),
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[GiftRead]:
    gift = await service.get_gift(current_actor, gift_id)
    return ApiResponse(data=GiftRead.model_validate(gift))


@router.patch("/gifts/{gift_id}", response_model=ApiResponse[GiftRead])
async def update_gift(
    gift_id: UUID,
    payload: GiftUpdate,
    current_actor=Depends(get_current_actor),
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[GiftRead]:
    """Update gift."""
    gift = await service.update_gift(current_actor, gift_id, payload)
    return ApiResponse(data=GiftRead.model_validate(gift))


@router.delete("/gifts/{gift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_gift(
    gift_id: UUID,
    current_actor=Depends(get_current_actor),
    service: CatalogService = Depends(get_catalog_service),
) -> Response:
    await service.delete_gift(current_actor, gift_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
