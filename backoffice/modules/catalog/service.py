"""Catalog business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.access import authorize
from backoffice.core.database import get_db_session, run_read_with_retry
from backoffice.core.enums import AccessLevelEnum, AuditActionEnum, DiscountTypeEnum, SubjectKindEnum
from backoffice.modules.audit.service import AuditService, build_audit_service
from backoffice.modules.catalog.models import DiscountCode, Gift
from backoffice.modules.catalog.repository import CatalogRepository
from backoffice.modules.catalog.schemas import (
    DiscountCodeCreate,
    DiscountCodeRead,
    DiscountCodeUpdate,
    GiftCreate,
    GiftRead,
    GiftUpdate,
)
from backoffice.shared.exceptions import ConflictException, InvalidInputException, NotFoundException
from backoffice.shared.pagination import PaginationParams
from backoffice.shared.utils import ensure_utc

logger = logging.getLogger(__name__)


class CatalogService:
    """Discount code and gift catalog management."""

    def __init__(self, repository: CatalogRepository, audit_service: AuditService) -> None:
        self.repository = repository
        self.audit_service = audit_service

    async def create_discount_code(self, actor, payload: DiscountCodeCreate) -> DiscountCode:
        """Create a discount code; codes are stored upper-cased and must be unique."""
        authorize(actor, AccessLevelEnum.ADMIN)
        if await self.repository.get_discount_code_by_code(payload.code) is not None:
            raise ConflictException(f"Discount code {payload.code} already exists")

        discount_code = await self.repository.create_discount_code(
            **payload.model_dump(),
            created_by=actor.id,
        )
        await self._audit(
            actor,
            AuditActionEnum.CREATE_DISCOUNT_CODE,
            SubjectKindEnum.DISCOUNT_CODE,
            discount_code.id,
            f"Created discount code {discount_code.code}",
            DiscountCodeRead.model_validate(discount_code).model_dump(mode="json"),
        )
        return discount_code

    async def get_discount_code(self, actor, discount_code_id: UUID) -> DiscountCode:
        authorize(actor, AccessLevelEnum.ADMIN)
        discount_code = await run_read_with_retry(
            self.repository.session,
            lambda: self.repository.get_discount_code(discount_code_id),
        )
        if discount_code is None:
            raise NotFoundException("Discount code not found")
        return discount_code

    async def list_discount_codes(self, actor, pagination: PaginationParams) -> tuple[list[DiscountCode], int]:
        authorize(actor, AccessLevelEnum.ADMIN)
        return await run_read_with_retry(
            self.repository.session,
            lambda: self.repository.list_discount_codes(pagination.limit, pagination.offset),
        )

    async def update_discount_code(
        self,
        actor,
        discount_code_id: UUID,
        payload: DiscountCodeUpdate,
    ) -> DiscountCode:
        """Apply a partial update; the merged row must still be a valid discount."""
        authorize(actor, AccessLevelEnum.ADMIN)
        discount_code = await self.repository.get_discount_code(discount_code_id, for_update=True)
        if discount_code is None:
            raise NotFoundException("Discount code not found")

        changes = payload.model_dump(exclude_unset=True)
        for required in ("discount_type", "discount_value"):
            if required in changes and changes[required] is None:
                raise InvalidInputException(f"{required} cannot be cleared")

        discount_type = changes.get("discount_type", discount_code.discount_type)
        discount_value = changes.get("discount_value", discount_code.discount_value)
        if discount_type == DiscountTypeEnum.PERCENTAGE and discount_value > 100:
            raise InvalidInputException("percentage discount_value must not exceed 100")

        starts_at = changes.get("starts_at", discount_code.starts_at)
        expires_at = changes.get("expires_at", discount_code.expires_at)
        if starts_at and expires_at and ensure_utc(starts_at) >= ensure_utc(expires_at):
            raise InvalidInputException("expires_at must be after starts_at")

        await self.repository.update(discount_code, **changes)
        await self._audit(
            actor,
            AuditActionEnum.UPDATE_DISCOUNT_CODE,
            SubjectKindEnum.DISCOUNT_CODE,
            discount_code.id,
            f"Updated discount code {discount_code.code}",
            {"changes": payload.model_dump(mode="json", exclude_unset=True)},
        )
        return discount_code

    async def delete_discount_code(self, actor, discount_code_id: UUID) -> None:
        authorize(actor, AccessLevelEnum.ADMIN)
        discount_code = await self.repository.get_discount_code(discount_code_id, for_update=True)
        if discount_code is None:
            raise NotFoundException("Discount code not found")

        snapshot = DiscountCodeRead.model_validate(discount_code).model_dump(mode="json")
        await self.repository.delete(discount_code)
        await self._audit(
            actor,
            AuditActionEnum.DELETE_DISCOUNT_CODE,
            SubjectKindEnum.DISCOUNT_CODE,
            discount_code_id,
            f"Deleted discount code {snapshot['code']}",
            snapshot,
        )

    async def create_gift(self, actor, payload: GiftCreate) -> Gift:
        authorize(actor, AccessLevelEnum.ADMIN)
        if await self.repository.get_gift_by_name(payload.name) is not None:
            raise ConflictException(f"Gift {payload.name} already exists")

        gift = await self.repository.create_gift(**payload.model_dump())
        await self._audit(
            actor,
            AuditActionEnum.CREATE_GIFT,
            SubjectKindEnum.GIFT,
            gift.id,
            f"Created gift {gift.name}",
            GiftRead.model_validate(gift).model_dump(mode="json"),
        )
        return gift

    async def get_gift(self, actor, gift_id: UUID) -> Gift:
        authorize(actor, AccessLevelEnum.ADMIN)
        gift = await run_read_with_retry(self.repository.session, lambda: self.repository.get_gift(gift_id))
        if gift is None:
            raise NotFoundException("Gift not found")
        return gift

    async def list_gifts(self, actor, pagination: PaginationParams) -> tuple[list[Gift], int]:
        authorize(actor, AccessLevelEnum.ADMIN)
        return await run_read_with_retry(
            self.repository.session,
            lambda: self.repository.list_gifts(pagination.limit, pagination.offset),
        )

    async def update_gift(self, actor, gift_id: UUID, payload: GiftUpdate) -> Gift:
        authorize(actor, AccessLevelEnum.ADMIN)
        gift = await self.repository.get_gift(gift_id, for_update=True)
        if gift is None:
            raise NotFoundException("Gift not found")

        changes = payload.model_dump(exclude_unset=True)
        for required in ("name", "coin_cost", "sort_order", "is_active"):
            if required in changes and changes[required] is None:
                raise InvalidInputException(f"{required} cannot be cleared")

        new_name = changes.get("name")
        if new_name and new_name.lower() != gift.name.lower():
            existing = await self.repository.get_gift_by_name(new_name)
            if existing is not None and existing.id != gift.id:
                raise ConflictException(f"Gift {new_name} already exists")

        await self.repository.update(gift, **changes)
        await self._audit(
            actor,
            AuditActionEnum.UPDATE_GIFT,
            SubjectKindEnum.GIFT,
            gift.id,
            f"Updated gift {gift.name}",
            {"changes": payload.model_dump(mode="json", exclude_unset=True)},
        )
        return gift

    async def delete_gift(self, actor, gift_id: UUID) -> None:
        authorize(actor, AccessLevelEnum.ADMIN)
        gift = await self.repository.get_gift(gift_id, for_update=True)
        if gift is None:
            raise NotFoundException("Gift not found")

        snapshot = GiftRead.model_validate(gift).model_dump(mode="json")
        await self.repository.delete(gift)
        await self._audit(
            actor,
            AuditActionEnum.DELETE_GIFT,
            SubjectKindEnum.GIFT,
            gift_id,
            f"Deleted gift {snapshot['name']}",
            snapshot,
        )

    async def _audit(self, actor, action, subject_kind, subject_id: UUID, description: str, details: dict) -> None:
        await self.audit_service.record(
            actor_id=actor.id,
            action=action,
            subject_kind=subject_kind,
            subject_id=str(subject_id),
            description=description,
            details=details,
        )
        logger.info("Catalog change: action=%s subject_id=%s by=%s", action, subject_id, actor.id)


async def get_catalog_service(session: AsyncSession = Depends(get_db_session)) -> CatalogService:
    """Dependency provider for catalog service."""
    return CatalogService(CatalogRepository(session), build_audit_service(session))
