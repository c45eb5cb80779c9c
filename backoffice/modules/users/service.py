"""Platform user business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.access import authorize, is_super_admin
from backoffice.core.database import get_db_session, run_read_with_retry
from backoffice.core.enums import AccessLevelEnum, AuditActionEnum, SubjectKindEnum, UserRoleEnum
from backoffice.modules.audit.models import AuditRecord
from backoffice.modules.audit.service import AuditService, build_audit_service
from backoffice.modules.users.models import User
from backoffice.modules.users.repository import UserRepository
from backoffice.modules.users.schemas import UserDetail, UserNotesUpdate
from backoffice.shared.exceptions import ForbiddenException, NotFoundException
from backoffice.shared.pagination import PaginationParams
from backoffice.shared.utils import excerpt

logger = logging.getLogger(__name__)


class UserService:
    """User detail, admin notes and activity timeline."""

    def __init__(self, repository: UserRepository, audit_service: AuditService) -> None:
        self.repository = repository
        self.audit_service = audit_service

    async def get_detail(self, actor, user_id: UUID) -> UserDetail:
        """User profile with activity counters and wallet balance."""
        authorize(actor, AccessLevelEnum.ADMIN)

        async def _load() -> UserDetail:
            user = await self.repository.get_user(user_id)
            if user is None:
                raise NotFoundException("User not found")
            counts = await self.repository.get_activity_counts(user_id)
            balance = await self.repository.get_coin_balance(user_id)
            return UserDetail.model_validate(user).model_copy(
                update={**counts, "coin_balance": balance},
            )

        return await run_read_with_retry(self.repository.session, _load)

    async def update_notes(self, actor, user_id: UUID, payload: UserNotesUpdate) -> User:
        """Replace the internal admin notes on a user."""
        authorize(actor, AccessLevelEnum.ADMIN)

        user = await self.repository.get_user(user_id, for_update=True)
        if user is None:
            raise NotFoundException("User not found")
        if user.role == UserRoleEnum.SUPER_ADMIN and not is_super_admin(actor):
            raise ForbiddenException("Only a super admin can annotate a super admin user")

        previous = user.admin_notes
        await self.repository.update_notes(user, payload.admin_notes)
        await self.audit_service.record(
            actor_id=actor.id,
            action=AuditActionEnum.USER_NOTES_UPDATED,
            subject_kind=SubjectKindEnum.USER,
            subject_id=str(user.id),
            description=f"Updated admin notes for {user.username}",
            details={"previous": excerpt(previous), "current": excerpt(payload.admin_notes)},
            affected_user_id=user.id,
        )
        logger.info("Admin notes updated: user_id=%s by=%s", user.id, actor.id)
        return user

    async def timeline(
        self,
        actor,
        user_id: UUID,
        pagination: PaginationParams,
    ) -> tuple[list[AuditRecord], int]:
        """Audit records that targeted or affected the user, newest first."""
        authorize(actor, AccessLevelEnum.ADMIN)
        if await self.repository.get_user(user_id) is None:
            raise NotFoundException("User not found")
        return await self.audit_service.user_timeline(actor, user_id, pagination)


async def get_user_service(session: AsyncSession = Depends(get_db_session)) -> UserService:
    """Dependency provider for user service."""
    return UserService(UserRepository(session), build_audit_service(session))
