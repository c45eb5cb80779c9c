"""Audit business logic layer."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.access import authorize
from backoffice.core.config import get_settings
from backoffice.core.database import get_db_session, run_read_with_retry
from backoffice.core.enums import AccessLevelEnum
from backoffice.core.metrics import AUDIT_WRITE_FAILURES_TOTAL
from backoffice.modules.audit.models import AuditRecord
from backoffice.modules.audit.repository import AuditRepository
from backoffice.modules.audit.schemas import AuditFilters
from backoffice.shared.exceptions import InternalException, NotFoundException
from backoffice.shared.pagination import PaginationParams

logger = logging.getLogger(__name__)


class AuditService:
    """Append-only writer and reader for admin activity."""

    def __init__(self, repository: AuditRepository, failure_mode: str = "fail_open") -> None:
        self.repository = repository
        self.failure_mode = failure_mode

    async def record(
        self,
        *,
        actor_id: UUID | None,
        action: str,
        subject_kind: str,
        subject_id: str | None,
        description: str,
        details: dict[str, Any] | None = None,
        affected_user_id: UUID | None = None,
    ) -> AuditRecord:
        """Insert a record in the caller's transaction; failures propagate."""
        return await self.repository.create(
            actor_id=actor_id,
            action=action,
            subject_kind=subject_kind,
            subject_id=subject_id,
            description=description,
            details=details or {},
            affected_user_id=affected_user_id,
        )

    async def record_best_effort(
        self,
        *,
        actor_id: UUID | None,
        action: str,
        subject_kind: str,
        subject_id: str | None,
        description: str,
        details: dict[str, Any] | None = None,
        affected_user_id: UUID | None = None,
    ) -> AuditRecord | None:
        """Insert a record for an auxiliary event without blocking the primary action.

        The insert runs in a savepoint. In ``fail_open`` mode a failure is
        logged and counted and ``None`` is returned; in ``fail_closed`` mode
        it is raised as ``InternalException``.
        """
        try:
            return await self.repository.create_in_savepoint(
                actor_id=actor_id,
                action=action,
                subject_kind=subject_kind,
                subject_id=subject_id,
                description=description,
                details=details or {},
                affected_user_id=affected_user_id,
            )
        except SQLAlchemyError as exc:
            AUDIT_WRITE_FAILURES_TOTAL.labels(action=action).inc()
            if self.failure_mode == "fail_closed":
                logger.error("Audit write failed for action=%s: %s", action, exc)
                raise InternalException("Audit write failed") from exc
            logger.warning("Best-effort audit write skipped for action=%s: %s", action, exc)
            return None

    async def list_records(
        self,
        actor,
        filters: AuditFilters,
        pagination: PaginationParams,
    ) -> tuple[list[AuditRecord], int]:
        """List activity newest first (admin only)."""
        authorize(actor, AccessLevelEnum.ADMIN)
        return await run_read_with_retry(
            self.repository.session,
            lambda: self.repository.list_records(filters, pagination.limit, pagination.offset),
        )

    async def get_record(self, actor, record_id: UUID) -> AuditRecord:
        authorize(actor, AccessLevelEnum.ADMIN)
        record = await self.repository.get(record_id)
        if record is None:
            raise NotFoundException("Audit record not found")
        return record

    async def subject_timeline(
        self,
        actor,
        subject_id: str,
        pagination: PaginationParams,
    ) -> tuple[list[AuditRecord], int]:
        """Records about one subject, newest first."""
        authorize(actor, AccessLevelEnum.ADMIN)
        return await run_read_with_retry(
            self.repository.session,
            lambda: self.repository.list_for_subject(subject_id, pagination.limit, pagination.offset),
        )

    async def user_timeline(
        self,
        actor,
        user_id: UUID,
        pagination: PaginationParams,
    ) -> tuple[list[AuditRecord], int]:
        """Records that targeted or affected one user, newest first."""
        authorize(actor, AccessLevelEnum.ADMIN)
        return await run_read_with_retry(
            self.repository.session,
            lambda: self.repository.list_for_user(user_id, pagination.limit, pagination.offset),
        )


def build_audit_service(session: AsyncSession) -> AuditService:
    """Construct an audit service bound to the request session."""
    return AuditService(AuditRepository(session), failure_mode=get_settings().audit_failure_mode)


async def get_audit_service(session: AsyncSession = Depends(get_db_session)) -> AuditService:
    """Dependency provider for audit service."""
    return build_audit_service(session)
