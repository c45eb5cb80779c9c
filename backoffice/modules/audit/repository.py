"""Audit repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.enums import SubjectKindEnum
from backoffice.modules.audit.models import AuditRecord
from backoffice.modules.audit.schemas import AuditFilters
from backoffice.shared.utils import ensure_utc, like_pattern


class AuditRepository:
    """DB operations for the audit log."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        actor_id: UUID | None,
        action: str,
        subject_kind: str,
        subject_id: str | None,
        description: str,
        details: dict,
        affected_user_id: UUID | None = None,
    ) -> AuditRecord:
        record = AuditRecord(
            actor_id=actor_id,
            action=action,
            subject_kind=subject_kind,
            subject_id=subject_id,
            affected_user_id=affected_user_id,
            description=description,
            details=details,
        )
        self.session.add(record)
        await self.session.flush()
        return record

    async def create_in_savepoint(self, **fields) -> AuditRecord:
        """Insert inside a SAVEPOINT so a failure leaves the outer transaction usable."""
        async with self.session.begin_nested():
            return await self.create(**fields)

    async def get(self, record_id: UUID) -> AuditRecord | None:
        return await self.session.get(AuditRecord, record_id)

    async def list_records(
        self,
        filters: AuditFilters,
        limit: int,
        offset: int,
    ) -> tuple[list[AuditRecord], int]:
        stmt: Select[tuple[AuditRecord]] = select(AuditRecord)
        if filters.actor_id is not None:
            stmt = stmt.where(AuditRecord.actor_id == filters.actor_id)
        if filters.subject_id is not None:
            stmt = stmt.where(AuditRecord.subject_id == filters.subject_id)
        if filters.subject_kind is not None:
            stmt = stmt.where(AuditRecord.subject_kind == filters.subject_kind.value)
        if filters.action_kind is not None:
            stmt = stmt.where(AuditRecord.action == filters.action_kind.value)
        if filters.affected_user_id is not None:
            stmt = stmt.where(AuditRecord.affected_user_id == filters.affected_user_id)
        if filters.search:
            pattern = like_pattern(filters.search)
            stmt = stmt.where(
                or_(
                    AuditRecord.description.ilike(pattern, escape="\\"),
                    AuditRecord.action.ilike(pattern, escape="\\"),
                ),
            )
        if filters.start_date is not None:
            stmt = stmt.where(AuditRecord.created_at >= ensure_utc(filters.start_date))
        if filters.end_date is not None:
            stmt = stmt.where(AuditRecord.created_at <= ensure_utc(filters.end_date))
        return await self._page(stmt, limit, offset)

    async def list_for_subject(
        self,
        subject_id: str,
        limit: int,
        offset: int,
    ) -> tuple[list[AuditRecord], int]:
        stmt = select(AuditRecord).where(AuditRecord.subject_id == subject_id)
        return await self._page(stmt, limit, offset)

    async def list_for_user(
        self,
        user_id: UUID,
        limit: int,
        offset: int,
    ) -> tuple[list[AuditRecord], int]:
        stmt = select(AuditRecord).where(
            or_(
                AuditRecord.affected_user_id == user_id,
                and_(
                    AuditRecord.subject_kind == SubjectKindEnum.USER.value,
                    AuditRecord.subject_id == str(user_id),
                ),
            ),
        )
        return await self._page(stmt, limit, offset)

    async def _page(
        self,
        stmt: Select[tuple[AuditRecord]],
        limit: int,
        offset: int,
    ) -> tuple[list[AuditRecord], int]:
        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = (
            stmt.order_by(AuditRecord.created_at.desc(), AuditRecord.id.desc())
            .limit(limit)
            .offset(offset)
        )
        items = list((await self.session.scalars(stmt)).all())
        return items, total
