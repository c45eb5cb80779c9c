"""Audit ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import String, Text, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.core.database import Base, CreatedAtMixin, JSONType, UUIDMixin


class AuditRecord(UUIDMixin, CreatedAtMixin, Base):
    """Immutable record of one admin action.

    Actor and subject ids are stored without foreign keys so records
    outlive the rows they describe.
    """

    __tablename__ = "audit_records"

    actor_id: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True, index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    subject_kind: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    subject_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    affected_user_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)


class ImmutableAuditRecordError(RuntimeError):
    """Raised when code tries to change a stored audit record."""


@event.listens_for(AuditRecord, "before_update")
def _reject_audit_update(mapper, connection, target: AuditRecord) -> None:
    raise ImmutableAuditRecordError(f"Audit record {target.id} is append-only")


@event.listens_for(AuditRecord, "before_delete")
def _reject_audit_delete(mapper, connection, target: AuditRecord) -> None:
    raise ImmutableAuditRecordError(f"Audit record {target.id} cannot be deleted")
