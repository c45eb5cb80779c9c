"""Audit API router."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from backoffice.core.enums import AuditActionEnum, SubjectKindEnum
from backoffice.modules.audit.schemas import AuditFilters, AuditRecordRead
from backoffice.modules.audit.service import AuditService, get_audit_service
from backoffice.modules.identity.service import get_current_actor
from backoffice.shared.pagination import Page, build_page, get_page_params
from backoffice.shared.responses import ApiResponse
from backoffice.shared.validation import validate_model

router = APIRouter(prefix="/audit", tags=["audit"])


def get_audit_filters(
    actor_id: UUID | None = Query(default=None, alias="actorId"),
    subject_id: str | None = Query(default=None, alias="subjectId"),
    subject_kind: SubjectKindEnum | None = Query(default=None, alias="subjectKind"),
    action_kind: AuditActionEnum | None = Query(default=None, alias="actionKind"),
    affected_user_id: UUID | None = Query(default=None, alias="affectedUserId"),
    search: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> AuditFilters:
    """Collect activity log filters from camelCase query params."""
    return validate_model(
        AuditFilters,
        {
            "actor_id": actor_id,
            "subject_id": subject_id,
            "subject_kind": subject_kind,
            "action_kind": action_kind,
            "affected_user_id": affected_user_id,
            "search": search,
            "start_date": start_date,
            "end_date": end_date,
        },
    )


@router.get("", response_model=Page[AuditRecordRead])
async def list_records(
    filters: AuditFilters = Depends(get_audit_filters),
    pagination=Depends(get_page_params),
    service: AuditService = Depends(get_audit_service),
    current_actor=Depends(get_current_actor),
) -> Page[AuditRecordRead]:
    """List admin activity, newest first."""
    items, total = await service.list_records(current_actor, filters, pagination)
    serialized = [AuditRecordRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/subjects/{subject_id}/timeline", response_model=Page[AuditRecordRead])
async def subject_timeline(
    subject_id: str,
    pagination=Depends(get_page_params),
    service: AuditService = Depends(get_audit_service),
    current_actor=Depends(get_current_actor),
) -> Page[AuditRecordRead]:
    """Audit trail of one subject."""
    items, total = await service.subject_timeline(current_actor, subject_id, pagination)
    serialized = [AuditRecordRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/{record_id}", response_model=ApiResponse[AuditRecordRead])
async def get_record(
    record_id: UUID,
    service: AuditService = Depends(get_audit_service),
    current_actor=Depends(get_current_actor),
) -> ApiResponse[AuditRecordRead]:
    """Fetch one audit record."""
    record = await service.get_record(current_actor, record_id)
    return ApiResponse(data=AuditRecordRead.model_validate(record))
