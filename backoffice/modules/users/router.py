"""Platform user API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from backoffice.modules.audit.schemas import AuditRecordRead
from backoffice.modules.identity.service import get_current_actor
from backoffice.modules.users.schemas import UserDetail, UserNotesUpdate, UserRead
from backoffice.modules.users.service import UserService, get_user_service
from backoffice.shared.pagination import Page, build_page, get_page_params
from backoffice.shared.responses import ApiResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=ApiResponse[UserDetail])
async def get_user(
    user_id: UUID,
    current_actor=Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserDetail]:
    """User detail with activity counters."""
    return ApiResponse(data=await service.get_detail(current_actor, user_id))


@router.patch("/{user_id}/notes", response_model=ApiResponse[UserRead])
async def update_notes(
    user_id: UUID,
    payload: UserNotesUpdate,
    current_actor=Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserRead]:
    """Replace the admin notes on a user."""
    user = await service.update_notes(current_actor, user_id, payload)
    return ApiResponse(data=UserRead.model_validate(user))


@router.get("/{user_id}/timeline", response_model=Page[AuditRecordRead])
async def user_timeline(
    user_id: UUID,
    current_actor=Depends(get_current_actor),
    pagination=Depends(get_page_params),
    service: UserService = Depends(get_user_service),
) -> Page[AuditRecordRead]:
    """Activity log entries concerning one user."""
    items, total = await service.timeline(current_actor, user_id, pagination)
    serialized = [AuditRecordRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)
