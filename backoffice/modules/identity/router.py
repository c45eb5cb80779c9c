"""Identity API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Body, Depends, status

from backoffice.core.enums import SubjectKindEnum, TransitionKindEnum
from backoffice.modules.identity.schemas import (
    AdminCreate,
    AdminDelete,
    AdminRead,
    LoginRequest,
    RefreshRequest,
    TokenPair,
)
from backoffice.modules.identity.service import IdentityService, get_current_actor, get_identity_service
from backoffice.modules.transitions.schemas import TransitionResult
from backoffice.modules.transitions.service import TransitionService, get_transition_service
from backoffice.shared.responses import ApiResponse

router = APIRouter(tags=["identity"])


@router.post("/auth/login", response_model=TokenPair)
async def login(
    payload: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> TokenPair:
    """Sign in by email/password and return JWT token pair."""
    return await service.login(payload)


@router.post("/auth/refresh", response_model=TokenPair)
async def refresh_tokens(
    payload: RefreshRequest,
    service: IdentityService = Depends(get_identity_service),
) -> TokenPair:
    """Rotate refresh token and issue new token pair."""
    return await service.refresh_tokens(payload.refresh_token)


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    payload: RefreshRequest,
    service: IdentityService = Depends(get_identity_service),
    current_actor=Depends(get_current_actor),
) -> None:
    """Revoke the refresh session."""
    await service.logout(current_actor, payload.refresh_token)


@router.get("/auth/me", response_model=AdminRead)
async def get_me(current_actor=Depends(get_current_actor)) -> AdminRead:
    """Return profile of authenticated actor."""
    return AdminRead.model_validate(current_actor)


@router.post("/admins", response_model=ApiResponse[AdminRead], status_code=status.HTTP_201_CREATED)
async def create_admin(
    payload: AdminCreate,
    service: IdentityService = Depends(get_identity_service),
    current_actor=Depends(get_current_actor),
) -> ApiResponse[AdminRead]:
    """Provision a new actor."""
    admin = await service.create_admin(current_actor, payload)
    return ApiResponse(data=AdminRead.model_validate(admin))


@router.delete("/admins/{admin_id}", response_model=ApiResponse[TransitionResult])
async def delete_admin(
    admin_id: UUID,
    payload: AdminDelete | None = Body(default=None),
    service: TransitionService = Depends(get_transition_service),
    current_actor=Depends(get_current_actor),
) -> ApiResponse[TransitionResult]:
    """Remove an actor through the guarded admin/delete transition."""
    params = payload.model_dump(exclude_none=True) if payload else {}
    result = await service.apply(
        SubjectKindEnum.ADMIN,
        admin_id,
        TransitionKindEnum.DELETE,
        current_actor,
        params,
    )
    return ApiResponse(data=result)
