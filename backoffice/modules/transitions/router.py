"""Transition API router."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from backoffice.modules.identity.service import get_current_actor
from backoffice.modules.transitions.schemas import TransitionResult
from backoffice.modules.transitions.service import TransitionService, get_transition_service
from backoffice.shared.responses import ApiResponse

router = APIRouter(prefix="/transitions", tags=["transitions"])


@router.post(
    "/{subject_kind}/{subject_id}/{transition_kind}",
    response_model=ApiResponse[TransitionResult],
)
async def apply_transition(
    subject_kind: str,
    subject_id: str,
    transition_kind: str,
    params: dict[str, Any] | None = Body(default=None),
    service: TransitionService = Depends(get_transition_service),
    current_actor=Depends(get_current_actor),
) -> ApiResponse[TransitionResult]:
    """Apply a guarded status transition to a subject."""
    result = await service.apply(subject_kind, subject_id, transition_kind, current_actor, params)
    return ApiResponse(data=result)
