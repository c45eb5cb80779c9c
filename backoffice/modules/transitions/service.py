"""Guarded state transition service."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.access import authorize
from backoffice.core.config import get_settings
from backoffice.core.database import get_db_session
from backoffice.core.metrics import record_transition
from backoffice.modules.audit.service import AuditService, build_audit_service
from backoffice.modules.transitions.repository import TransitionRepository
from backoffice.modules.transitions.rules import TransitionContext, TransitionRule, current_status, get_rule
from backoffice.modules.transitions.schemas import TransitionResult
from backoffice.shared.exceptions import AppException, InvalidInputException, InvalidStateException, NotFoundException
from backoffice.shared.utils import utc_now
from backoffice.shared.validation import validate_model

logger = logging.getLogger(__name__)


def parse_subject_id(raw: str | UUID) -> UUID:
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw))
    except ValueError as exc:
        raise InvalidInputException(f"Malformed subject id: {raw}") from exc


class TransitionService:
    """Apply named status transitions with guards and one audit record each."""

    def __init__(
        self,
        repository: TransitionRepository,
        audit_service: AuditService,
        refund_policy: str = "reject",
    ) -> None:
        self.repository = repository
        self.audit_service = audit_service
        self.refund_policy = refund_policy

    async def apply(
        self,
        subject_kind: str,
        subject_id: str | UUID,
        transition_kind: str,
        actor: Any,
        params: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """Run one transition inside the caller's unit of work.

        Every failure raises before anything is committed; the request
        session rolls back partial effects.
        """
        rule = get_rule(subject_kind, transition_kind)
        try:
            result = await self._apply_rule(rule, subject_id, actor, params or {})
        except AppException as exc:
            record_transition(rule.subject_kind, rule.transition_kind, exc.kind)
            logger.info(
                "Transition rejected: %s/%s subject_id=%s kind=%s message=%s",
                rule.subject_kind.value,
                rule.transition_kind.value,
                subject_id,
                exc.kind,
                exc.message,
            )
            raise

        record_transition(rule.subject_kind, rule.transition_kind, "success")
        logger.info(
            "Transition applied: %s/%s subject_id=%s actor_id=%s %s->%s",
            rule.subject_kind.value,
            rule.transition_kind.value,
            result.subject_id,
            actor.id,
            result.from_status,
            result.to_status,
        )
        return result

    async def _apply_rule(
        self,
        rule: TransitionRule,
        raw_subject_id: str | UUID,
        actor: Any,
        raw_params: dict[str, Any],
    ) -> TransitionResult:
        authorize(actor, rule.required_level)
        params = validate_model(rule.params_model, raw_params)
        subject_id = parse_subject_id(raw_subject_id)

        subject = await self.repository.get_for_update(rule.subject_kind, subject_id)
        if subject is None:
            raise NotFoundException(f"{rule.subject_kind.value.replace('_', ' ').capitalize()} not found")

        violation = rule.precondition(subject)
        if violation:
            raise InvalidStateException(violation)

        ctx = TransitionContext(
            subject=subject,
            actor=actor,
            params=params,
            repository=self.repository,
            now=utc_now(),
            refund_policy=self.refund_policy,
        )
        if rule.guard is not None:
            await rule.guard(ctx)

        from_status = current_status(rule.subject_kind, subject)
        if rule.removes_subject:
            view = rule.read_schema.model_validate(subject).model_dump(mode="json")
            await rule.effect(ctx)
            to_status = "deleted"
        else:
            await rule.effect(ctx)
            await self.repository.flush()
            view = rule.read_schema.model_validate(subject).model_dump(mode="json")
            to_status = current_status(rule.subject_kind, subject)

        details: dict[str, Any] = {
            "transition": rule.transition_kind.value,
            "from_status": from_status,
            "to_status": to_status,
            "params": params.model_dump(mode="json", exclude_none=True),
        }
        details.update(ctx.details)

        record = await self.audit_service.record(
            actor_id=actor.id,
            action=rule.audit_action,
            subject_kind=rule.subject_kind,
            subject_id=str(subject_id),
            description=rule.describe(ctx),
            details=details,
            affected_user_id=ctx.affected_user_id,
        )
        return TransitionResult(
            subject_kind=rule.subject_kind,
            subject_id=subject_id,
            transition_kind=rule.transition_kind,
            from_status=from_status,
            to_status=to_status,
            audit_record_id=record.id,
            subject=view,
        )


def build_transition_service(session: AsyncSession) -> TransitionService:
    return TransitionService(
        TransitionRepository(session),
        build_audit_service(session),
        refund_policy=get_settings().refund_balance_policy,
    )


async def get_transition_service(session: AsyncSession = Depends(get_db_session)) -> TransitionService:
    """Dependency provider for transition service."""
    return build_transition_service(session)
