from __future__ import annotations

import pytest
from sqlalchemy import func, select

from backoffice.core.enums import (
    AdminRoleEnum,
    AuditActionEnum,
    ContentStatusEnum,
    CreatorApplicationStatusEnum,
    StreamStatusEnum,
    UserRoleEnum,
)
from backoffice.modules.audit.models import AuditRecord
from backoffice.modules.audit.service import build_audit_service
from backoffice.modules.identity.models import Admin
from backoffice.modules.transitions.repository import TransitionRepository
from backoffice.modules.transitions.service import TransitionService, build_transition_service
from backoffice.shared.exceptions import ForbiddenException, InvalidStateException


def _service(session) -> TransitionService:
    return TransitionService(TransitionRepository(session), build_audit_service(session))


async def _records_for(session, subject_id) -> list[AuditRecord]:
    result = await session.scalars(
        select(AuditRecord).where(AuditRecord.subject_id == str(subject_id)).order_by(AuditRecord.created_at),
    )
    return list(result.all())


@pytest.mark.asyncio
async def test_suspend_then_unsuspend_round_trip(session, factory, admin_actor) -> None:
    user = await factory.user()
    service = build_transition_service(session)

    await service.apply("user", user.id, "suspend", admin_actor, {"reason": "Posting scam links"})
    assert user.is_suspended is True

    with pytest.raises(InvalidStateException):
        await service.apply("user", user.id, "suspend", admin_actor, {"reason": "Posting scam links"})

    result = await service.apply("user", user.id, "unsuspend", admin_actor, {"note": "Appeal accepted"})
    assert user.is_suspended is False
    assert user.suspended_reason is None
    assert result.from_status == "suspended"

    records = await _records_for(session, user.id)
    by_action = {record.action: record for record in records}
    assert set(by_action) == {AuditActionEnum.USER_SUSPENDED, AuditActionEnum.USER_UNSUSPENDED}
    assert by_action[AuditActionEnum.USER_UNSUSPENDED].details["previous_reason"] == "Posting scam links"


@pytest.mark.asyncio
async def test_approve_application_promotes_user(session, factory, admin_actor) -> None:
    user = await factory.user()
    application = await factory.application(user)

    await _service(session).apply("creator_application", application.id, "approve", admin_actor, {})

    assert application.status == CreatorApplicationStatusEnum.APPROVED
    assert application.reviewed_at is not None
    assert user.role == UserRoleEnum.CREATOR
    assert len(await _records_for(session, application.id)) == 1


@pytest.mark.asyncio
async def test_reject_application_keeps_role(session, factory, admin_actor) -> None:
    user = await factory.user()
    application = await factory.application(user)
    service = _service(session)

    await service.apply(
        "creator_application",
        application.id,
        "reject",
        admin_actor,
        {"reason": "Not enough streaming history"},
    )
    with pytest.raises(InvalidStateException):
        await service.apply("creator_application", application.id, "reject", admin_actor, {"reason": "Second try at it"})

    assert application.status == CreatorApplicationStatusEnum.REJECTED
    assert user.role == UserRoleEnum.USER
    assert len(await _records_for(session, application.id)) == 1


@pytest.mark.asyncio
async def test_hide_unhide_and_soft_delete_post(session, factory, admin_actor) -> None:
    author = await factory.user()
    post = await factory.post(author)
    service = _service(session)

    await service.apply("post", post.id, "hide", admin_actor, {"reason": "Graphic content"})
    assert post.status == ContentStatusEnum.HIDDEN
    assert post.hidden_by == admin_actor.id

    await service.apply("post", post.id, "unhide", admin_actor, {})
    assert post.status == ContentStatusEnum.VISIBLE
    assert post.hidden_reason is None

    await service.apply("post", post.id, "delete", admin_actor, {"reason": "Copyright claim"})
    assert post.status == ContentStatusEnum.DELETED
    assert post.deleted_at is not None

    with pytest.raises(InvalidStateException):
        await service.apply("post", post.id, "hide", admin_actor, {"reason": "Graphic content"})

    records = await _records_for(session, post.id)
    assert len(records) == 3
    assert all(record.affected_user_id == author.id for record in records)


@pytest.mark.asyncio
async def test_admin_cannot_moderate_content_of_super_admin_user(session, factory, admin_actor, super_actor) -> None:
    owner = await factory.user(UserRoleEnum.SUPER_ADMIN)
    comment = await factory.comment(await factory.post(owner), owner)
    service = _service(session)

    with pytest.raises(ForbiddenException):
        await service.apply("comment", comment.id, "hide", admin_actor, {"reason": "Off-topic spam"})
    assert comment.status == ContentStatusEnum.VISIBLE

    await service.apply("comment", comment.id, "hide", super_actor, {"reason": "Off-topic spam"})
    assert comment.status == ContentStatusEnum.HIDDEN


@pytest.mark.asyncio
async def test_end_stream(session, factory, admin_actor) -> None:
    host = await factory.user(UserRoleEnum.CREATOR)
    stream = await factory.stream(host)

    result = await _service(session).apply("stream", stream.id, "end", admin_actor, {"reason": "Terms violation"})

    assert stream.status == StreamStatusEnum.ENDED
    assert stream.ended_by == admin_actor.id
    assert result.subject["status"] == "ended"


@pytest.mark.asyncio
async def test_admin_role_cannot_manage_actors(session, factory, admin_actor) -> None:
    target = await factory.admin()

    with pytest.raises(ForbiddenException):
        await _service(session).apply("admin", target.id, "deactivate", admin_actor, {})

    assert target.is_active is True
    assert await session.scalar(select(func.count()).select_from(AuditRecord)) == 0


@pytest.mark.asyncio
async def test_active_actor_count_never_drops_to_zero(session, factory, actor_factory) -> None:
    first = await factory.admin(AdminRoleEnum.SUPER_ADMIN)
    second = await factory.admin(AdminRoleEnum.SUPER_ADMIN)
    service = _service(session)

    me = actor_factory(AdminRoleEnum.SUPER_ADMIN, actor_id=first.id)
    await service.apply("admin", second.id, "deactivate", me, {})
    assert second.is_active is False

    outsider = actor_factory(AdminRoleEnum.SUPER_ADMIN)
    with pytest.raises(InvalidStateException):
        await service.apply("admin", first.id, "deactivate", outsider, {})

    active = await session.scalar(select(func.count()).select_from(Admin).where(Admin.is_active.is_(True)))
    assert active == 1

    await service.apply("admin", second.id, "activate", outsider, {})
    assert second.is_active is True


@pytest.mark.asyncio
async def test_delete_admin_removes_row(session, factory, actor_factory) -> None:
    owner = await factory.admin(AdminRoleEnum.SUPER_ADMIN)
    target = await factory.admin()
    target_id = target.id

    result = await _service(session).apply(
        "admin",
        target_id,
        "delete",
        actor_factory(AdminRoleEnum.SUPER_ADMIN, actor_id=owner.id),
        {"reason": "Contract ended"},
    )

    assert await session.scalar(select(Admin).where(Admin.id == target_id)) is None
    assert result.to_status == "deleted"
    records = await _records_for(session, target_id)
    assert len(records) == 1
    assert records[0].action == AuditActionEnum.ADMIN_DELETED
