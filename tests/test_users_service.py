from __future__ import annotations

from uuid import uuid4

import pytest

from backoffice.core.enums import AuditActionEnum, UserRoleEnum
from backoffice.modules.audit.service import build_audit_service
from backoffice.modules.transitions.service import build_transition_service
from backoffice.modules.users.repository import UserRepository
from backoffice.modules.users.schemas import UserNotesUpdate
from backoffice.modules.users.service import UserService
from backoffice.shared.exceptions import ForbiddenException, NotFoundException
from backoffice.shared.pagination import PaginationParams


def _service(session) -> UserService:
    return UserService(UserRepository(session), build_audit_service(session))


@pytest.mark.asyncio
async def test_detail_includes_activity_counters_and_balance(session, factory, admin_actor) -> None:
    creator = await factory.user(UserRoleEnum.CREATOR)
    viewer = await factory.user()
    post = await factory.post(creator)
    await factory.post(creator)
    await factory.comment(post, creator)
    await factory.stream(creator)
    await factory.report(viewer, creator)
    await factory.wallet(creator, 420)

    detail = await _service(session).get_detail(admin_actor, creator.id)

    assert detail.id == creator.id
    assert (detail.post_count, detail.comment_count, detail.stream_count) == (2, 1, 1)
    assert detail.report_count == 1
    assert detail.coin_balance == 420


@pytest.mark.asyncio
async def test_detail_of_user_without_wallet(session, factory, admin_actor) -> None:
    user = await factory.user()

    detail = await _service(session).get_detail(admin_actor, user.id)

    assert detail.coin_balance == 0
    assert detail.post_count == 0

    with pytest.raises(NotFoundException):
        await _service(session).get_detail(admin_actor, uuid4())


@pytest.mark.asyncio
async def test_update_notes_is_audited(session, factory, admin_actor) -> None:
    user = await factory.user(admin_notes="Old note")
    service = _service(session)

    updated = await service.update_notes(admin_actor, user.id, UserNotesUpdate(admin_notes="  Chargeback risk  "))

    assert updated.admin_notes == "Chargeback risk"
    items, total = await service.timeline(admin_actor, user.id, PaginationParams(page=1, limit=10))
    assert total == 1
    assert items[0].action == AuditActionEnum.USER_NOTES_UPDATED
    assert items[0].details == {"previous": "Old note", "current": "Chargeback risk"}


@pytest.mark.asyncio
async def test_notes_on_super_admin_user_need_super_admin(session, factory, admin_actor, super_actor) -> None:
    owner = await factory.user(UserRoleEnum.SUPER_ADMIN)
    service = _service(session)

    with pytest.raises(ForbiddenException):
        await service.update_notes(admin_actor, owner.id, UserNotesUpdate(admin_notes="Platform owner"))

    updated = await service.update_notes(super_actor, owner.id, UserNotesUpdate(admin_notes="Platform owner"))
    assert updated.admin_notes == "Platform owner"


@pytest.mark.asyncio
async def test_timeline_collects_records_about_the_user(session, factory, admin_actor) -> None:
    author = await factory.user()
    post = await factory.post(author)
    transitions = build_transition_service(session)
    await transitions.apply("user", author.id, "suspend", admin_actor, {"reason": "Ban evasion account"})
    await transitions.apply("post", post.id, "hide", admin_actor, {"reason": "Scam link"})
    await _service(session).update_notes(admin_actor, author.id, UserNotesUpdate(admin_notes=None))

    items, total = await _service(session).timeline(admin_actor, author.id, PaginationParams(page=1, limit=2))

    assert total == 3
    assert len(items) == 2
    assert {item.action for item in items} <= {
        AuditActionEnum.USER_SUSPENDED,
        AuditActionEnum.POST_HIDDEN,
        AuditActionEnum.USER_NOTES_UPDATED,
    }


@pytest.mark.asyncio
async def test_timeline_of_missing_user(session, admin_actor) -> None:
    with pytest.raises(NotFoundException):
        await _service(session).timeline(admin_actor, uuid4(), PaginationParams())
