from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from backoffice.core.enums import (
    AdminRoleEnum,
    AuditActionEnum,
    CreatorApplicationStatusEnum,
    ModerationActionEnum,
    ReportReasonEnum,
    ReportStatusEnum,
    SubjectKindEnum,
    UserRoleEnum,
)
from backoffice.modules.transitions.rules import TRANSITION_RULES, get_rule
from backoffice.modules.transitions.service import TransitionService
from backoffice.shared.exceptions import (
    ForbiddenException,
    InvalidInputException,
    InvalidStateException,
    NotFoundException,
)

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeUser:
    id: UUID = field(default_factory=uuid4)
    email: str = "member@example.com"
    username: str = "member"
    display_name: str | None = None
    role: UserRoleEnum = UserRoleEnum.USER
    is_verified: bool = False
    is_suspended: bool = False
    suspended_reason: str | None = None
    suspended_by: UUID | None = None
    suspended_at: datetime | None = None
    suspension_expires_at: datetime | None = None
    admin_notes: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime = NOW
    updated_at: datetime = NOW


@dataclass
class FakeApplication:
    user_id: UUID
    id: UUID = field(default_factory=uuid4)
    status: CreatorApplicationStatusEnum = CreatorApplicationStatusEnum.PENDING
    bio: str | None = None
    category: str | None = None
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    review_note: str | None = None
    created_at: datetime = NOW
    updated_at: datetime = NOW


@dataclass
class FakeReport:
    reporter_id: UUID
    id: UUID = field(default_factory=uuid4)
    reported_user_id: UUID | None = None
    target_type: str = "user"
    target_id: str | None = None
    reason: ReportReasonEnum = ReportReasonEnum.SPAM
    description: str | None = None
    status: ReportStatusEnum = ReportStatusEnum.PENDING
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    resolution: str | None = None
    moderation_action: ModerationActionEnum | None = None
    created_at: datetime = NOW
    updated_at: datetime = NOW


@dataclass
class FakeAdmin:
    id: UUID = field(default_factory=uuid4)
    email: str = "staff@backoffice.dev"
    name: str = "Staff"
    role: AdminRoleEnum = AdminRoleEnum.ADMIN
    is_active: bool = True
    last_login_at: datetime | None = None
    login_count: int = 0
    created_at: datetime = NOW
    updated_at: datetime = NOW


class FakeTransitionRepository:
    def __init__(self) -> None:
        self.subjects: dict[tuple[SubjectKindEnum, UUID], object] = {}
        self.users: dict[UUID, FakeUser] = {}
        self.admins: dict[UUID, FakeAdmin] = {}
        self.loads = 0

    def add(self, kind: SubjectKindEnum, subject) -> None:
        self.subjects[(kind, subject.id)] = subject
        if kind == SubjectKindEnum.USER:
            self.users[subject.id] = subject
        if kind == SubjectKindEnum.ADMIN:
            self.admins[subject.id] = subject

    async def get_for_update(self, subject_kind: SubjectKindEnum, subject_id: UUID):
        self.loads += 1
        return self.subjects.get((subject_kind, subject_id))

    async def get_user(self, user_id: UUID, for_update: bool = False) -> FakeUser | None:
        return self.users.get(user_id)

    async def lock_active_admins(self) -> list[FakeAdmin]:
        return [admin for admin in self.admins.values() if admin.is_active]

    async def delete_admin(self, admin: FakeAdmin) -> None:
        self.admins.pop(admin.id, None)
        self.subjects.pop((SubjectKindEnum.ADMIN, admin.id), None)

    async def flush(self) -> None:
        return None


class FakeAuditService:
    def __init__(self) -> None:
        self.records: list[SimpleNamespace] = []

    async def record(self, **fields) -> SimpleNamespace:
        record = SimpleNamespace(id=uuid4(), **fields)
        self.records.append(record)
        return record


def _service() -> tuple[TransitionService, FakeTransitionRepository, FakeAuditService]:
    repository = FakeTransitionRepository()
    audit = FakeAuditService()
    return TransitionService(repository, audit), repository, audit


def test_every_rule_is_registered_under_its_own_key() -> None:
    for (subject_kind, transition_kind), rule in TRANSITION_RULES.items():
        assert rule.subject_kind == subject_kind
        assert rule.transition_kind == transition_kind
    assert get_rule("payment", "refund").audit_action == AuditActionEnum.REFUND_PAYMENT


@pytest.mark.parametrize(("subject_kind", "transition_kind"), [("post", "refund"), ("planet", "hide"), ("user", "x")])
def test_unknown_transition_pairs_are_invalid_input(subject_kind: str, transition_kind: str) -> None:
    with pytest.raises(InvalidInputException):
        get_rule(subject_kind, transition_kind)


@pytest.mark.asyncio
async def test_suspend_user_writes_one_audit_record(admin_actor) -> None:
    service, repository, audit = _service()
    user = FakeUser()
    repository.add(SubjectKindEnum.USER, user)

    result = await service.apply("user", str(user.id), "suspend", admin_actor, {"reason": "Repeated spam in chat"})

    assert user.is_suspended is True
    assert user.suspended_by == admin_actor.id
    assert user.suspension_expires_at is None
    assert (result.from_status, result.to_status) == ("active", "suspended")
    assert result.subject["is_suspended"] is True
    assert len(audit.records) == 1
    record = audit.records[0]
    assert record.action == AuditActionEnum.USER_SUSPENDED
    assert record.subject_id == str(user.id)
    assert record.affected_user_id == user.id
    assert record.details["params"]["reason"] == "Repeated spam in chat"
    assert result.audit_record_id == record.id


@pytest.mark.asyncio
async def test_repeating_suspend_is_invalid_state_and_writes_nothing(admin_actor) -> None:
    service, repository, audit = _service()
    user = FakeUser(is_suspended=True, suspended_reason="Earlier abuse report")
    repository.add(SubjectKindEnum.USER, user)

    with pytest.raises(InvalidStateException):
        await service.apply("user", user.id, "suspend", admin_actor, {"reason": "Second suspension try"})

    assert user.suspended_reason == "Earlier abuse report"
    assert audit.records == []


@pytest.mark.asyncio
async def test_params_are_validated_before_the_subject_is_loaded(admin_actor) -> None:
    service, repository, audit = _service()
    user = FakeUser()
    repository.add(SubjectKindEnum.USER, user)

    with pytest.raises(InvalidInputException):
        await service.apply("user", user.id, "suspend", admin_actor, {"reason": "short"})
    with pytest.raises(InvalidInputException):
        await service.apply("user", user.id, "suspend", admin_actor, {"reason": "Long enough reason", "extra": 1})

    assert repository.loads == 0
    assert audit.records == []


@pytest.mark.asyncio
async def test_temporary_suspension_requires_future_expiry(admin_actor) -> None:
    service, repository, _ = _service()
    user = FakeUser()
    repository.add(SubjectKindEnum.USER, user)

    with pytest.raises(InvalidInputException):
        await service.apply(
            "user",
            user.id,
            "suspend",
            admin_actor,
            {"reason": "Cooling off period", "duration": "temporary"},
        )

    expires_at = datetime.now(UTC) + timedelta(days=3)
    await service.apply(
        "user",
        user.id,
        "suspend",
        admin_actor,
        {"reason": "Cooling off period", "duration": "temporary", "expires_at": expires_at.isoformat()},
    )
    assert user.suspension_expires_at == expires_at


@pytest.mark.asyncio
async def test_malformed_or_unknown_subject_id(admin_actor) -> None:
    service, _, _ = _service()

    with pytest.raises(InvalidInputException):
        await service.apply("user", "not-a-uuid", "unsuspend", admin_actor, {})
    with pytest.raises(NotFoundException):
        await service.apply("user", uuid4(), "unsuspend", admin_actor, {})


@pytest.mark.asyncio
async def test_admin_cannot_suspend_super_admin_user(admin_actor, super_actor) -> None:
    service, repository, audit = _service()
    owner = FakeUser(role=UserRoleEnum.SUPER_ADMIN)
    repository.add(SubjectKindEnum.USER, owner)

    with pytest.raises(ForbiddenException):
        await service.apply("user", owner.id, "suspend", admin_actor, {"reason": "Testing the guard"})
    assert owner.is_suspended is False

    await service.apply("user", owner.id, "suspend", super_actor, {"reason": "Testing the guard"})
    assert owner.is_suspended is True
    assert len(audit.records) == 1


@pytest.mark.asyncio
async def test_approving_application_promotes_plain_user(admin_actor) -> None:
    service, repository, audit = _service()
    user = FakeUser()
    repository.add(SubjectKindEnum.USER, user)
    application = FakeApplication(user_id=user.id)
    repository.add(SubjectKindEnum.CREATOR_APPLICATION, application)

    result = await service.apply("creator_application", application.id, "approve", admin_actor, {"note": "Welcome"})

    assert application.status == CreatorApplicationStatusEnum.APPROVED
    assert application.reviewed_by == admin_actor.id
    assert user.role == UserRoleEnum.CREATOR
    assert result.to_status == "approved"
    assert audit.records[0].details["new_role"] == "creator"
    assert audit.records[0].affected_user_id == user.id


@pytest.mark.asyncio
async def test_approval_never_downgrades_staff_role(super_actor) -> None:
    service, repository, _ = _service()
    user = FakeUser(role=UserRoleEnum.ADMIN)
    repository.add(SubjectKindEnum.USER, user)
    application = FakeApplication(user_id=user.id)
    repository.add(SubjectKindEnum.CREATOR_APPLICATION, application)

    await service.apply("creator_application", application.id, "approve", super_actor, {})

    assert user.role == UserRoleEnum.ADMIN


@pytest.mark.asyncio
async def test_rejected_application_cannot_be_approved(admin_actor) -> None:
    service, repository, audit = _service()
    user = FakeUser()
    repository.add(SubjectKindEnum.USER, user)
    application = FakeApplication(user_id=user.id)
    repository.add(SubjectKindEnum.CREATOR_APPLICATION, application)

    await service.apply(
        "creator_application",
        application.id,
        "reject",
        admin_actor,
        {"reason": "Portfolio is missing"},
    )
    with pytest.raises(InvalidStateException):
        await service.apply("creator_application", application.id, "approve", admin_actor, {})

    assert application.rejection_reason == "Portfolio is missing"
    assert user.role == UserRoleEnum.USER
    assert [record.action for record in audit.records] == [AuditActionEnum.CREATOR_REJECTED]


@pytest.mark.asyncio
async def test_report_lifecycle(admin_actor) -> None:
    service, repository, audit = _service()
    reported = uuid4()
    report = FakeReport(reporter_id=uuid4(), reported_user_id=reported)
    repository.add(SubjectKindEnum.REPORT, report)

    with pytest.raises(InvalidStateException):
        await service.apply("report", report.id, "dismiss", admin_actor, {"reason": "Nothing wrong"})

    await service.apply("report", report.id, "review", admin_actor, {})
    result = await service.apply(
        "report",
        report.id,
        "resolve",
        admin_actor,
        {"resolution": "Content removed", "moderation_action": "content_removed"},
    )

    assert report.status == ReportStatusEnum.RESOLVED
    assert report.moderation_action == ModerationActionEnum.CONTENT_REMOVED
    assert result.from_status == "under_review"
    assert [record.action for record in audit.records] == [
        AuditActionEnum.REPORT_REVIEWED,
        AuditActionEnum.REPORT_RESOLVED,
    ]
    assert all(record.affected_user_id == reported for record in audit.records)


@pytest.mark.asyncio
async def test_admin_transitions_require_super_admin(admin_actor) -> None:
    service, repository, audit = _service()
    target = FakeAdmin()
    repository.add(SubjectKindEnum.ADMIN, target)

    with pytest.raises(ForbiddenException):
        await service.apply("admin", target.id, "deactivate", admin_actor, {})

    assert target.is_active is True
    assert audit.records == []


@pytest.mark.asyncio
async def test_last_active_super_admin_cannot_be_deactivated(super_actor) -> None:
    service, repository, audit = _service()
    lone_super = FakeAdmin(role=AdminRoleEnum.SUPER_ADMIN)
    repository.add(SubjectKindEnum.ADMIN, lone_super)
    repository.add(SubjectKindEnum.ADMIN, FakeAdmin())

    with pytest.raises(InvalidStateException):
        await service.apply("admin", lone_super.id, "deactivate", super_actor, {})

    assert lone_super.is_active is True
    assert audit.records == []


@pytest.mark.asyncio
async def test_actor_cannot_remove_itself(super_actor) -> None:
    service, repository, _ = _service()
    me = FakeAdmin(id=super_actor.id, role=AdminRoleEnum.SUPER_ADMIN)
    repository.add(SubjectKindEnum.ADMIN, me)
    repository.add(SubjectKindEnum.ADMIN, FakeAdmin(role=AdminRoleEnum.SUPER_ADMIN))

    with pytest.raises(InvalidStateException):
        await service.apply("admin", me.id, "delete", super_actor, {})
    assert me.id in repository.admins


@pytest.mark.asyncio
async def test_delete_admin_removes_row_and_keeps_audit(super_actor) -> None:
    service, repository, audit = _service()
    repository.add(SubjectKindEnum.ADMIN, FakeAdmin(id=super_actor.id, role=AdminRoleEnum.SUPER_ADMIN))
    target = FakeAdmin(email="leaving@backoffice.dev")
    repository.add(SubjectKindEnum.ADMIN, target)

    result = await service.apply("admin", target.id, "delete", super_actor, {"reason": "Left the team"})

    assert target.id not in repository.admins
    assert result.to_status == "deleted"
    assert result.subject["email"] == "leaving@backoffice.dev"
    assert audit.records[0].action == AuditActionEnum.ADMIN_DELETED
    assert audit.records[0].details["email"] == "leaving@backoffice.dev"
