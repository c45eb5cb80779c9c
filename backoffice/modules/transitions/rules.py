"""Transition table: preconditions, guards and effects per subject kind."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from backoffice.core.access import is_super_admin
from backoffice.core.enums import (
    AccessLevelEnum,
    AdminRoleEnum,
    AuditActionEnum,
    ContentStatusEnum,
    CreatorApplicationStatusEnum,
    ModerationActionEnum,
    PaymentStatusEnum,
    ReportStatusEnum,
    StreamStatusEnum,
    SubjectKindEnum,
    TransitionKindEnum,
    UserRoleEnum,
)
from backoffice.modules.content.schemas import CommentRead, PostRead, StreamRead
from backoffice.modules.identity.schemas import AdminRead
from backoffice.modules.payments.schemas import PaymentRead
from backoffice.modules.reports.schemas import ReportRead
from backoffice.modules.transitions.schemas import (
    LongReasonParams,
    NoteParams,
    OptionalReasonParams,
    RefundParams,
    ResolveParams,
    ShortReasonParams,
    SuspendParams,
)
from backoffice.modules.users.schemas import CreatorApplicationRead, UserRead
from backoffice.shared.exceptions import ForbiddenException, InvalidInputException, InvalidStateException


@dataclass
class TransitionContext:
    """Everything an effect needs while the subject row is locked."""

    subject: Any
    actor: Any
    params: Any
    repository: Any
    now: datetime
    refund_policy: str = "reject"
    affected_user_id: UUID | None = None
    details: dict[str, Any] = field(default_factory=dict)


Precondition = Callable[[Any], str | None]
Guard = Callable[[TransitionContext], Awaitable[None]]
Effect = Callable[[TransitionContext], Awaitable[None]]


@dataclass(frozen=True)
class TransitionRule:
    """One allowed (subject kind, transition kind) pair."""

    subject_kind: SubjectKindEnum
    transition_kind: TransitionKindEnum
    params_model: type[BaseModel]
    read_schema: type[BaseModel]
    audit_action: AuditActionEnum
    precondition: Precondition
    effect: Effect
    describe: Callable[[TransitionContext], str]
    guard: Guard | None = None
    required_level: AccessLevelEnum = AccessLevelEnum.ADMIN
    removes_subject: bool = False


def current_status(subject_kind: SubjectKindEnum, subject: Any) -> str:
    """Lifecycle status label of a subject for audit details."""
    if subject_kind == SubjectKindEnum.USER:
        return "suspended" if subject.is_suspended else "active"
    if subject_kind == SubjectKindEnum.ADMIN:
        return "active" if subject.is_active else "inactive"
    return str(subject.status)


def _status_is(*allowed, label: str):
    def _check(subject: Any) -> str | None:
        if subject.status in allowed:
            return None
        return f"{label} is {subject.status.value}, expected {' or '.join(s.value for s in allowed)}"

    return _check


async def _guard_owner(ctx: TransitionContext, owner_id: UUID | None) -> None:
    """Resources owned by a super admin user are reserved to super admins."""
    if owner_id is None or is_super_admin(ctx.actor):
        return
    owner = await ctx.repository.get_user(owner_id)
    if owner is not None and owner.role == UserRoleEnum.SUPER_ADMIN:
        raise ForbiddenException("Only a super admin can act on resources of a super admin")


# users


def _user_not_suspended(user: Any) -> str | None:
    return "User is already suspended" if user.is_suspended else None


def _user_suspended(user: Any) -> str | None:
    return None if user.is_suspended else "User is not suspended"


async def _guard_user(ctx: TransitionContext) -> None:
    await _guard_owner(ctx, ctx.subject.id)


async def _suspend_user(ctx: TransitionContext) -> None:
    user = ctx.subject
    user.is_suspended = True
    user.suspended_reason = ctx.params.reason
    user.suspended_by = ctx.actor.id
    user.suspended_at = ctx.now
    user.suspension_expires_at = ctx.params.expires_at
    ctx.affected_user_id = user.id


async def _unsuspend_user(ctx: TransitionContext) -> None:
    user = ctx.subject
    ctx.details["previous_reason"] = user.suspended_reason
    user.is_suspended = False
    user.suspended_reason = None
    user.suspended_by = None
    user.suspended_at = None
    user.suspension_expires_at = None
    ctx.affected_user_id = user.id


# creator applications


async def _guard_application(ctx: TransitionContext) -> None:
    await _guard_owner(ctx, ctx.subject.user_id)


async def _approve_application(ctx: TransitionContext) -> None:
    application = ctx.subject
    application.status = CreatorApplicationStatusEnum.APPROVED
    application.reviewed_by = ctx.actor.id
    application.reviewed_at = ctx.now
    application.review_note = ctx.params.note

    user = await ctx.repository.get_user(application.user_id, for_update=True)
    if user is None:
        raise InvalidStateException("Applicant user no longer exists")
    ctx.details["previous_role"] = user.role.value
    # Staff roles are never downgraded by an approval.
    if user.role == UserRoleEnum.USER:
        user.role = UserRoleEnum.CREATOR
    ctx.details["new_role"] = user.role.value
    ctx.affected_user_id = user.id


async def _reject_application(ctx: TransitionContext) -> None:
    application = ctx.subject
    application.status = CreatorApplicationStatusEnum.REJECTED
    application.reviewed_by = ctx.actor.id
    application.reviewed_at = ctx.now
    application.rejection_reason = ctx.params.reason
    ctx.affected_user_id = application.user_id


# posts and comments


async def _guard_content(ctx: TransitionContext) -> None:
    await _guard_owner(ctx, ctx.subject.author_id)


async def _hide_content(ctx: TransitionContext) -> None:
    item = ctx.subject
    item.status = ContentStatusEnum.HIDDEN
    item.hidden_reason = ctx.params.reason
    item.hidden_by = ctx.actor.id
    item.hidden_at = ctx.now
    ctx.affected_user_id = item.author_id


async def _unhide_content(ctx: TransitionContext) -> None:
    item = ctx.subject
    ctx.details["previous_reason"] = item.hidden_reason
    item.status = ContentStatusEnum.VISIBLE
    item.hidden_reason = None
    item.hidden_by = None
    item.hidden_at = None
    ctx.affected_user_id = item.author_id


async def _delete_content(ctx: TransitionContext) -> None:
    item = ctx.subject
    item.status = ContentStatusEnum.DELETED
    item.deleted_reason = ctx.params.reason
    item.deleted_by = ctx.actor.id
    item.deleted_at = ctx.now
    ctx.affected_user_id = item.author_id


# streams


async def _guard_stream(ctx: TransitionContext) -> None:
    await _guard_owner(ctx, ctx.subject.host_id)


async def _end_stream(ctx: TransitionContext) -> None:
    stream = ctx.subject
    stream.status = StreamStatusEnum.ENDED
    stream.ended_at = ctx.now
    stream.ended_by = ctx.actor.id
    stream.end_reason = ctx.params.reason
    ctx.details["viewer_count"] = stream.viewer_count
    ctx.affected_user_id = stream.host_id


# reports


async def _review_report(ctx: TransitionContext) -> None:
    report = ctx.subject
    report.status = ReportStatusEnum.UNDER_REVIEW
    report.reviewed_by = ctx.actor.id
    report.reviewed_at = ctx.now
    ctx.affected_user_id = report.reported_user_id


async def _resolve_report(ctx: TransitionContext) -> None:
    report = ctx.subject
    report.status = ReportStatusEnum.RESOLVED
    report.resolution = ctx.params.resolution
    report.moderation_action = ctx.params.moderation_action
    report.reviewed_by = ctx.actor.id
    report.reviewed_at = ctx.now
    ctx.affected_user_id = report.reported_user_id


async def _dismiss_report(ctx: TransitionContext) -> None:
    report = ctx.subject
    report.status = ReportStatusEnum.DISMISSED
    report.resolution = ctx.params.reason
    report.moderation_action = ModerationActionEnum.NO_ACTION
    report.reviewed_by = ctx.actor.id
    report.reviewed_at = ctx.now
    ctx.affected_user_id = report.reported_user_id


# payments


async def _refund_payment(ctx: TransitionContext) -> None:
    """Decrement the buyer's wallet by the credited coins and flip the status.

    Under the ``reject`` policy an insufficient balance aborts the refund;
    under ``clamp`` the wallet stops at zero and the shortfall is recorded.
    """
    payment = ctx.subject
    repository = ctx.repository

    wallet = await repository.get_wallet_for_update(payment.user_id)
    balance = wallet.balance if wallet is not None else 0
    amount = payment.total_coins
    shortfall = max(amount - balance, 0)

    if shortfall and ctx.refund_policy != "clamp":
        raise InvalidStateException(
            f"Wallet balance {balance} is lower than the {amount} coins to refund",
        )

    if wallet is None:
        wallet = await repository.create_wallet(payment.user_id)

    decrement = amount - shortfall
    wallet.balance = balance - decrement
    await repository.add_ledger_entry(
        user_id=payment.user_id,
        payment_id=payment.id,
        delta=-decrement,
        balance_after=wallet.balance,
        shortfall=shortfall,
        reason=ctx.params.reason,
        created_by=ctx.actor.id,
    )

    payment.status = PaymentStatusEnum.REFUNDED
    payment.failure_reason = ctx.params.reason
    payment.refunded_by = ctx.actor.id
    payment.refunded_at = ctx.now

    ctx.details.update(
        {
            "amount": str(payment.amount),
            "currency": payment.currency,
            "coins": amount,
            "balance_before": balance,
            "balance_after": wallet.balance,
            "shortfall": shortfall,
            "policy": ctx.refund_policy,
        },
    )
    ctx.affected_user_id = payment.user_id


# admins


def _admin_active(admin: Any) -> str | None:
    return None if admin.is_active else "Admin is already inactive"


def _admin_inactive(admin: Any) -> str | None:
    return "Admin is already active" if admin.is_active else None


def _admin_exists(admin: Any) -> str | None:
    return None


async def _guard_last_actor(ctx: TransitionContext) -> None:
    """Keep one other active actor, and one other active super admin for a super admin target."""
    target = ctx.subject
    active = await ctx.repository.lock_active_admins()
    others = [admin for admin in active if admin.id != target.id]
    if not others:
        raise InvalidStateException("At least one other active admin must remain")

    if target.role == AdminRoleEnum.SUPER_ADMIN and not any(
        admin.role == AdminRoleEnum.SUPER_ADMIN for admin in others
    ):
        raise InvalidStateException("At least one other active super admin must remain")

    if target.id == ctx.actor.id:
        raise InvalidStateException("Admins cannot deactivate or delete their own account")


async def _deactivate_admin(ctx: TransitionContext) -> None:
    ctx.subject.is_active = False


async def _activate_admin(ctx: TransitionContext) -> None:
    ctx.subject.is_active = True


async def _delete_admin(ctx: TransitionContext) -> None:
    admin = ctx.subject
    ctx.details.update({"email": admin.email, "role": AdminRoleEnum(admin.role).value})
    await ctx.repository.delete_admin(admin)


def _rule(subject_kind, transition_kind, **kwargs) -> TransitionRule:
    return TransitionRule(subject_kind=subject_kind, transition_kind=transition_kind, **kwargs)


S = SubjectKindEnum
T = TransitionKindEnum

_RULES: list[TransitionRule] = [
    _rule(
        S.USER,
        T.SUSPEND,
        params_model=SuspendParams,
        read_schema=UserRead,
        audit_action=AuditActionEnum.USER_SUSPENDED,
        precondition=_user_not_suspended,
        guard=_guard_user,
        effect=_suspend_user,
        describe=lambda ctx: f"Suspended user {ctx.subject.username}: {ctx.params.reason}",
    ),
    _rule(
        S.USER,
        T.UNSUSPEND,
        params_model=NoteParams,
        read_schema=UserRead,
        audit_action=AuditActionEnum.USER_UNSUSPENDED,
        precondition=_user_suspended,
        guard=_guard_user,
        effect=_unsuspend_user,
        describe=lambda ctx: f"Unsuspended user {ctx.subject.username}",
    ),
    _rule(
        S.CREATOR_APPLICATION,
        T.APPROVE,
        params_model=NoteParams,
        read_schema=CreatorApplicationRead,
        audit_action=AuditActionEnum.CREATOR_APPROVED,
        precondition=_status_is(CreatorApplicationStatusEnum.PENDING, label="Creator application"),
        guard=_guard_application,
        effect=_approve_application,
        describe=lambda ctx: f"Approved creator application {ctx.subject.id}",
    ),
    _rule(
        S.CREATOR_APPLICATION,
        T.REJECT,
        params_model=LongReasonParams,
        read_schema=CreatorApplicationRead,
        audit_action=AuditActionEnum.CREATOR_REJECTED,
        precondition=_status_is(CreatorApplicationStatusEnum.PENDING, label="Creator application"),
        guard=_guard_application,
        effect=_reject_application,
        describe=lambda ctx: f"Rejected creator application {ctx.subject.id}: {ctx.params.reason}",
    ),
    _rule(
        S.STREAM,
        T.END,
        params_model=ShortReasonParams,
        read_schema=StreamRead,
        audit_action=AuditActionEnum.STREAM_ENDED,
        precondition=_status_is(StreamStatusEnum.LIVE, label="Stream"),
        guard=_guard_stream,
        effect=_end_stream,
        describe=lambda ctx: f"Ended stream '{ctx.subject.title}': {ctx.params.reason}",
    ),
    _rule(
        S.REPORT,
        T.REVIEW,
        params_model=NoteParams,
        read_schema=ReportRead,
        audit_action=AuditActionEnum.REPORT_REVIEWED,
        precondition=_status_is(ReportStatusEnum.PENDING, label="Report"),
        effect=_review_report,
        describe=lambda ctx: f"Started review of report {ctx.subject.id}",
    ),
    _rule(
        S.REPORT,
        T.RESOLVE,
        params_model=ResolveParams,
        read_schema=ReportRead,
        audit_action=AuditActionEnum.REPORT_RESOLVED,
        precondition=_status_is(ReportStatusEnum.UNDER_REVIEW, label="Report"),
        effect=_resolve_report,
        describe=lambda ctx: (
            f"Resolved report {ctx.subject.id} with {ctx.params.moderation_action.value}"
        ),
    ),
    _rule(
        S.REPORT,
        T.DISMISS,
        params_model=ShortReasonParams,
        read_schema=ReportRead,
        audit_action=AuditActionEnum.REPORT_DISMISSED,
        precondition=_status_is(ReportStatusEnum.UNDER_REVIEW, label="Report"),
        effect=_dismiss_report,
        describe=lambda ctx: f"Dismissed report {ctx.subject.id}: {ctx.params.reason}",
    ),
    _rule(
        S.PAYMENT,
        T.REFUND,
        params_model=RefundParams,
        read_schema=PaymentRead,
        audit_action=AuditActionEnum.REFUND_PAYMENT,
        precondition=_status_is(PaymentStatusEnum.COMPLETED, label="Payment"),
        effect=_refund_payment,
        describe=lambda ctx: (
            f"Refunded payment {ctx.subject.order_id} ({ctx.subject.amount} {ctx.subject.currency})"
        ),
    ),
    _rule(
        S.ADMIN,
        T.DEACTIVATE,
        params_model=OptionalReasonParams,
        read_schema=AdminRead,
        audit_action=AuditActionEnum.ADMIN_DEACTIVATED,
        precondition=_admin_active,
        guard=_guard_last_actor,
        effect=_deactivate_admin,
        describe=lambda ctx: f"Deactivated admin {ctx.subject.email}",
        required_level=AccessLevelEnum.SUPER_ADMIN,
    ),
    _rule(
        S.ADMIN,
        T.ACTIVATE,
        params_model=NoteParams,
        read_schema=AdminRead,
        audit_action=AuditActionEnum.ADMIN_ACTIVATED,
        precondition=_admin_inactive,
        effect=_activate_admin,
        describe=lambda ctx: f"Activated admin {ctx.subject.email}",
        required_level=AccessLevelEnum.SUPER_ADMIN,
    ),
    _rule(
        S.ADMIN,
        T.DELETE,
        params_model=OptionalReasonParams,
        read_schema=AdminRead,
        audit_action=AuditActionEnum.ADMIN_DELETED,
        precondition=_admin_exists,
        guard=_guard_last_actor,
        effect=_delete_admin,
        describe=lambda ctx: f"Deleted admin {ctx.details.get('email')}",
        required_level=AccessLevelEnum.SUPER_ADMIN,
        removes_subject=True,
    ),
]

for _kind, _read, _label, _hidden, _unhidden, _deleted in (
    (
        S.POST,
        PostRead,
        "Post",
        AuditActionEnum.POST_HIDDEN,
        AuditActionEnum.POST_UNHIDDEN,
        AuditActionEnum.POST_DELETED,
    ),
    (
        S.COMMENT,
        CommentRead,
        "Comment",
        AuditActionEnum.COMMENT_HIDDEN,
        AuditActionEnum.COMMENT_UNHIDDEN,
        AuditActionEnum.COMMENT_DELETED,
    ),
):
    _RULES.extend(
        [
            _rule(
                _kind,
                T.HIDE,
                params_model=ShortReasonParams,
                read_schema=_read,
                audit_action=_hidden,
                precondition=_status_is(ContentStatusEnum.VISIBLE, label=_label),
                guard=_guard_content,
                effect=_hide_content,
                describe=lambda ctx, label=_label: f"Hid {label.lower()} {ctx.subject.id}: {ctx.params.reason}",
            ),
            _rule(
                _kind,
                T.UNHIDE,
                params_model=NoteParams,
                read_schema=_read,
                audit_action=_unhidden,
                precondition=_status_is(ContentStatusEnum.HIDDEN, label=_label),
                guard=_guard_content,
                effect=_unhide_content,
                describe=lambda ctx, label=_label: f"Restored {label.lower()} {ctx.subject.id}",
            ),
            _rule(
                _kind,
                T.DELETE,
                params_model=ShortReasonParams,
                read_schema=_read,
                audit_action=_deleted,
                precondition=_status_is(ContentStatusEnum.VISIBLE, ContentStatusEnum.HIDDEN, label=_label),
                guard=_guard_content,
                effect=_delete_content,
                describe=lambda ctx, label=_label: f"Deleted {label.lower()} {ctx.subject.id}: {ctx.params.reason}",
            ),
        ],
    )

TRANSITION_RULES: dict[tuple[SubjectKindEnum, TransitionKindEnum], TransitionRule] = {
    (rule.subject_kind, rule.transition_kind): rule for rule in _RULES
}


def get_rule(subject_kind: str, transition_kind: str) -> TransitionRule:
    """Resolve a rule from raw path tokens."""
    try:
        key = (SubjectKindEnum(subject_kind), TransitionKindEnum(transition_kind))
    except ValueError as exc:
        raise InvalidInputException(f"Unknown transition {subject_kind}/{transition_kind}") from exc

    rule = TRANSITION_RULES.get(key)
    if rule is None:
        raise InvalidInputException(f"Transition {transition_kind} is not defined for {subject_kind}")
    return rule
