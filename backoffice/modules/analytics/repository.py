"""Analytics repository layer: aggregate queries over the entity store."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.enums import (
    ContentStatusEnum,
    CreatorApplicationStatusEnum,
    PaymentStatusEnum,
    ReportStatusEnum,
    StreamStatusEnum,
    UserRoleEnum,
)
from backoffice.modules.analytics.reducer import to_money
from backoffice.modules.audit.models import AuditRecord
from backoffice.modules.catalog.models import DiscountCode, DiscountRedemption, Gift, GiftTransaction
from backoffice.modules.content.models import Comment, Like, Post, Stream
from backoffice.modules.identity.models import Admin
from backoffice.modules.payments.models import CoinPackage, Payment
from backoffice.modules.reports.models import Report
from backoffice.modules.users.models import CreatorApplication, User

TOP_LIMIT = 10


def _key(value: Any) -> str:
    if value is None:
        return "none"
    return str(getattr(value, "value", value))


class AnalyticsRepository:
    """Read-only aggregate queries; every window is ``[lower, upper)`` in UTC."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _count(self, model, *conditions) -> int:
        stmt = select(func.count()).select_from(model)
        if conditions:
            stmt = stmt.where(*conditions)
        return int((await self.session.scalar(stmt)) or 0)

    async def _sum(self, column, *conditions):
        stmt = select(func.coalesce(func.sum(column), 0))
        if conditions:
            stmt = stmt.where(*conditions)
        return (await self.session.scalar(stmt)) or 0

    async def _group_counts(self, key, *conditions) -> dict[str, int]:
        stmt = select(key, func.count()).group_by(key)
        if conditions:
            stmt = stmt.where(*conditions)
        rows = (await self.session.execute(stmt)).all()
        return {_key(group): int(count) for group, count in rows}

    async def _events(self, columns, *conditions) -> list[tuple]:
        stmt = select(*columns)
        if conditions:
            stmt = stmt.where(*conditions)
        return [tuple(row) for row in (await self.session.execute(stmt)).all()]

    @staticmethod
    def _window(column, lower: datetime, upper: datetime) -> tuple:
        return (column >= lower, column < upper)

    # revenue and transactions

    async def revenue(self, lower: datetime, upper: datetime) -> dict[str, Any]:
        window = self._window(Payment.created_at, lower, upper)
        completed = (Payment.status == PaymentStatusEnum.COMPLETED, *window)

        revenue_total = to_money(await self._sum(Payment.amount, *completed))
        payment_count = await self._count(Payment, *completed)
        coins = int(await self._sum(Payment.total_coins, *completed))
        refunded_amount = to_money(
            await self._sum(Payment.amount, Payment.status == PaymentStatusEnum.REFUNDED, *window),
        )

        package_stmt = (
            select(
                CoinPackage.id,
                CoinPackage.name,
                func.count(Payment.id),
                func.coalesce(func.sum(Payment.amount), 0),
            )
            .join(Payment, Payment.package_id == CoinPackage.id)
            .where(*completed)
            .group_by(CoinPackage.id, CoinPackage.name)
            .order_by(func.coalesce(func.sum(Payment.amount), 0).desc())
        )
        by_package = [
            {"key": str(package_id), "label": name, "count": int(count), "revenue": to_money(amount)}
            for package_id, name, count, amount in (await self.session.execute(package_stmt)).all()
        ]

        currency_stmt = (
            select(Payment.currency, func.count(Payment.id), func.coalesce(func.sum(Payment.amount), 0))
            .where(*completed)
            .group_by(Payment.currency)
        )
        by_currency = [
            {"key": currency, "count": int(count), "revenue": to_money(amount)}
            for currency, count, amount in (await self.session.execute(currency_stmt)).all()
        ]

        events = await self._events((Payment.created_at, Payment.amount), *completed)
        return {
            "revenue": revenue_total,
            "payments": payment_count,
            "coins": coins,
            "refunded_amount": refunded_amount,
            "by_package": by_package,
            "by_currency": by_currency,
            "events": events,
        }

    async def transactions(self, lower: datetime, upper: datetime) -> dict[str, Any]:
        window = self._window(Payment.created_at, lower, upper)
        by_status = await self._group_counts(Payment.status, *window)
        events = await self._events((Payment.created_at, Payment.status), *window)
        return {"by_status": by_status, "events": events}

    # users

    async def users(self, lower: datetime, upper: datetime) -> dict[str, Any]:
        window = self._window(User.created_at, lower, upper)
        return {
            "total_users": await self._count(User),
            "new_users": await self._count(User, *window),
            "suspended_users": await self._count(User, User.is_suspended.is_(True)),
            "verified_users": await self._count(User, User.is_verified.is_(True)),
            "by_role": await self._group_counts(User.role),
            "pending_applications": await self._count(
                CreatorApplication,
                CreatorApplication.status == CreatorApplicationStatusEnum.PENDING,
            ),
            "events": await self._events((User.created_at,), *window),
        }

    async def creator_count(self) -> int:
        return await self._count(User, User.role == UserRoleEnum.CREATOR)

    # content

    async def content(self, lower: datetime, upper: datetime) -> dict[str, Any]:
        post_window = self._window(Post.created_at, lower, upper)
        comment_window = self._window(Comment.created_at, lower, upper)
        like_window = self._window(Like.created_at, lower, upper)
        return {
            "posts": await self._count(Post, *post_window),
            "comments": await self._count(Comment, *comment_window),
            "likes": await self._count(Like, *like_window),
            "hidden_posts": await self._count(Post, Post.status == ContentStatusEnum.HIDDEN),
            "deleted_posts": await self._count(Post, Post.status == ContentStatusEnum.DELETED),
            "flagged_posts": await self._count(Post, Post.is_flagged.is_(True)),
            "hidden_comments": await self._count(Comment, Comment.status == ContentStatusEnum.HIDDEN),
            "live_streams": await self._count(Stream, Stream.status == StreamStatusEnum.LIVE),
            "posts_by_type": await self._group_counts(Post.type, *post_window),
            "posts_by_status": await self._group_counts(Post.status, *post_window),
            "post_events": await self._events((Post.created_at,), *post_window),
            "comment_events": await self._events((Comment.created_at,), *comment_window),
            "like_events": await self._events((Like.created_at,), *like_window),
        }

    # gifts

    async def gifts(self, lower: datetime, upper: datetime) -> dict[str, Any]:
        window = self._window(GiftTransaction.created_at, lower, upper)

        top_gifts_stmt = (
            select(
                GiftTransaction.gift_id,
                Gift.name,
                func.coalesce(func.sum(GiftTransaction.quantity), 0),
                func.coalesce(func.sum(GiftTransaction.total_coins), 0),
            )
            .outerjoin(Gift, Gift.id == GiftTransaction.gift_id)
            .where(*window)
            .group_by(GiftTransaction.gift_id, Gift.name)
            .order_by(func.coalesce(func.sum(GiftTransaction.total_coins), 0).desc())
            .limit(TOP_LIMIT)
        )
        top_gifts = [
            {"key": _key(gift_id), "label": name or "Removed gift", "quantity": int(quantity), "coins": int(coins)}
            for gift_id, name, quantity, coins in (await self.session.execute(top_gifts_stmt)).all()
        ]

        top_receivers_stmt = (
            select(
                GiftTransaction.receiver_id,
                User.username,
                func.count(GiftTransaction.id),
                func.coalesce(func.sum(GiftTransaction.total_coins), 0),
            )
            .join(User, User.id == GiftTransaction.receiver_id)
            .where(*window)
            .group_by(GiftTransaction.receiver_id, User.username)
            .order_by(func.coalesce(func.sum(GiftTransaction.total_coins), 0).desc())
            .limit(TOP_LIMIT)
        )
        top_receivers = [
            {"key": str(receiver_id), "label": username, "gifts": int(count), "coins": int(coins)}
            for receiver_id, username, count, coins in (await self.session.execute(top_receivers_stmt)).all()
        ]

        return {
            "transactions": await self._count(GiftTransaction, *window),
            "gifts_sent": int(await self._sum(GiftTransaction.quantity, *window)),
            "coins": int(await self._sum(GiftTransaction.total_coins, *window)),
            "active_gifts": await self._count(Gift, Gift.is_active.is_(True)),
            "top_gifts": top_gifts,
            "top_receivers": top_receivers,
            "events": await self._events(
                (GiftTransaction.created_at, GiftTransaction.total_coins),
                *window,
            ),
        }

    # reports

    async def reports(self, lower: datetime, upper: datetime) -> dict[str, Any]:
        window = self._window(Report.created_at, lower, upper)
        return {
            "by_status": await self._group_counts(Report.status, *window),
            "by_reason": await self._group_counts(Report.reason, *window),
            "by_action": await self._group_counts(
                Report.moderation_action,
                Report.status == ReportStatusEnum.RESOLVED,
                *window,
            ),
            "open_reports": await self._count(
                Report,
                Report.status.in_((ReportStatusEnum.PENDING, ReportStatusEnum.UNDER_REVIEW)),
            ),
            "events": await self._events((Report.created_at,), *window),
        }

    # discounts

    async def discounts(self, lower: datetime, upper: datetime) -> dict[str, Any]:
        window = self._window(DiscountRedemption.created_at, lower, upper)

        top_codes_stmt = (
            select(
                DiscountRedemption.discount_code_id,
                DiscountCode.code,
                func.count(DiscountRedemption.id),
                func.coalesce(func.sum(DiscountRedemption.discount_amount), 0),
            )
            .outerjoin(DiscountCode, DiscountCode.id == DiscountRedemption.discount_code_id)
            .where(*window)
            .group_by(DiscountRedemption.discount_code_id, DiscountCode.code)
            .order_by(func.count(DiscountRedemption.id).desc())
            .limit(TOP_LIMIT)
        )
        top_codes = [
            {
                "key": _key(code_id),
                "label": code or "Removed code",
                "redemptions": int(count),
                "discount_amount": to_money(amount),
            }
            for code_id, code, count, amount in (await self.session.execute(top_codes_stmt)).all()
        ]

        return {
            "redemptions": await self._count(DiscountRedemption, *window),
            "discount_amount": to_money(await self._sum(DiscountRedemption.discount_amount, *window)),
            "active_codes": await self._count(DiscountCode, DiscountCode.is_active.is_(True)),
            "top_codes": top_codes,
            "events": await self._events(
                (DiscountRedemption.created_at, DiscountRedemption.discount_amount),
                *window,
            ),
        }

    # admin activity

    async def admin_activity(self, lower: datetime, upper: datetime) -> dict[str, Any]:
        window = self._window(AuditRecord.created_at, lower, upper)

        by_admin_stmt = (
            select(AuditRecord.actor_id, Admin.email, func.count(AuditRecord.id))
            .outerjoin(Admin, Admin.id == AuditRecord.actor_id)
            .where(*window)
            .group_by(AuditRecord.actor_id, Admin.email)
            .order_by(func.count(AuditRecord.id).desc())
            .limit(TOP_LIMIT)
        )
        by_admin = [
            {"key": _key(actor_id), "label": email, "actions": int(count)}
            for actor_id, email, count in (await self.session.execute(by_admin_stmt)).all()
        ]

        return {
            "actions": await self._count(AuditRecord, *window),
            "active_admins": await self._count(Admin, Admin.is_active.is_(True)),
            "by_action": await self._group_counts(AuditRecord.action, *window),
            "by_admin": by_admin,
            "events": await self._events((AuditRecord.created_at,), *window),
        }

    # overview

    async def overview(self, lower: datetime, upper: datetime) -> dict[str, Any]:
        payment_window = self._window(Payment.created_at, lower, upper)
        completed = (Payment.status == PaymentStatusEnum.COMPLETED, *payment_window)
        user_window = self._window(User.created_at, lower, upper)
        return {
            "total_users": await self._count(User),
            "new_users": await self._count(User, *user_window),
            "creators": await self.creator_count(),
            "revenue": to_money(await self._sum(Payment.amount, *completed)),
            "payments": await self._count(Payment, *completed),
            "posts": await self._count(Post, *self._window(Post.created_at, lower, upper)),
            "live_streams": await self._count(Stream, Stream.status == StreamStatusEnum.LIVE),
            "open_reports": await self._count(
                Report,
                Report.status.in_((ReportStatusEnum.PENDING, ReportStatusEnum.UNDER_REVIEW)),
            ),
            "pending_applications": await self._count(
                CreatorApplication,
                CreatorApplication.status == CreatorApplicationStatusEnum.PENDING,
            ),
            "gift_coins": int(
                await self._sum(
                    GiftTransaction.total_coins,
                    *self._window(GiftTransaction.created_at, lower, upper),
                ),
            ),
            "signup_events": await self._events((User.created_at,), *user_window),
            "revenue_events": await self._events((Payment.created_at, Payment.amount), *completed),
        }