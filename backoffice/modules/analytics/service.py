"""Analytics business logic layer."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from typing import Any

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.access import authorize
from backoffice.core.config import get_settings
from backoffice.core.database import get_db_session, run_read_with_retry
from backoffice.core.enums import (
    AccessLevelEnum,
    AnalyticsMetricEnum,
    AuditActionEnum,
    GroupByEnum,
    PaymentStatusEnum,
    ReportStatusEnum,
    SubjectKindEnum,
)
from backoffice.modules.analytics.reducer import build_series, range_bounds, ratio, resolve_range, to_money
from backoffice.modules.analytics.repository import AnalyticsRepository
from backoffice.modules.analytics.schemas import AggregationResult
from backoffice.modules.audit.service import AuditService, build_audit_service
from backoffice.shared.exceptions import InvalidInputException

logger = logging.getLogger(__name__)

Window = tuple[date, date, GroupByEnum]


def _counts_rows(counts: dict[str, int], name: str = "count") -> list[dict]:
    return [
        {"key": key, "values": {name: count}}
        for key, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]


def _rows(items: list[dict], value_keys: tuple[str, ...]) -> list[dict]:
    return [
        {
            "key": item["key"],
            "label": item.get("label"),
            "values": {name: item[name] for name in value_keys},
        }
        for item in items
    ]


def _each(events: list[tuple], **values: int) -> list[tuple]:
    """Events carrying constant per-row values (counts)."""
    return [(row[0], values) for row in events]


def _revenue(raw: dict[str, Any], window: Window) -> dict[str, Any]:
    start, end, group_by = window
    average = (raw["revenue"] / raw["payments"]).quantize(Decimal("0.01")) if raw["payments"] else Decimal("0.00")
    return {
        "totals": {
            "revenue": raw["revenue"],
            "payments": raw["payments"],
            "coins": raw["coins"],
            "average_order_value": average,
            "refunded_amount": raw["refunded_amount"],
            "net_revenue": raw["revenue"] - raw["refunded_amount"],
        },
        "breakdowns": {
            "by_package": _rows(raw["by_package"], ("count", "revenue")),
            "by_currency": _rows(raw["by_currency"], ("count", "revenue")),
        },
        "series": build_series(
            start,
            end,
            group_by,
            ((created_at, {"revenue": to_money(amount), "payments": 1}) for created_at, amount in raw["events"]),
            {"revenue": Decimal("0.00"), "payments": 0},
        ),
    }


def _transactions(raw: dict[str, Any], window: Window) -> dict[str, Any]:
    start, end, group_by = window
    by_status = {status.value: raw["by_status"].get(status.value, 0) for status in PaymentStatusEnum}
    total = sum(by_status.values())
    zeros = {"total": 0, **{status.value: 0 for status in PaymentStatusEnum}}
    return {
        "totals": {
            "total": total,
            **by_status,
            "success_rate": ratio(by_status[PaymentStatusEnum.COMPLETED.value], total),
        },
        "breakdowns": {"by_status": _counts_rows(by_status)},
        "series": build_series(
            start,
            end,
            group_by,
            ((created_at, {"total": 1, str(status): 1}) for created_at, status in raw["events"]),
            zeros,
        ),
    }


def _users(raw: dict[str, Any], window: Window) -> dict[str, Any]:
    start, end, group_by = window
    return {
        "totals": {
            "total_users": raw["total_users"],
            "new_users": raw["new_users"],
            "suspended_users": raw["suspended_users"],
            "verified_users": raw["verified_users"],
            "pending_applications": raw["pending_applications"],
        },
        "breakdowns": {"by_role": _counts_rows(raw["by_role"])},
        "series": build_series(start, end, group_by, _each(raw["events"], signups=1), {"signups": 0}),
    }


def _content(raw: dict[str, Any], window: Window) -> dict[str, Any]:
    start, end, group_by = window
    events = [
        *_each(raw["post_events"], posts=1),
        *_each(raw["comment_events"], comments=1),
        *_each(raw["like_events"], likes=1),
    ]
    return {
        "totals": {
            name: raw[name]
            for name in (
                "posts",
                "comments",
                "likes",
                "hidden_posts",
                "deleted_posts",
                "flagged_posts",
                "hidden_comments",
                "live_streams",
            )
        },
        "breakdowns": {
            "posts_by_type": _counts_rows(raw["posts_by_type"]),
            "posts_by_status": _counts_rows(raw["posts_by_status"]),
        },
        "series": build_series(start, end, group_by, events, {"posts": 0, "comments": 0, "likes": 0}),
    }


def _gifts(raw: dict[str, Any], window: Window) -> dict[str, Any]:
    start, end, group_by = window
    return {
        "totals": {
            "transactions": raw["transactions"],
            "gifts_sent": raw["gifts_sent"],
            "coins": raw["coins"],
            "active_gifts": raw["active_gifts"],
        },
        "breakdowns": {
            "top_gifts": _rows(raw["top_gifts"], ("quantity", "coins")),
            "top_receivers": _rows(raw["top_receivers"], ("gifts", "coins")),
        },
        "series": build_series(
            start,
            end,
            group_by,
            ((created_at, {"coins": int(coins), "transactions": 1}) for created_at, coins in raw["events"]),
            {"coins": 0, "transactions": 0},
        ),
    }


def _reports(raw: dict[str, Any], window: Window) -> dict[str, Any]:
    start, end, group_by = window
    by_status = {status.value: raw["by_status"].get(status.value, 0) for status in ReportStatusEnum}
    return {
        "totals": {
            "reports": sum(by_status.values()),
            "open_reports": raw["open_reports"],
            **by_status,
        },
        "breakdowns": {
            "by_status": _counts_rows(by_status),
            "by_reason": _counts_rows(raw["by_reason"]),
            "by_moderation_action": _counts_rows(raw["by_action"]),
        },
        "series": build_series(start, end, group_by, _each(raw["events"], reports=1), {"reports": 0}),
    }


def _discounts(raw: dict[str, Any], window: Window) -> dict[str, Any]:
    start, end, group_by = window
    return {
        "totals": {
            "redemptions": raw["redemptions"],
            "discount_amount": raw["discount_amount"],
            "active_codes": raw["active_codes"],
        },
        "breakdowns": {"top_codes": _rows(raw["top_codes"], ("redemptions", "discount_amount"))},
        "series": build_series(
            start,
            end,
            group_by,
            (
                (created_at, {"redemptions": 1, "discount_amount": to_money(amount)})
                for created_at, amount in raw["events"]
            ),
            {"redemptions": 0, "discount_amount": Decimal("0.00")},
        ),
    }


def _admin_activity(raw: dict[str, Any], window: Window) -> dict[str, Any]:
    start, end, group_by = window
    return {
        "totals": {"actions": raw["actions"], "active_admins": raw["active_admins"]},
        "breakdowns": {
            "by_action": _counts_rows(raw["by_action"], "actions"),
            "by_admin": _rows(raw["by_admin"], ("actions",)),
        },
        "series": build_series(start, end, group_by, _each(raw["events"], actions=1), {"actions": 0}),
    }


def _overview(raw: dict[str, Any], window: Window) -> dict[str, Any]:
    start, end, group_by = window
    events = [
        *_each(raw["signup_events"], signups=1),
        *((created_at, {"revenue": to_money(amount)}) for created_at, amount in raw["revenue_events"]),
    ]
    return {
        "totals": {
            name: raw[name]
            for name in (
                "total_users",
                "new_users",
                "creators",
                "revenue",
                "payments",
                "posts",
                "live_streams",
                "open_reports",
                "pending_applications",
                "gift_coins",
            )
        },
        "breakdowns": {},
        "series": build_series(
            start,
            end,
            group_by,
            events,
            {"signups": 0, "revenue": Decimal("0.00")},
        ),
    }


_BUILDERS: dict[AnalyticsMetricEnum, Callable[[dict[str, Any], Window], dict[str, Any]]] = {
    AnalyticsMetricEnum.OVERVIEW: _overview,
    AnalyticsMetricEnum.REVENUE: _revenue,
    AnalyticsMetricEnum.TRANSACTIONS: _transactions,
    AnalyticsMetricEnum.USERS: _users,
    AnalyticsMetricEnum.CONTENT: _content,
    AnalyticsMetricEnum.GIFTS: _gifts,
    AnalyticsMetricEnum.REPORTS: _reports,
    AnalyticsMetricEnum.DISCOUNTS: _discounts,
    AnalyticsMetricEnum.ADMIN_ACTIVITY: _admin_activity,
}


class AnalyticsService:
    """Read-only dashboard aggregations."""

    def __init__(
        self,
        repository: AnalyticsRepository,
        audit_service: AuditService,
        default_range_days: int = 30,
        max_range_days: int = 366,
    ) -> None:
        self.repository = repository
        self.audit_service = audit_service
        self.default_range_days = default_range_days
        self.max_range_days = max_range_days

    async def aggregate(
        self,
        actor,
        metric: str,
        start_date: date | None = None,
        end_date: date | None = None,
        group_by: GroupByEnum = GroupByEnum.DAY,
    ) -> AggregationResult:
        """Compute one metric over an inclusive UTC date range."""
        authorize(actor, AccessLevelEnum.ADMIN)
        try:
            metric_kind = AnalyticsMetricEnum(metric)
        except ValueError as exc:
            raise InvalidInputException(f"Unknown analytics metric: {metric}") from exc

        start, end = resolve_range(
            start_date,
            end_date,
            default_days=self.default_range_days,
            max_days=self.max_range_days,
        )
        lower, upper = range_bounds(start, end)

        query = getattr(self.repository, metric_kind.value)
        raw = await run_read_with_retry(self.repository.session, lambda: query(lower, upper))
        payload = _BUILDERS[metric_kind](raw, (start, end, group_by))

        result = AggregationResult(
            metric=metric_kind,
            start_date=start,
            end_date=end,
            group_by=group_by,
            **payload,
        )

        await self.audit_service.record_best_effort(
            actor_id=actor.id,
            action=AuditActionEnum.ANALYTICS_VIEWED,
            subject_kind=SubjectKindEnum.ANALYTICS,
            subject_id=metric_kind.value,
            description=f"Viewed {metric_kind.value} analytics",
            details={
                "metric": metric_kind.value,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "group_by": group_by.value,
            },
        )
        logger.debug("Analytics computed: metric=%s range=%s..%s", metric_kind.value, start, end)
        return result


async def get_analytics_service(session: AsyncSession = Depends(get_db_session)) -> AnalyticsService:
    """Dependency provider for analytics service."""
    settings = get_settings()
    return AnalyticsService(
        AnalyticsRepository(session),
        build_audit_service(session),
        default_range_days=settings.analytics_default_range_days,
        max_range_days=settings.analytics_max_range_days,
    )
