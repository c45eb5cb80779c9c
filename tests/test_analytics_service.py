from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from backoffice.core.enums import (
    AuditActionEnum,
    GroupByEnum,
    PaymentStatusEnum,
    ReportStatusEnum,
    SubjectKindEnum,
    UserRoleEnum,
)
from backoffice.modules.analytics.repository import AnalyticsRepository
from backoffice.modules.analytics.service import AnalyticsService
from backoffice.shared.exceptions import InvalidInputException, UnauthenticatedException
from backoffice.shared.utils import utc_now


class FakeAuditService:
    def __init__(self) -> None:
        self.best_effort_calls: list[dict] = []

    async def record_best_effort(self, **fields):
        self.best_effort_calls.append(fields)
        return SimpleNamespace(**fields)


def _service(session, audit: FakeAuditService | None = None) -> AnalyticsService:
    return AnalyticsService(AnalyticsRepository(session), audit or FakeAuditService())


@pytest.mark.asyncio
async def test_revenue_counts_completed_payments_in_range(session, factory, admin_actor, days_ago) -> None:
    buyer = await factory.user()
    await factory.payment(buyer, amount=Decimal("10.00"), coins=100, created_at=days_ago(1))
    await factory.payment(buyer, amount=Decimal("5.50"), coins=50, created_at=days_ago(3))
    await factory.payment(buyer, amount=Decimal("99.00"), status=PaymentStatusEnum.FAILED, created_at=days_ago(1))
    await factory.payment(buyer, amount=Decimal("2.00"), status=PaymentStatusEnum.REFUNDED, created_at=days_ago(1))
    await factory.payment(buyer, amount=Decimal("70.00"), created_at=days_ago(90))

    result = await _service(session).aggregate(admin_actor, "revenue")

    assert result.totals["revenue"] == Decimal("15.50")
    assert result.totals["payments"] == 2
    assert result.totals["coins"] == 150
    assert result.totals["refunded_amount"] == Decimal("2.00")
    assert result.totals["net_revenue"] == Decimal("13.50")
    assert result.totals["average_order_value"] == Decimal("7.75")
    assert sum(point.values["revenue"] for point in result.series) == Decimal("15.50")
    assert sum(point.values["payments"] for point in result.series) == 2
    assert result.breakdowns["by_currency"][0].key == "USD"


@pytest.mark.asyncio
async def test_series_is_zero_filled_for_default_window(session, admin_actor) -> None:
    result = await _service(session).aggregate(admin_actor, "users")

    assert (result.end_date - result.start_date).days + 1 == 30
    assert len(result.series) == 30
    assert all(point.values == {"signups": 0} for point in result.series)
    assert result.totals["total_users"] == 0


@pytest.mark.asyncio
async def test_weekly_and_monthly_grouping_preserve_totals(session, factory, admin_actor, days_ago) -> None:
    for days in (0, 1, 8, 20, 29):
        await factory.user(created_at=days_ago(days))
    service = _service(session)

    for group_by in GroupByEnum:
        result = await service.aggregate(admin_actor, "users", group_by=group_by)
        assert result.totals["new_users"] == 5
        assert sum(point.values["signups"] for point in result.series) == 5


@pytest.mark.asyncio
async def test_transactions_success_rate(session, factory, admin_actor, days_ago) -> None:
    buyer = await factory.user()
    for status in (
        PaymentStatusEnum.COMPLETED,
        PaymentStatusEnum.COMPLETED,
        PaymentStatusEnum.COMPLETED,
        PaymentStatusEnum.FAILED,
    ):
        await factory.payment(buyer, status=status, created_at=days_ago(1))

    result = await _service(session).aggregate(admin_actor, "transactions")

    assert result.totals["total"] == 4
    assert result.totals["completed"] == 3
    assert result.totals["pending"] == 0
    assert result.totals["success_rate"] == Decimal("75.00")
    assert result.breakdowns["by_status"][0].key == "completed"


@pytest.mark.asyncio
async def test_users_and_reports_breakdowns(session, factory, admin_actor, days_ago) -> None:
    reporter = await factory.user()
    creator = await factory.user(UserRoleEnum.CREATOR, is_suspended=True)
    await factory.application(reporter)
    await factory.report(reporter, creator)
    await factory.report(reporter, creator, status=ReportStatusEnum.DISMISSED)
    service = _service(session)

    users = await service.aggregate(admin_actor, "users")
    assert users.totals["suspended_users"] == 1
    assert users.totals["pending_applications"] == 1
    assert {row.key: row.values["count"] for row in users.breakdowns["by_role"]} == {"user": 1, "creator": 1}

    reports = await service.aggregate(admin_actor, "reports")
    assert reports.totals["reports"] == 2
    assert reports.totals["open_reports"] == 1
    assert reports.totals["dismissed"] == 1


@pytest.mark.asyncio
async def test_overview_and_content(session, factory, admin_actor) -> None:
    creator = await factory.user(UserRoleEnum.CREATOR)
    post = await factory.post(creator)
    await factory.comment(post, creator)
    await factory.stream(creator)
    service = _service(session)

    overview = await service.aggregate(admin_actor, "overview")
    assert overview.totals["creators"] == 1
    assert overview.totals["posts"] == 1
    assert overview.totals["live_streams"] == 1

    content = await service.aggregate(admin_actor, "content")
    assert content.totals["comments"] == 1
    assert sum(point.values["posts"] for point in content.series) == 1


@pytest.mark.asyncio
async def test_each_view_writes_best_effort_audit(session, admin_actor) -> None:
    audit = FakeAuditService()

    result = await _service(session, audit).aggregate(admin_actor, "gifts", group_by=GroupByEnum.WEEK)

    assert len(audit.best_effort_calls) == 1
    call = audit.best_effort_calls[0]
    assert call["action"] == AuditActionEnum.ANALYTICS_VIEWED
    assert call["subject_kind"] == SubjectKindEnum.ANALYTICS
    assert call["subject_id"] == "gifts"
    assert call["details"]["group_by"] == "week"
    assert call["details"]["end_date"] == result.end_date.isoformat()


@pytest.mark.asyncio
async def test_invalid_metric_and_ranges(session, admin_actor) -> None:
    service = _service(session)
    today = utc_now().date()

    with pytest.raises(InvalidInputException):
        await service.aggregate(admin_actor, "weather")
    with pytest.raises(InvalidInputException):
        await service.aggregate(admin_actor, "revenue", start_date=today, end_date=today - timedelta(days=1))
    with pytest.raises(InvalidInputException):
        await service.aggregate(admin_actor, "revenue", start_date=today - timedelta(days=400), end_date=today)


@pytest.mark.asyncio
async def test_inactive_actor_cannot_read_analytics(session, actor_factory) -> None:
    audit = FakeAuditService()

    with pytest.raises(UnauthenticatedException):
        await _service(session, audit).aggregate(actor_factory(is_active=False), "overview")
    assert audit.best_effort_calls == []
