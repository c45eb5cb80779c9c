"""Pure calendar bucketing and zero-filled series reduction.

Buckets are calendar-aligned in UTC: a day starts at midnight, a week on
ISO Monday and a month on day 1. Every bucket that intersects the requested
range appears in the series, with zero values when nothing fell into it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal

from backoffice.core.enums import GroupByEnum
from backoffice.shared.exceptions import InvalidInputException
from backoffice.shared.utils import ensure_utc, utc_now

Number = int | Decimal

MONEY_QUANTUM = Decimal("0.01")


def resolve_range(
    start_date: date | None,
    end_date: date | None,
    *,
    default_days: int,
    max_days: int,
    today: date | None = None,
) -> tuple[date, date]:
    """Fill in defaults and validate an inclusive date range."""
    today = today or utc_now().date()
    end = end_date or today
    start = start_date or (end - timedelta(days=default_days - 1))

    if start > end:
        raise InvalidInputException("startDate must not be after endDate")
    if (end - start).days + 1 > max_days:
        raise InvalidInputException(f"Date range must not exceed {max_days} days")
    return start, end


def range_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Half-open UTC datetime window covering the inclusive date range."""
    lower = datetime.combine(start, time.min, tzinfo=UTC)
    upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=UTC)
    return lower, upper


def bucket_start(value: date | datetime, group_by: GroupByEnum) -> date:
    """Start date of the calendar bucket containing ``value``."""
    day = ensure_utc(value).date() if isinstance(value, datetime) else value
    if group_by == GroupByEnum.WEEK:
        return day - timedelta(days=day.weekday())
    if group_by == GroupByEnum.MONTH:
        return day.replace(day=1)
    return day


def _next_bucket(current: date, group_by: GroupByEnum) -> date:
    if group_by == GroupByEnum.WEEK:
        return current + timedelta(days=7)
    if group_by == GroupByEnum.MONTH:
        if current.month == 12:
            return current.replace(year=current.year + 1, month=1)
        return current.replace(month=current.month + 1)
    return current + timedelta(days=1)


def iter_buckets(start: date, end: date, group_by: GroupByEnum) -> list[date]:
    """All bucket starts intersecting ``[start, end]``, in order."""
    buckets: list[date] = []
    current = bucket_start(start, group_by)
    while current <= end:
        buckets.append(current)
        current = _next_bucket(current, group_by)
    return buckets


def build_series(
    start: date,
    end: date,
    group_by: GroupByEnum,
    events: Iterable[tuple[datetime, Mapping[str, Number]]],
    zeros: Mapping[str, Number],
) -> list[dict]:
    """Sum event values per bucket; ``zeros`` names the fields and their zero value.

    Events outside the range are ignored.
    """
    totals: dict[date, dict[str, Number]] = {
        bucket: dict(zeros) for bucket in iter_buckets(start, end, group_by)
    }
    for occurred_at, values in events:
        day = ensure_utc(occurred_at).date()
        if day < start or day > end:
            continue
        slot = totals[bucket_start(day, group_by)]
        for name, amount in values.items():
            slot[name] = slot[name] + amount

    return [{"bucket": bucket, "values": values} for bucket, values in totals.items()]


def to_money(value: Number | None) -> Decimal:
    """Normalise a database sum to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    return Decimal(value).quantize(MONEY_QUANTUM)


def ratio(part: Number, whole: Number) -> Decimal:
    """Percentage of ``part`` in ``whole`` with two decimals; zero when empty."""
    if not whole:
        return Decimal("0.00")
    return (Decimal(part) * 100 / Decimal(whole)).quantize(MONEY_QUANTUM)
