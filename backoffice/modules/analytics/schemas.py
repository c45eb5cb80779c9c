"""Analytics schemas."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from backoffice.core.enums import AnalyticsMetricEnum, GroupByEnum


class TimeSeriesPoint(BaseModel):
    """Values summed over one calendar bucket."""

    bucket: date
    values: dict[str, int | Decimal]


class BreakdownRow(BaseModel):
    """One group of a categorical breakdown."""

    key: str
    label: str | None = None
    values: dict[str, int | Decimal]


class AggregationResult(BaseModel):
    """Uniform payload for every dashboard metric."""

    metric: AnalyticsMetricEnum
    start_date: date
    end_date: date
    group_by: GroupByEnum
    totals: dict[str, int | Decimal]
    breakdowns: dict[str, list[BreakdownRow]] = Field(default_factory=dict)
    series: list[TimeSeriesPoint] = Field(default_factory=list)
