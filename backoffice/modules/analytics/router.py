"""Analytics API router."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from backoffice.core.enums import GroupByEnum
from backoffice.modules.analytics.schemas import AggregationResult
from backoffice.modules.analytics.service import AnalyticsService, get_analytics_service
from backoffice.modules.identity.service import get_current_actor
from backoffice.shared.responses import DataResponse

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/{metric}", response_model=DataResponse[AggregationResult])
async def get_metric(
    metric: str,
    current_actor=Depends(get_current_actor),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    group_by: GroupByEnum = Query(default=GroupByEnum.DAY, alias="groupBy"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> DataResponse[AggregationResult]:
    """Dashboard aggregation for one metric."""
    result = await service.aggregate(current_actor, metric, start_date, end_date, group_by)
    return DataResponse(data=result)
