"""
Analytics Dashboard Endpoints.

Aggregates over the simulated engagement metrics of the user's posts.
"""

from typing import Optional

from fastapi import APIRouter, Query, Request, status

from contentmagic.core.database.repositories import PostRepository
from contentmagic.core.errors import NotFoundError
from contentmagic.core.models.domain import MetricType
from contentmagic.core.models.io.analytics import (
    MetricsCreate,
    MetricsRecorded,
    OverviewRead,
    PerformanceRead,
    TrendsRead,
)
from contentmagic.core.models.io.base import ApiResponse
from contentmagic.server.api.params import parse_datetime
from contentmagic.server.api.response import success
from contentmagic.server.services.deps import AnalyticsServiceDep, CurrentUserDep, SessionDep

router = APIRouter()


@router.get(
    "/overview",
    response_model=ApiResponse[OverviewRead],
    summary="Analytics Overview",
    description="Post count, metric totals and the per-platform breakdown.",
)
async def overview(
    request: Request,
    user: CurrentUserDep,
    analytics: AnalyticsServiceDep,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    platform: Optional[str] = Query(None),
) -> ApiResponse[OverviewRead]:
    data = await analytics.overview(
        user.id, start=parse_datetime(start_date), end=parse_datetime(end_date), platform=platform or None
    )
    return success(request, data)


@router.get(
    "/performance",
    response_model=ApiResponse[PerformanceRead],
    summary="Performance",
    description="Daily series of one metric per platform and the ten best posts by that metric.",
)
async def performance(
    request: Request,
    user: CurrentUserDep,
    analytics: AnalyticsServiceDep,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    platform: Optional[str] = Query(None),
    metric_type: MetricType = Query(MetricType.views, alias="metricType"),
) -> ApiResponse[PerformanceRead]:
    data = await analytics.performance(
        user.id,
        metric_type=metric_type.value,
        start=parse_datetime(start_date),
        end=parse_datetime(end_date),
        platform=platform or None,
    )
    return success(request, data)


@router.get(
    "/trends",
    response_model=ApiResponse[TrendsRead],
    summary="Trends",
    description="Daily totals per metric over the last N days and the latest day-over-day growth.",
)
async def trends(
    request: Request,
    user: CurrentUserDep,
    analytics: AnalyticsServiceDep,
    days: int = Query(30, ge=1, le=365, description="Window length in days"),
) -> ApiResponse[TrendsRead]:
    return success(request, await analytics.trends(user.id, days=days))


@router.post(
    "/metrics",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[MetricsRecorded],
    summary="Record Metrics",
    description="Append metric values to one of the user's posts.",
    responses={404: {"description": "Post not found or owned by another user"}},
)
async def record_metrics(
    request: Request,
    payload: MetricsCreate,
    user: CurrentUserDep,
    session: SessionDep,
    analytics: AnalyticsServiceDep,
) -> ApiResponse[MetricsRecorded]:
    post = await PostRepository(session).get_owned(payload.post_id, user.id)
    if post is None:
        raise NotFoundError(message="Post not found or access denied", code="POST_NOT_FOUND")

    recorded = await analytics.record_metrics(
        payload.post_id, [(metric.type.value, metric.value) for metric in payload.metrics]
    )
    return success(request, MetricsRecorded(message="Metrics recorded successfully", recorded=recorded))
