"""Analytics dashboard schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import Field

from contentmagic.core.models.domain import MetricType

from .base import CamelModel


class MetricTotal(CamelModel):
    total: int
    count: int


class Overview(CamelModel):
    total_posts: int
    metrics: Dict[str, MetricTotal]


class PlatformBreakdown(CamelModel):
    platform: str
    count: int
    total_views: int
    total_likes: int


class OverviewRead(CamelModel):
    overview: Overview
    platform_breakdown: List[PlatformBreakdown]


class TimeSeriesPoint(CamelModel):
    date: str
    platform: str
    total_value: int
    count: int


class TopPost(CamelModel):
    post_id: int
    platform: str
    content_type: str
    created_at: datetime
    total_value: int


class PerformanceRead(CamelModel):
    time_series: List[TimeSeriesPoint]
    top_posts: List[TopPost]
    metric_type: str


class TrendPoint(CamelModel):
    date: str
    metric_type: str
    total_value: int


class TrendsRead(CamelModel):
    trends: List[TrendPoint]
    growth_rates: Dict[str, float]
    period: str


class MetricInput(CamelModel):
    type: MetricType
    value: int = Field(ge=0)


class MetricsCreate(CamelModel):
    post_id: int
    metrics: List[MetricInput] = Field(min_length=1)


class MetricsRecorded(CamelModel):
    message: str
    recorded: int
