"""
Analytics Service.

Engagement metrics are simulated: every new post gets random baseline
numbers and can be grown later. The dashboard aggregates live in
:class:`AnalyticsRepository`; this service shapes them for the API.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Dict, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from contentmagic.core.database.base import utc_now
from contentmagic.core.database.repositories import AnalyticsRepository, PostRepository
from contentmagic.core.logging_config import get_logger
from contentmagic.core.models.domain import MetricType
from contentmagic.core.models.io.analytics import (
    MetricTotal,
    Overview,
    OverviewRead,
    PerformanceRead,
    PlatformBreakdown,
    TimeSeriesPoint,
    TopPost,
    TrendPoint,
    TrendsRead,
)

logger = get_logger(__name__)

# Inclusive ranges for a new post's first numbers
BASELINE_RANGES = {
    MetricType.views: (10, 59),
    MetricType.likes: (1, 10),
    MetricType.shares: (0, 2),
    MetricType.comments: (0, 4),
}

# Inclusive ranges for one simulated growth step
GROWTH_RANGES = {
    MetricType.views: (5, 24),
    MetricType.likes: (1, 5),
    MetricType.shares: (0, 1),
    MetricType.comments: (0, 2),
}


def growth_rates(trends: Iterable[TrendPoint]) -> Dict[str, float]:
    """Percent change between the last two days of each metric.

    Metrics with fewer than two days, or whose previous day is zero, are left out.
    """
    series: Dict[str, list[int]] = {}
    for point in trends:
        series.setdefault(point.metric_type, []).append(point.total_value)

    rates = {}
    for metric_type, values in series.items():
        if len(values) >= 2 and values[-2] > 0:
            rates[metric_type] = (values[-1] - values[-2]) / values[-2] * 100
    return rates


class AnalyticsService:
    """Simulated post metrics and dashboard aggregates."""

    def __init__(self, session: AsyncSession, rng: Optional[random.Random] = None) -> None:
        self.analytics = AnalyticsRepository(session)
        self.posts = PostRepository(session)
        self.rng = rng or random.Random()

    async def initialize_post_analytics(self, post_id: int) -> None:
        """Record random baseline metrics for a new post."""
        baseline = [(kind.value, self.rng.randint(low, high)) for kind, (low, high) in BASELINE_RANGES.items()]
        await self.analytics.add_many(post_id, baseline)

    async def simulate_metric_growth(self, post_id: int) -> int:
        """
        Add one step of simulated organic growth to a post's existing metrics.

        Returns:
            Number of metric rows added (zero increments are skipped)
        """
        current = await self.analytics.totals_for_post(post_id)
        if not current:
            return 0

        growth = []
        for metric_type in current:
            try:
                low, high = GROWTH_RANGES[MetricType(metric_type)]
            except ValueError:
                continue
            value = self.rng.randint(low, high)
            if value > 0:
                growth.append((metric_type, value))
        rows = await self.analytics.add_many(post_id, growth)
        return len(rows)

    async def get_post_metrics(self, post_id: int) -> Dict[str, int]:
        return await self.analytics.totals_for_post(post_id)

    async def record_metric(self, post_id: int, metric_type: str, value: int) -> None:
        await self.analytics.add_many(post_id, [(metric_type, value)])

    async def record_metrics(self, post_id: int, metrics: Iterable[tuple[str, int]]) -> int:
        rows = await self.analytics.add_many(post_id, metrics)
        return len(rows)

    # =====================================================================
    # Dashboard
    # =====================================================================

    async def overview(
        self,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        platform: Optional[str] = None,
    ) -> OverviewRead:
        totals = await self.analytics.metric_totals(user_id, start, end, platform)
        breakdown = await self.analytics.platform_breakdown(user_id, platform)
        return OverviewRead(
            overview=Overview(
                total_posts=await self.posts.count_for_user(user_id),
                metrics={name: MetricTotal(**values) for name, values in totals.items()},
            ),
            platform_breakdown=[PlatformBreakdown(**row) for row in breakdown],
        )

    async def performance(
        self,
        user_id: int,
        metric_type: str = MetricType.views.value,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        platform: Optional[str] = None,
    ) -> PerformanceRead:
        series = await self.analytics.time_series(user_id, metric_type, start, end, platform)
        top = await self.analytics.top_posts(user_id, metric_type, start, end, platform)
        return PerformanceRead(
            time_series=[TimeSeriesPoint(**row) for row in series],
            top_posts=[TopPost(**row) for row in top],
            metric_type=metric_type,
        )

    async def trends(self, user_id: int, days: int = 30) -> TrendsRead:
        since = utc_now() - timedelta(days=days)
        points = [TrendPoint(**row) for row in await self.analytics.daily_trends(user_id, since)]
        return TrendsRead(trends=points, growth_rates=growth_rates(points), period=f"{days} days")
