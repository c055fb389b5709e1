"""
Unit tests for the simulated analytics service.
"""

import random

import pytest

from contentmagic.core.models.io.analytics import TrendPoint
from contentmagic.server.services.analytics import BASELINE_RANGES, AnalyticsService, growth_rates

pytestmark = pytest.mark.asyncio


def _points(*rows):
    return [TrendPoint(date=date, metric_type=kind, total_value=value) for date, kind, value in rows]


class TestGrowthRates:
    async def test_last_two_days(self):
        trends = _points(
            ("2026-10-01", "views", 50),
            ("2026-10-02", "views", 100),
            ("2026-10-03", "views", 150),
            ("2026-10-02", "likes", 4),
            ("2026-10-03", "likes", 2),
        )
        assert growth_rates(trends) == {"views": 50.0, "likes": -50.0}

    async def test_skips_single_day_and_zero_base(self):
        trends = _points(("2026-10-01", "views", 10), ("2026-10-01", "shares", 0), ("2026-10-02", "shares", 3))
        assert growth_rates(trends) == {}


class TestAnalyticsService:
    async def test_baseline_metrics_in_range(self, session, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)
        service = AnalyticsService(session, rng=random.Random(7))

        await service.initialize_post_analytics(post.id)
        totals = await service.get_post_metrics(post.id)

        assert set(totals) == {kind.value for kind in BASELINE_RANGES}
        for kind, (low, high) in BASELINE_RANGES.items():
            assert low <= totals[kind.value] <= high

    async def test_growth_only_adds(self, session, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)
        service = AnalyticsService(session, rng=random.Random(3))

        assert await service.simulate_metric_growth(post.id) == 0

        await service.initialize_post_analytics(post.id)
        before = await service.get_post_metrics(post.id)
        added = await service.simulate_metric_growth(post.id)
        after = await service.get_post_metrics(post.id)

        assert added >= 2
        assert after["views"] > before["views"]
        assert all(after[kind] >= before[kind] for kind in before)

    async def test_record_metric(self, session, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id)
        service = AnalyticsService(session)

        await service.record_metric(post.id, "views", 5)
        assert await service.record_metrics(post.id, [("views", 2), ("likes", 1)]) == 2
        assert await service.get_post_metrics(post.id) == {"views": 7, "likes": 1}

    async def test_overview_shape(self, session, make_user, make_post):
        user = await make_user()
        post = await make_post(user.id, platform="youtube")
        service = AnalyticsService(session)
        await service.record_metrics(post.id, [("views", 9)])

        overview = await service.overview(user.id)
        assert overview.overview.total_posts == 1
        assert overview.overview.metrics["views"].total == 9
        assert overview.platform_breakdown[0].platform == "youtube"
