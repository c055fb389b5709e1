"""
Analytics repository.

Stores metric increments and runs the aggregate queries behind the analytics
dashboard. Every aggregate is scoped to the posts of one user.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import and_, case, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.analytics import AnalyticsMetric
from ..entities.posts import Post
from .base import AsyncBaseRepository, QueryBuilder


def _date_str(value: Any) -> str:
    # date() is a DATE on PostgreSQL and a 'YYYY-MM-DD' string on SQLite
    return value if isinstance(value, str) else value.isoformat()


class AnalyticsRepository(AsyncBaseRepository[AnalyticsMetric]):
    """Repository for post engagement metrics."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AnalyticsMetric)

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[AnalyticsMetric]:
        """List metric rows in recording order.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: Field filters (post_id, metric_type)

        Returns:
            List of AnalyticsMetric instances
        """
        stmt = select(AnalyticsMetric).order_by(AnalyticsMetric.recorded_at, AnalyticsMetric.id)
        if filters:
            stmt = QueryBuilder.apply_filters(stmt, AnalyticsMetric, filters)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def add_many(self, post_id: int, metrics: Iterable[tuple[str, int]]) -> List[AnalyticsMetric]:
        """Record several metric increments for one post in a single commit."""
        rows = [AnalyticsMetric(post_id=post_id, metric_type=kind, metric_value=value) for kind, value in metrics]
        if not rows:
            return []
        self.session.add_all(rows)
        await self.session.commit()
        return rows

    async def totals_for_post(self, post_id: int) -> Dict[str, int]:
        stmt = (
            select(AnalyticsMetric.metric_type, func.sum(AnalyticsMetric.metric_value))
            .where(AnalyticsMetric.post_id == post_id)
            .group_by(AnalyticsMetric.metric_type)
        )
        result = await self.session.execute(stmt)
        return {metric_type: int(total or 0) for metric_type, total in result.all()}

    @staticmethod
    def _scope(
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        platform: Optional[str] = None,
        metric_type: Optional[str] = None,
    ):
        conditions = [Post.user_id == user_id]
        if start is not None:
            conditions.append(AnalyticsMetric.recorded_at >= start)
        if end is not None:
            conditions.append(AnalyticsMetric.recorded_at <= end)
        if platform:
            conditions.append(Post.platform == platform)
        if metric_type:
            conditions.append(AnalyticsMetric.metric_type == metric_type)
        return and_(*conditions)

    async def metric_totals(
        self,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        platform: Optional[str] = None,
    ) -> Dict[str, Dict[str, int]]:
        """Sum and row count per metric type.

        Returns:
            ``{metric_type: {"total": int, "count": int}}``
        """
        stmt = (
            select(
                AnalyticsMetric.metric_type,
                func.sum(AnalyticsMetric.metric_value),
                func.count(AnalyticsMetric.id),
            )
            .select_from(AnalyticsMetric)
            .join(Post, AnalyticsMetric.post_id == Post.id)
            .where(self._scope(user_id, start, end, platform))
            .group_by(AnalyticsMetric.metric_type)
        )
        result = await self.session.execute(stmt)
        return {
            metric_type: {"total": int(total or 0), "count": int(count)}
            for metric_type, total, count in result.all()
        }

    async def platform_breakdown(self, user_id: int, platform: Optional[str] = None) -> List[Dict[str, Any]]:
        """Posts, views and likes per platform, including posts with no metrics."""

        def metric_sum(kind: str):
            return func.coalesce(
                func.sum(case((AnalyticsMetric.metric_type == kind, AnalyticsMetric.metric_value), else_=0)), 0
            )

        stmt = (
            select(
                Post.platform,
                func.count(func.distinct(Post.id)),
                metric_sum("views"),
                metric_sum("likes"),
            )
            .select_from(Post)
            .outerjoin(AnalyticsMetric, AnalyticsMetric.post_id == Post.id)
            .where(Post.user_id == user_id)
            .group_by(Post.platform)
            .order_by(Post.platform)
        )
        if platform:
            stmt = stmt.where(Post.platform == platform)
        result = await self.session.execute(stmt)
        return [
            {"platform": name, "count": int(count), "total_views": int(views), "total_likes": int(likes)}
            for name, count, views, likes in result.all()
        ]

    async def time_series(
        self,
        user_id: int,
        metric_type: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        platform: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Daily totals of one metric per platform, oldest day first."""
        day = func.date(AnalyticsMetric.recorded_at)
        stmt = (
            select(day, Post.platform, func.sum(AnalyticsMetric.metric_value), func.count(AnalyticsMetric.id))
            .select_from(AnalyticsMetric)
            .join(Post, AnalyticsMetric.post_id == Post.id)
            .where(self._scope(user_id, start, end, platform, metric_type))
            .group_by(day, Post.platform)
            .order_by(day, Post.platform)
        )
        result = await self.session.execute(stmt)
        return [
            {"date": _date_str(date), "platform": name, "total_value": int(total or 0), "count": int(count)}
            for date, name, total, count in result.all()
        ]

    async def top_posts(
        self,
        user_id: int,
        metric_type: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        platform: Optional[str] = None,
        limit: int = 10,
    ) -> List[Dict[str, Any]]:
        """Posts with the highest total of ``metric_type``."""
        total = func.sum(AnalyticsMetric.metric_value)
        stmt = (
            select(Post.id, Post.platform, Post.content_type, Post.created_at, total)
            .select_from(AnalyticsMetric)
            .join(Post, AnalyticsMetric.post_id == Post.id)
            .where(self._scope(user_id, start, end, platform, metric_type))
            .group_by(Post.id, Post.platform, Post.content_type, Post.created_at)
            .order_by(desc(total), Post.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [
            {
                "post_id": post_id,
                "platform": name,
                "content_type": content_type,
                "created_at": created_at,
                "total_value": int(value or 0),
            }
            for post_id, name, content_type, created_at, value in result.all()
        ]

    async def daily_trends(self, user_id: int, since: datetime) -> List[Dict[str, Any]]:
        """Daily totals per metric type since ``since``, oldest day first."""
        day = func.date(AnalyticsMetric.recorded_at)
        stmt = (
            select(day, AnalyticsMetric.metric_type, func.sum(AnalyticsMetric.metric_value))
            .select_from(AnalyticsMetric)
            .join(Post, AnalyticsMetric.post_id == Post.id)
            .where(self._scope(user_id, start=since))
            .group_by(day, AnalyticsMetric.metric_type)
            .order_by(day, AnalyticsMetric.metric_type)
        )
        result = await self.session.execute(stmt)
        return [
            {"date": _date_str(date), "metric_type": metric_type, "total_value": int(total or 0)}
            for date, metric_type, total in result.all()
        ]
