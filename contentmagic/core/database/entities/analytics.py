"""
Analytics entity model.

Engagement metrics are stored as increments: each row adds ``metric_value``
to one metric of one post, so totals are sums over rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer
from sqlmodel import Field

from ..base import Base, utc_now


class AnalyticsMetric(Base, table=True):
    """One recorded metric increment for a post.

    Table: analytics
    """

    __tablename__ = "analytics"

    # Primary key
    id: Optional[int] = Field(default=None, primary_key=True)

    # Post
    post_id: int = Field(
        sa_column=Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    )

    # Metric
    metric_type: str = Field(max_length=50, index=True, description="views, likes, shares or comments")
    metric_value: int = Field(description="Amount added to the metric")

    # Timestamp
    recorded_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"AnalyticsMetric(id={self.id}, post_id={self.post_id}, {self.metric_type}={self.metric_value})"
