"""Database entities (SQLModel tables)."""

from .analytics import AnalyticsMetric
from .posts import Post
from .subscriptions import Subscription
from .users import User

__all__ = ["AnalyticsMetric", "Post", "Subscription", "User"]
