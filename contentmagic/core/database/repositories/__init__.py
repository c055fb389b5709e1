"""Repositories: one async data-access class per table."""

from .analytics import AnalyticsRepository
from .base import AsyncBaseRepository, QueryBuilder
from .posts import PostRepository
from .subscriptions import SubscriptionRepository
from .users import UserRepository

__all__ = [
    "AnalyticsRepository",
    "AsyncBaseRepository",
    "PostRepository",
    "QueryBuilder",
    "SubscriptionRepository",
    "UserRepository",
]
