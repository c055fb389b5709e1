"""Domain enums and static tables shared by services and routes."""

from __future__ import annotations

from .enums import (
    ContentType,
    MetricType,
    Platform,
    SortField,
    SortOrder,
    SubscriptionStatus,
    SubscriptionTier,
)
from .tiers import PAID_TIERS, TIER_PLANS, TierPlan, plan_for

__all__ = [
    "ContentType",
    "MetricType",
    "Platform",
    "SortField",
    "SortOrder",
    "SubscriptionStatus",
    "SubscriptionTier",
    "PAID_TIERS",
    "TIER_PLANS",
    "TierPlan",
    "plan_for",
]
