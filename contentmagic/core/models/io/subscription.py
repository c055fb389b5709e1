"""Subscription, usage and billing schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from .base import CamelModel


class UsageStats(CamelModel):
    current_usage: int
    monthly_limit: int
    tier: str
    reset_date: datetime
    remaining_posts: int


class SubscriptionRead(CamelModel):
    id: int
    stripe_subscription_id: Optional[str] = None
    status: str
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    created_at: datetime


class SubscriptionStatusRead(CamelModel):
    subscription: Optional[SubscriptionRead] = None
    usage: UsageStats


class PlanRead(CamelModel):
    tier: str
    name: str
    monthly_limit: int
    price_cents: int


class PlansRead(CamelModel):
    plans: List[PlanRead]


class CheckoutRequest(CamelModel):
    tier: Optional[str] = None
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None


class CheckoutRead(CamelModel):
    session_id: str
    url: Optional[str] = None


class WebhookAck(CamelModel):
    received: bool = True
