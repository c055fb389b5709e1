"""Subscription tier plans: monthly post quota and monthly price."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import SubscriptionTier


@dataclass(frozen=True)
class TierPlan:
    tier: SubscriptionTier
    monthly_limit: int
    price_cents: int

    @property
    def display_name(self) -> str:
        return self.tier.value.capitalize()


TIER_PLANS: dict[SubscriptionTier, TierPlan] = {
    SubscriptionTier.free: TierPlan(SubscriptionTier.free, monthly_limit=10, price_cents=0),
    SubscriptionTier.pro: TierPlan(SubscriptionTier.pro, monthly_limit=100, price_cents=1999),
    SubscriptionTier.creator: TierPlan(SubscriptionTier.creator, monthly_limit=500, price_cents=4999),
}

PAID_TIERS = (SubscriptionTier.pro, SubscriptionTier.creator)


def plan_for(tier: str | SubscriptionTier) -> TierPlan:
    """Plan of ``tier``; unknown tiers fall back to the free plan."""
    try:
        return TIER_PLANS[SubscriptionTier(tier)]
    except ValueError:
        return TIER_PLANS[SubscriptionTier.free]
