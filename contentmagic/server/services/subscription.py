"""
Subscription Service.

Usage accounting and the subscription lifecycle:

- the monthly quota check run before every generation, which also rolls the
  usage period forward when it has ended
- the atomic usage increment after a successful generation
- Stripe checkout and cancellation
- the webhook handlers that mirror Stripe subscriptions into the database
"""

from __future__ import annotations

import calendar
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from contentmagic.core.database.base import utc_now
from contentmagic.core.database.entities import Subscription, User
from contentmagic.core.database.repositories import SubscriptionRepository, UserRepository
from contentmagic.core.errors import NotFoundError, UsageLimitError, ValidationError
from contentmagic.core.logging_config import get_logger
from contentmagic.core.models.domain import (
    PAID_TIERS,
    SubscriptionStatus,
    SubscriptionTier,
    plan_for,
)
from contentmagic.core.models.io.subscription import UsageStats
from contentmagic.core.monitoring import log_usage_event

from .billing import CheckoutSession, StripeGateway

logger = get_logger(__name__)


def add_one_month(value: datetime) -> datetime:
    """Same day and time next month, clamped to the month's last day."""
    year, month = (value.year + 1, 1) if value.month == 12 else (value.year, value.month + 1)
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _from_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc).replace(tzinfo=None)


def _billing_period(stripe_subscription: Mapping[str, Any]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Current period of a Stripe subscription.

    Newer Stripe API versions report the period on the subscription items
    instead of the subscription itself.
    """
    start = stripe_subscription.get("current_period_start")
    end = stripe_subscription.get("current_period_end")
    if start is None or end is None:
        items = (stripe_subscription.get("items") or {}).get("data") or []
        if items:
            start = items[0].get("current_period_start", start)
            end = items[0].get("current_period_end", end)
    return _from_timestamp(start), _from_timestamp(end)


class SubscriptionService:
    """Monthly quotas and Stripe-backed subscriptions."""

    def __init__(self, session: AsyncSession, billing: Optional[StripeGateway] = None) -> None:
        self.users = UserRepository(session)
        self.subscriptions = SubscriptionRepository(session)
        self.billing = billing

    # =====================================================================
    # Usage accounting
    # =====================================================================

    async def can_generate_content(self, user: User) -> tuple[bool, Optional[str]]:
        """
        Check the user's monthly quota.

        When the usage period has ended the counter is reset first and the
        next reset moves one month ahead.

        Returns:
            ``(True, None)`` when a generation is allowed, otherwise
            ``(False, reason)``
        """
        now = utc_now()
        if now >= user.usage_reset_date:
            await self.reset_monthly_usage(user.id, now=now)
            user.monthly_usage = 0
            user.usage_reset_date = add_one_month(now)

        limit = plan_for(user.subscription_tier).monthly_limit
        if user.monthly_usage >= limit:
            log_usage_event("limit_exceeded", user.id, usage=user.monthly_usage, limit=limit)
            return False, f"Monthly limit of {limit} posts reached. Upgrade your subscription to generate more content."
        return True, None

    async def ensure_can_generate(self, user: User) -> None:
        allowed, reason = await self.can_generate_content(user)
        if not allowed:
            stats = await self.get_usage_stats(user)
            raise UsageLimitError(reason, details=stats.model_dump(by_alias=True, mode="json"))

    async def increment_usage(self, user_id: int) -> int:
        usage = await self.users.increment_usage(user_id)
        if usage is None:
            raise NotFoundError("User")
        log_usage_event("increment", user_id, usage=usage)
        return usage

    async def reset_monthly_usage(self, user_id: int, now: Optional[datetime] = None) -> datetime:
        next_reset = add_one_month(now or utc_now())
        await self.users.reset_usage(user_id, next_reset)
        log_usage_event("reset", user_id, usage=0)
        return next_reset

    async def get_usage_stats(self, user: User) -> UsageStats:
        limit = plan_for(user.subscription_tier).monthly_limit
        return UsageStats(
            current_usage=user.monthly_usage,
            monthly_limit=limit,
            tier=user.subscription_tier,
            reset_date=user.usage_reset_date,
            remaining_posts=max(0, limit - user.monthly_usage),
        )

    async def get_user_subscription(self, user_id: int) -> Optional[Subscription]:
        return await self.subscriptions.get_latest_for_user(user_id)

    # =====================================================================
    # Checkout and cancellation
    # =====================================================================

    def _gateway(self) -> StripeGateway:
        if self.billing is None:
            raise RuntimeError("SubscriptionService was created without a billing gateway")
        return self.billing

    async def create_checkout_session(
        self, user: User, tier: str, success_url: str, cancel_url: str
    ) -> CheckoutSession:
        """Start a Stripe checkout upgrading ``user`` to a paid ``tier``."""
        try:
            target = SubscriptionTier(tier)
        except ValueError:
            target = None
        if target not in PAID_TIERS:
            raise ValidationError("Cannot create checkout session for this tier", code="INVALID_TIER")

        plan = plan_for(target)
        session = await self._gateway().create_checkout_session(
            plan=plan,
            customer_email=user.email,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata={"userId": str(user.id), "tier": plan.tier.value},
        )
        logger.info(f"Checkout session {session.session_id} created for user {user.id} ({plan.tier.value})")
        return session

    async def cancel_subscription(self, user: User) -> None:
        """Cancel the user's Stripe subscription; the downgrade arrives by webhook."""
        subscription = await self.get_user_subscription(user.id)
        if subscription is None or not subscription.stripe_subscription_id:
            raise NotFoundError(message="No active subscription found", code="NO_ACTIVE_SUBSCRIPTION")
        await self._gateway().cancel_subscription(subscription.stripe_subscription_id)
        logger.info(f"Cancellation requested for subscription {subscription.stripe_subscription_id}")

    # =====================================================================
    # Webhooks
    # =====================================================================

    async def handle_webhook_event(self, event: Mapping[str, Any]) -> bool:
        """
        Dispatch a verified Stripe event.

        Returns:
            True when the event type was handled, False when it was ignored
        """
        event_type = event["type"]
        payload = event["data"]["object"]
        handlers = {
            "customer.subscription.created": self.handle_subscription_created,
            "customer.subscription.updated": self.handle_subscription_updated,
            "customer.subscription.deleted": self.handle_subscription_deleted,
        }
        handler = handlers.get(event_type)
        if handler is None:
            logger.info(f"Unhandled Stripe event type: {event_type}")
            return False
        await handler(payload)
        return True

    async def handle_subscription_created(self, stripe_subscription: Mapping[str, Any]) -> Subscription:
        metadata = stripe_subscription.get("metadata") or {}
        try:
            user_id = int(metadata.get("userId") or 0)
        except (TypeError, ValueError):
            user_id = 0
        tier = metadata.get("tier")
        if not user_id or tier not in {t.value for t in PAID_TIERS}:
            raise ValueError("Missing metadata in subscription")

        start, end = _billing_period(stripe_subscription)
        record = await self.subscriptions.get_by_stripe_id(stripe_subscription["id"])
        if record is None:
            record = Subscription(user_id=user_id, stripe_subscription_id=stripe_subscription["id"], status="")
        record.status = stripe_subscription.get("status") or SubscriptionStatus.active.value
        record.current_period_start = start
        record.current_period_end = end
        record = await self.subscriptions.update(record)

        await self.users.set_tier(user_id, tier)
        logger.info(f"Subscription {record.stripe_subscription_id} created, user {user_id} upgraded to {tier}")
        return record

    async def handle_subscription_updated(self, stripe_subscription: Mapping[str, Any]) -> Optional[Subscription]:
        record = await self.subscriptions.get_by_stripe_id(stripe_subscription["id"])
        if record is None:
            logger.warning(f"Update for unknown subscription {stripe_subscription['id']}")
            return None
        start, end = _billing_period(stripe_subscription)
        record.status = stripe_subscription.get("status") or record.status
        record.current_period_start = start or record.current_period_start
        record.current_period_end = end or record.current_period_end
        return await self.subscriptions.update(record)

    async def handle_subscription_deleted(self, stripe_subscription: Mapping[str, Any]) -> Subscription:
        record = await self.subscriptions.get_by_stripe_id(stripe_subscription["id"])
        if record is None:
            raise NotFoundError("Subscription")
        record.status = SubscriptionStatus.canceled.value
        record = await self.subscriptions.update(record)
        await self.users.set_tier(record.user_id, SubscriptionTier.free.value)
        logger.info(f"Subscription {record.stripe_subscription_id} canceled, user {record.user_id} downgraded to free")
        return record
