"""
Subscription repository.

Data access for the Stripe-backed subscriptions recorded from webhooks.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.subscriptions import Subscription
from .base import AsyncBaseRepository, QueryBuilder


class SubscriptionRepository(AsyncBaseRepository[Subscription]):
    """Repository for subscription records using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Subscription)

    async def get_by_stripe_id(self, stripe_subscription_id: str) -> Optional[Subscription]:
        """Get the record mirroring a Stripe subscription.

        Args:
            stripe_subscription_id: Stripe ``sub_...`` identifier

        Returns:
            Subscription instance or None
        """
        stmt = select(Subscription).where(Subscription.stripe_subscription_id == stripe_subscription_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_latest_for_user(self, user_id: int) -> Optional[Subscription]:
        """Most recently created subscription of a user."""
        stmt = (
            select(Subscription)
            .where(Subscription.user_id == user_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[Subscription]:
        """List subscriptions newest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: Field filters (user_id, status)

        Returns:
            List of Subscription instances
        """
        stmt = select(Subscription).order_by(Subscription.created_at.desc(), Subscription.id.desc())
        if filters:
            stmt = QueryBuilder.apply_filters(stmt, Subscription, filters)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
