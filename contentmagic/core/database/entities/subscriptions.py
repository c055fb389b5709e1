"""
Subscription entity model.

Mirrors the Stripe subscription of a user as reported by webhooks.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer
from sqlmodel import Field

from ..base import Base, utc_now


class Subscription(Base, table=True):
    """Paid subscription of a user.

    Table: subscriptions
    """

    __tablename__ = "subscriptions"

    # Primary key
    id: Optional[int] = Field(default=None, primary_key=True)

    # Owner
    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    )

    # Stripe state
    stripe_subscription_id: Optional[str] = Field(default=None, max_length=255, index=True)
    status: str = Field(max_length=50, description="Stripe subscription status")
    current_period_start: Optional[datetime] = Field(default=None)
    current_period_end: Optional[datetime] = Field(default=None)

    # Timestamp
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Subscription(id={self.id}, user_id={self.user_id}, status={self.status})"
