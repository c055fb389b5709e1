"""
User entity model.

A user owns generated posts and subscriptions and carries the monthly usage
counter the generation quota is enforced against.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class User(Base, table=True):
    """Registered account.

    ``monthly_usage`` counts generations since ``usage_reset_date`` was last
    moved forward; the tier decides how many are allowed.

    Table: users
    """

    __tablename__ = "users"

    # Primary key
    id: Optional[int] = Field(default=None, primary_key=True)

    # Credentials
    email: str = Field(max_length=255, unique=True, index=True, description="Normalized (lower-case) email")
    password_hash: str = Field(max_length=255, description="bcrypt hash of the password")

    # Subscription and usage
    subscription_tier: str = Field(default="free", max_length=50, description="free, pro or creator")
    monthly_usage: int = Field(default=0, description="Generations in the current usage period")
    usage_reset_date: datetime = Field(default_factory=utc_now, description="When the usage period ends")

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, tier={self.subscription_tier})"
