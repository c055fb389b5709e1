"""
User repository.

Data access for accounts: lookups by id and email, tier changes and the
usage counter updates the generation quota relies on.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..base import utc_now
from ..entities.users import User
from .base import AsyncBaseRepository, QueryBuilder


class UserRepository(AsyncBaseRepository[User]):
    """Repository for user data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by normalized email.

        Args:
            email: Lower-cased email address

        Returns:
            User instance or None
        """
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def update(self, user: User) -> User:
        user.updated_at = utc_now()
        return await super().update(user)

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[User]:
        """List users with optional pagination and filtering.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: Field filters (subscription_tier, email)

        Returns:
            List of User instances ordered by id
        """
        stmt = select(User).order_by(User.id)
        if filters:
            stmt = QueryBuilder.apply_filters(stmt, User, filters)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def increment_usage(self, user_id: int) -> Optional[int]:
        """Atomically add one generation to the user's monthly usage.

        Args:
            user_id: User to charge

        Returns:
            The usage after the increment, or None when the user does not exist
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(monthly_usage=User.monthly_usage + 1, updated_at=utc_now())
            .returning(User.monthly_usage)
        )
        result = await self.session.execute(stmt)
        usage = result.scalar_one_or_none()
        await self.session.commit()
        return usage

    async def reset_usage(self, user_id: int, next_reset: datetime) -> None:
        """Zero the usage counter and move the reset date to ``next_reset``."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(monthly_usage=0, usage_reset_date=next_reset, updated_at=utc_now())
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def set_tier(self, user_id: int, tier: str) -> None:
        stmt = update(User).where(User.id == user_id).values(subscription_tier=tier, updated_at=utc_now())
        await self.session.execute(stmt)
        await self.session.commit()
