"""
Authentication Service.

Account creation and credential checks. Passwords are hashed with bcrypt;
hashing runs in a worker thread so it does not block the event loop.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contentmagic.core.database.base import utc_now
from contentmagic.core.database.entities import User
from contentmagic.core.database.repositories import UserRepository
from contentmagic.core.errors import ValidationError
from contentmagic.core.logging_config import get_logger
from contentmagic.core.models.domain import SubscriptionTier

logger = get_logger(__name__)

BCRYPT_ROUNDS = 12


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


class AuthService:
    """Creates accounts and verifies credentials."""

    def __init__(self, session: AsyncSession) -> None:
        self.users = UserRepository(session)

    async def create_user(self, email: str, password: str) -> User:
        """
        Create a new account on the free tier.

        Args:
            email: Normalized email address
            password: Plain-text password, already validated

        Returns:
            The persisted user

        Raises:
            ValidationError: When the email is already registered
        """
        if await self.users.get_by_email(email) is not None:
            raise ValidationError("User already exists with this email", details={"field": "email"})

        password_hash = await asyncio.to_thread(hash_password, password)
        now = utc_now()
        user = User(
            email=email,
            password_hash=password_hash,
            subscription_tier=SubscriptionTier.free.value,
            monthly_usage=0,
            usage_reset_date=now,
            created_at=now,
            updated_at=now,
        )
        try:
            return await self.users.create(user)
        except IntegrityError:
            # Lost a race against a concurrent registration
            await self.users.session.rollback()
            raise ValidationError("User already exists with this email", details={"field": "email"})

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user when the credentials match, otherwise None."""
        user = await self.users.get_by_email(email)
        if user is None:
            return None
        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            return None
        return user

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.users.get_by_id(user_id)
