from datetime import timedelta
from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.pool import StaticPool

from contentmagic.core.database import entities  # noqa: F401
from contentmagic.core.database.base import utc_now
from contentmagic.core.database.entities import Post, User

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    maker = async_sessionmaker(test_engine, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest_asyncio.fixture
async def make_user(session: AsyncSession):
    """Factory persisting a user straight through the session."""

    async def _make(email: str = "creator@example.com", tier: str = "free", usage: int = 0) -> User:
        now = utc_now()
        user = User(
            email=email,
            password_hash="not-a-real-hash",
            subscription_tier=tier,
            monthly_usage=usage,
            usage_reset_date=now + timedelta(days=15),
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make


@pytest_asyncio.fixture
async def make_post(session: AsyncSession):
    """Factory persisting a post for a user."""

    async def _make(user_id: int, platform: str = "instagram", content_type: str = "caption", **fields) -> Post:
        post = Post(
            user_id=user_id,
            platform=platform,
            content_type=content_type,
            content_data=fields.pop("content_data", {"text": "Hello", "hashtags": []}),
            **fields,
        )
        session.add(post)
        await session.commit()
        await session.refresh(post)
        return post

    return _make
