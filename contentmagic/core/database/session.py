"""
Global database session and engine management.

This module owns the process-wide AsyncEngine and async_sessionmaker used by
the API through the ``get_session`` dependency.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from contentmagic.core.logging_config import get_logger
from contentmagic.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Yields:
        AsyncSession: An asynchronous SQLAlchemy session.
    """
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """
    Initialize the database.

    Tables are created from the ORM metadata only when DATABASE_AUTO_CREATE is
    set; otherwise the schema is owned by the Alembic migrations.
    """
    if not settings.database_auto_create:
        logger.info("Skipping table creation, schema is managed by Alembic migrations")
        return
    await create_all(engine)
    logger.info("Database tables created from ORM metadata")


async def close_db() -> None:
    await engine.dispose()
