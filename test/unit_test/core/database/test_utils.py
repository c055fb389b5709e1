"""
Unit tests for engine and session factory helpers.
"""

import pytest
from sqlalchemy import inspect

from contentmagic.core.database.utils import create_all, create_engine, create_sessionmaker


@pytest.mark.parametrize(
    "url",
    [
        "postgres://user:pw@db:5432/contentmagic",
        "postgresql://user:pw@db:5432/contentmagic",
        "postgresql+psycopg://user:pw@db:5432/contentmagic",
    ],
)
def test_postgres_urls_use_asyncpg(url):
    engine = create_engine(url)
    assert engine.url.drivername == "postgresql+asyncpg"


def test_other_urls_pass_through():
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    assert engine.url.drivername == "sqlite+aiosqlite"


@pytest.mark.asyncio
async def test_create_all_and_sessionmaker():
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_all(engine)

    async with engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
    assert {"users", "posts", "subscriptions", "analytics"} <= tables

    maker = create_sessionmaker(engine)
    assert maker.kw["expire_on_commit"] is False
    await engine.dispose()
