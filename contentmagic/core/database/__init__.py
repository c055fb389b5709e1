"""
Database layer: entities, repositories and session management.

Importing this package registers every table with the SQLModel metadata.
"""

from . import entities  # noqa: F401
from .base import Base, JSONType, utc_now
from .session import async_session_maker, close_db, engine, get_session, init_db
from .utils import create_all, create_engine, create_sessionmaker

__all__ = [
    "Base",
    "JSONType",
    "utc_now",
    "async_session_maker",
    "close_db",
    "engine",
    "get_session",
    "init_db",
    "create_all",
    "create_engine",
    "create_sessionmaker",
]
