"""
Base database models and utilities.

This module provides the foundational database components used by all
entities: the SQLModel base class, the portable JSON column type and the
naive-UTC clock used for timestamps.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import ConfigDict
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import SQLModel

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the format stored in every table."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(SQLModel):
    """Base class for all SQLModel entities."""

    model_config = ConfigDict(arbitrary_types_allowed=True)
