"""Scheduling request schemas.

Dates stay plain strings here; the routes parse them so an unparsable value
gets the ``INVALID_DATE`` code instead of a generic validation error.
"""

from __future__ import annotations

from typing import Any, Optional

from .base import CamelModel


class ScheduleCreate(CamelModel):
    post_id: Optional[Any] = None
    scheduled_at: Optional[str] = None


class ScheduleUpdate(CamelModel):
    scheduled_at: Optional[str] = None
