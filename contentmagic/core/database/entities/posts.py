"""
Post entity model.

A post is one piece of generated content (caption, image or video) together
with the parameters it was generated from and its optional schedule.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Column, ForeignKey, Integer
from sqlmodel import Field

from ..base import Base, JSONType, utc_now


class Post(Base, table=True):
    """Generated content owned by a user.

    ``content_data`` holds the payload (caption text and hashtags, image or
    video URL); ``post_metadata`` maps to the ``metadata`` column and holds
    generation parameters plus platform-specific hints.

    Table: posts
    """

    __tablename__ = "posts"

    # Primary key
    id: Optional[int] = Field(default=None, primary_key=True)

    # Owner
    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    )

    # Content
    platform: str = Field(max_length=50, index=True)
    content_type: str = Field(max_length=50, index=True)
    content_data: dict[str, Any] = Field(sa_column=Column(JSONType, nullable=False))
    post_metadata: Optional[dict[str, Any]] = Field(default=None, sa_column=Column("metadata", JSONType))

    # Scheduling
    scheduled_at: Optional[datetime] = Field(default=None, index=True)

    # Timestamp
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Post(id={self.id}, user_id={self.user_id}, platform={self.platform}, type={self.content_type})"
