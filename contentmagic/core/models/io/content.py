"""
Content generation and library schemas.

Generation requests keep ``prompt`` and ``platform`` optional so the routes
can answer a missing value with their own error code.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, Field

from .base import CamelModel, SanitizedStr


class CaptionRequest(CamelModel):
    prompt: Optional[SanitizedStr] = Field(default=None, max_length=2000)
    platform: Optional[str] = None
    tone: SanitizedStr = "engaging"
    include_hashtags: bool = True


class ImageRequest(CamelModel):
    prompt: Optional[SanitizedStr] = Field(default=None, max_length=1000)
    platform: Optional[str] = None
    style: SanitizedStr = "photorealistic"
    aspect_ratio: Optional[str] = None


class VideoRequest(CamelModel):
    prompt: Optional[SanitizedStr] = Field(default=None, max_length=500)
    platform: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=1, le=600)
    style: SanitizedStr = "cinematic"


class Dimensions(CamelModel):
    width: int
    height: int


class CaptionRead(CamelModel):
    id: int
    caption: str
    hashtags: List[str]
    platform: str
    content_type: str = "caption"
    character_count: int
    character_limit: int
    created_at: datetime


class ImageRead(CamelModel):
    id: int
    image_url: str
    description: str
    platform: str
    content_type: str = "image"
    dimensions: Dimensions
    created_at: datetime


class VideoRead(CamelModel):
    id: int
    video_url: str
    description: str
    platform: str
    content_type: str = "video"
    duration: int
    aspect_ratio: str
    created_at: datetime


class PostRead(CamelModel):
    """A stored post as shown in the library and the schedule."""

    id: int
    user_id: int
    platform: str
    content_type: str
    content_data: dict[str, Any]
    post_metadata: Optional[dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("post_metadata", "metadata"),
        serialization_alias="metadata",
    )
    scheduled_at: Optional[datetime] = None
    created_at: datetime


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class LibraryFilters(CamelModel):
    platform: Optional[str] = None
    content_type: Optional[str] = None
    sort_by: str
    sort_order: str


class LibraryRead(CamelModel):
    content: List[PostRead]
    pagination: Pagination
    filters: LibraryFilters


class DeletedRead(CamelModel):
    message: str
    deleted_id: int
