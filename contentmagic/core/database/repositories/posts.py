"""
Post repository.

Data access for generated content: the paginated content library, ownership
checks and the scheduling queries used by the calendar.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.posts import Post
from .base import AsyncBaseRepository, QueryBuilder

# API sort keys mapped onto columns
SORT_COLUMNS = {
    "createdAt": Post.created_at,
    "platform": Post.platform,
    "contentType": Post.content_type,
}


class PostRepository(AsyncBaseRepository[Post]):
    """Repository for generated content using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Post)

    async def get_owned(self, post_id: int, user_id: int) -> Optional[Post]:
        """Get a post only if it belongs to ``user_id``.

        Args:
            post_id: Post ID
            user_id: Expected owner

        Returns:
            Post instance or None when missing or owned by someone else
        """
        stmt = select(Post).where(Post.id == post_id, Post.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[Post]:
        """List posts newest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: Field filters (user_id, platform, content_type)

        Returns:
            List of Post instances
        """
        stmt = select(Post).order_by(Post.created_at.desc(), Post.id.desc())
        if filters:
            stmt = QueryBuilder.apply_filters(stmt, Post, filters)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_library(
        self,
        user_id: int,
        *,
        platform: Optional[str] = None,
        content_type: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[List[Post], int]:
        """Page through a user's content library.

        Args:
            user_id: Owner of the content
            platform: Optional platform filter
            content_type: Optional content type filter
            sort_by: One of createdAt, platform, contentType
            sort_order: asc or desc
            limit: Page size
            offset: Records to skip

        Returns:
            The page of posts and the total number of matching posts
        """
        filters = {"user_id": user_id, "platform": platform, "content_type": content_type}

        column = SORT_COLUMNS.get(sort_by, Post.created_at)
        ordering = column.asc() if sort_order == "asc" else column.desc()
        tiebreak = Post.id.asc() if sort_order == "asc" else Post.id.desc()

        stmt = QueryBuilder.apply_filters(select(Post), Post, filters).order_by(ordering, tiebreak)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        items = list(result.scalars().all())

        count_stmt = QueryBuilder.apply_filters(select(func.count(Post.id)), Post, filters)
        total = (await self.session.execute(count_stmt)).scalar_one()
        return items, int(total)

    async def list_scheduled(
        self,
        user_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        platform: Optional[str] = None,
    ) -> List[Post]:
        """List a user's scheduled posts ordered by schedule time.

        All given filters apply together.
        """
        stmt = select(Post).where(Post.user_id == user_id, Post.scheduled_at.is_not(None))
        if start is not None:
            stmt = stmt.where(Post.scheduled_at >= start)
        if end is not None:
            stmt = stmt.where(Post.scheduled_at <= end)
        if platform:
            stmt = stmt.where(Post.platform == platform)
        result = await self.session.execute(stmt.order_by(Post.scheduled_at, Post.id))
        return list(result.scalars().all())

    async def set_schedule(self, post: Post, scheduled_at: Optional[datetime]) -> Post:
        post.scheduled_at = scheduled_at
        return await self.update(post)

    async def count_for_user(self, user_id: int) -> int:
        result = await self.session.execute(select(func.count(Post.id)).where(Post.user_id == user_id))
        return int(result.scalar_one())
