"""
Scheduling Endpoints.

Attach a future publication time to a generated post, list the scheduled
posts and move or clear a schedule. Every route requires a signed-in user and
only ever touches that user's posts.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query, Request

from contentmagic.core.database.base import utc_now
from contentmagic.core.database.entities import Post
from contentmagic.core.database.repositories import PostRepository
from contentmagic.core.errors import NotFoundError, ValidationError
from contentmagic.core.models.io.base import ApiResponse
from contentmagic.core.models.io.content import PostRead
from contentmagic.core.models.io.schedule import ScheduleCreate, ScheduleUpdate
from contentmagic.server.api.params import parse_datetime
from contentmagic.server.api.response import success
from contentmagic.server.services.deps import CurrentUserDep, SessionDep

router = APIRouter()


def _parse_post_id(value: object) -> int:
    if isinstance(value, bool):
        raise ValidationError("Invalid post ID", code="INVALID_ID")
    try:
        post_id = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError("Invalid post ID", code="INVALID_ID")
    if post_id <= 0 or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError("Invalid post ID", code="INVALID_ID")
    return post_id


def _future_date(value: object) -> datetime:
    scheduled_at = parse_datetime(value)
    if scheduled_at is None:
        raise ValidationError("Invalid date format", code="INVALID_DATE")
    if scheduled_at <= utc_now():
        raise ValidationError("Scheduled date must be in the future", code="PAST_DATE")
    return scheduled_at


async def _owned_post(posts: PostRepository, post_id: int, user_id: int) -> Post:
    post = await posts.get_owned(post_id, user_id)
    if post is None:
        raise NotFoundError(message="Post not found or access denied", code="POST_NOT_FOUND")
    return post


@router.post(
    "",
    response_model=ApiResponse[PostRead],
    summary="Schedule Post",
    description="Set the publication time of one of the user's posts.",
    responses={
        400: {"description": "Missing fields, invalid id, invalid or past date"},
        404: {"description": "Post not found or owned by another user"},
    },
)
async def schedule_post(
    request: Request, payload: ScheduleCreate, user: CurrentUserDep, session: SessionDep
) -> ApiResponse[PostRead]:
    if payload.post_id in (None, "") or not payload.scheduled_at:
        raise ValidationError("Post ID and scheduled date are required", code="MISSING_FIELDS")
    post_id = _parse_post_id(payload.post_id)
    scheduled_at = _future_date(payload.scheduled_at)

    posts = PostRepository(session)
    post = await _owned_post(posts, post_id, user.id)
    post = await posts.set_schedule(post, scheduled_at)
    return success(request, PostRead.model_validate(post))


@router.get(
    "",
    response_model=ApiResponse[List[PostRead]],
    summary="List Scheduled Posts",
    description="List the user's scheduled posts, earliest first. Unparsable dates are ignored.",
)
async def list_scheduled(
    request: Request,
    user: CurrentUserDep,
    session: SessionDep,
    start_date: Optional[str] = Query(None, alias="startDate", description="Earliest schedule time"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Latest schedule time"),
    platform: Optional[str] = Query(None, description="Platform filter"),
) -> ApiResponse[List[PostRead]]:
    posts = await PostRepository(session).list_scheduled(
        user.id,
        start=parse_datetime(start_date),
        end=parse_datetime(end_date),
        platform=platform or None,
    )
    return success(request, [PostRead.model_validate(post) for post in posts])


@router.put(
    "/{post_id}",
    response_model=ApiResponse[PostRead],
    summary="Reschedule Post",
    description="Move a post to a new time, or unschedule it with a null scheduledAt.",
    responses={
        400: {"description": "Invalid id, invalid or past date"},
        404: {"description": "Post not found or owned by another user"},
    },
)
async def update_schedule(
    request: Request, post_id: str, payload: ScheduleUpdate, user: CurrentUserDep, session: SessionDep
) -> ApiResponse[PostRead]:
    target_id = _parse_post_id(post_id)
    scheduled_at = _future_date(payload.scheduled_at) if payload.scheduled_at is not None else None

    posts = PostRepository(session)
    post = await _owned_post(posts, target_id, user.id)
    post = await posts.set_schedule(post, scheduled_at)
    return success(request, PostRead.model_validate(post))


@router.delete(
    "/{post_id}",
    response_model=ApiResponse[PostRead],
    summary="Unschedule Post",
    description="Clear the schedule of a post; the post itself is kept.",
    responses={400: {"description": "Invalid id"}, 404: {"description": "Post not found or owned by another user"}},
)
async def unschedule_post(
    request: Request, post_id: str, user: CurrentUserDep, session: SessionDep
) -> ApiResponse[PostRead]:
    posts = PostRepository(session)
    post = await _owned_post(posts, _parse_post_id(post_id), user.id)
    post = await posts.set_schedule(post, None)
    return success(request, PostRead.model_validate(post))
