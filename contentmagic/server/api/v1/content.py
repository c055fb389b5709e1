"""
Content Generation and Library Endpoints.

Generation routes share one pipeline: authenticate, apply the AI rate limit
and the monthly quota, validate, generate, store the post, then count the
usage and seed its analytics. The last two steps are best effort: a failure
there is logged and the generated content is still returned.
"""

import math
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from contentmagic.core.database.entities import Post
from contentmagic.core.database.repositories import PostRepository
from contentmagic.core.errors import AuthorizationError, NotFoundError, ValidationError
from contentmagic.core.logging_config import get_logger
from contentmagic.core.models.domain import ContentType, Platform, SortField, SortOrder
from contentmagic.core.models.domain.platforms import (
    IMAGE_SPECS,
    VIDEO_SPECS,
    caption_char_limit,
    image_dimensions,
    parse_platform,
    video_duration,
)
from contentmagic.core.models.io.base import ApiResponse
from contentmagic.core.models.io.content import (
    CaptionRead,
    CaptionRequest,
    DeletedRead,
    Dimensions,
    ImageRead,
    ImageRequest,
    LibraryFilters,
    LibraryRead,
    Pagination,
    PostRead,
    VideoRead,
    VideoRequest,
)
from contentmagic.core.models.io.subscription import UsageStats
from contentmagic.server.api.response import success
from contentmagic.server.services.deps import (
    AIServiceDep,
    AIUserDep,
    AnalyticsServiceDep,
    CurrentUserDep,
    SessionDep,
    SubscriptionServiceDep,
)
from contentmagic.server.services.analytics import AnalyticsService
from contentmagic.server.services.subscription import SubscriptionService

logger = get_logger(__name__)

router = APIRouter()

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50


def _require_prompt_and_platform(prompt: Optional[str], platform: Optional[str]) -> Platform:
    if not prompt or not platform:
        raise ValidationError("Prompt and platform are required", code="MISSING_PARAMETERS")
    parsed = parse_platform(platform)
    if parsed is None:
        raise ValidationError(
            "Platform must be one of: " + ", ".join(p.value for p in Platform), code="INVALID_PLATFORM"
        )
    return parsed


async def _save_and_account(
    session: AsyncSession,
    user_id: int,
    post: Post,
    subscriptions: SubscriptionService,
    analytics: AnalyticsService,
) -> tuple[int, datetime]:
    """Store ``post`` and run the best-effort bookkeeping; returns its id and creation time."""
    post = await PostRepository(session).create(post)
    # A rollback below expires loaded objects
    post_id, created_at = post.id, post.created_at
    try:
        await subscriptions.increment_usage(user_id)
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to increment usage for user {user_id} after post {post_id}: {e}", exc_info=True)
    try:
        await analytics.initialize_post_analytics(post_id)
    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to initialize analytics for post {post_id}: {e}", exc_info=True)
    return post_id, created_at


@router.post(
    "/generate-caption",
    response_model=ApiResponse[CaptionRead],
    summary="Generate Caption",
    description="Generate a platform-specific caption, optionally with hashtags.",
    responses={
        400: {"description": "Missing prompt/platform or unknown platform"},
        403: {"description": "Monthly usage limit reached"},
        429: {"description": "AI rate limit exceeded"},
    },
)
async def generate_caption(
    request: Request,
    payload: CaptionRequest,
    user: AIUserDep,
    session: SessionDep,
    ai: AIServiceDep,
    subscriptions: SubscriptionServiceDep,
    analytics: AnalyticsServiceDep,
) -> ApiResponse[CaptionRead]:
    await subscriptions.ensure_can_generate(user)
    platform = _require_prompt_and_platform(payload.prompt, payload.platform)

    result = await ai.generate_text(
        payload.prompt, platform, tone=payload.tone, include_hashtags=payload.include_hashtags
    )

    hashtags: list[str] = []
    if payload.include_hashtags:
        try:
            hashtags = await ai.generate_hashtags(result.content, platform)
        except Exception as e:
            logger.warning(f"Hashtag generation failed, continuing without hashtags: {e}")

    limit = caption_char_limit(platform)
    metadata: dict[str, Any] = {
        "generationParams": {
            "prompt": payload.prompt,
            "tone": payload.tone,
            "includeHashtags": payload.include_hashtags,
        },
        "platformSpecific": {"characterLimit": limit},
    }
    if result.usage is not None:
        metadata["tokenUsage"] = {
            "promptTokens": result.usage.prompt_tokens,
            "completionTokens": result.usage.completion_tokens,
            "totalTokens": result.usage.total_tokens,
        }

    post_id, created_at = await _save_and_account(
        session,
        user.id,
        Post(
            user_id=user.id,
            platform=platform.value,
            content_type=ContentType.caption.value,
            content_data={"text": result.content, "hashtags": hashtags},
            post_metadata=metadata,
        ),
        subscriptions,
        analytics,
    )
    return success(
        request,
        CaptionRead(
            id=post_id,
            caption=result.content,
            hashtags=hashtags,
            platform=platform.value,
            character_count=len(result.content),
            character_limit=limit,
            created_at=created_at,
        ),
    )


@router.post(
    "/generate-image",
    response_model=ApiResponse[ImageRead],
    summary="Generate Image",
    description="Generate an image sized for the target platform.",
    responses={
        400: {"description": "Missing prompt/platform or unknown platform"},
        403: {"description": "Monthly usage limit reached"},
        429: {"description": "AI rate limit exceeded"},
    },
)
async def generate_image(
    request: Request,
    payload: ImageRequest,
    user: AIUserDep,
    session: SessionDep,
    ai: AIServiceDep,
    subscriptions: SubscriptionServiceDep,
    analytics: AnalyticsServiceDep,
) -> ApiResponse[ImageRead]:
    await subscriptions.ensure_can_generate(user)
    platform = _require_prompt_and_platform(payload.prompt, payload.platform)
    width, height = image_dimensions(platform, payload.aspect_ratio)

    result = await ai.generate_image(payload.prompt, platform.value, payload.style, payload.aspect_ratio)

    dimensions = {"width": width, "height": height}
    post_id, created_at = await _save_and_account(
        session,
        user.id,
        Post(
            user_id=user.id,
            platform=platform.value,
            content_type=ContentType.image.value,
            content_data={"imageUrl": result.image_url, "description": payload.prompt},
            post_metadata={
                "generationParams": {
                    "prompt": payload.prompt,
                    "style": payload.style,
                    "aspectRatio": payload.aspect_ratio or "square",
                },
                "platformSpecific": {
                    "dimensions": dimensions,
                    "recommendedFormats": list(IMAGE_SPECS[platform].formats),
                },
                "output": {"format": result.format, "size": result.size, "aspectRatio": result.aspect_ratio},
            },
        ),
        subscriptions,
        analytics,
    )
    return success(
        request,
        ImageRead(
            id=post_id,
            image_url=result.image_url,
            description=payload.prompt,
            platform=platform.value,
            dimensions=Dimensions(**dimensions),
            created_at=created_at,
        ),
    )


@router.post(
    "/generate-video",
    response_model=ApiResponse[VideoRead],
    summary="Generate Video",
    description="Generate a video within the target platform's length and aspect ratio.",
    responses={
        400: {"description": "Missing prompt/platform or unknown platform"},
        403: {"description": "Monthly usage limit reached"},
        429: {"description": "AI rate limit exceeded"},
    },
)
async def generate_video(
    request: Request,
    payload: VideoRequest,
    user: AIUserDep,
    session: SessionDep,
    ai: AIServiceDep,
    subscriptions: SubscriptionServiceDep,
    analytics: AnalyticsServiceDep,
) -> ApiResponse[VideoRead]:
    await subscriptions.ensure_can_generate(user)
    platform = _require_prompt_and_platform(payload.prompt, payload.platform)
    spec = VIDEO_SPECS[platform]
    duration = video_duration(platform, payload.duration)

    result = await ai.generate_video(payload.prompt, platform.value, duration, payload.style)

    post_id, created_at = await _save_and_account(
        session,
        user.id,
        Post(
            user_id=user.id,
            platform=platform.value,
            content_type=ContentType.video.value,
            content_data={"videoUrl": result.video_url, "description": payload.prompt},
            post_metadata={
                "generationParams": {"prompt": payload.prompt, "duration": duration, "style": payload.style},
                "platformSpecific": {
                    "aspectRatio": spec.aspect_ratio,
                    "maxDuration": spec.max_duration,
                    "recommendedFormats": list(spec.formats),
                },
                "output": {"width": result.width, "height": result.height, "fps": result.fps},
            },
        ),
        subscriptions,
        analytics,
    )
    return success(
        request,
        VideoRead(
            id=post_id,
            video_url=result.video_url,
            description=payload.prompt,
            platform=platform.value,
            duration=duration,
            aspect_ratio=spec.aspect_ratio,
            created_at=created_at,
        ),
    )


def _positive_int(value: Optional[str], default: int) -> int:
    try:
        number = int(value) if value is not None else default
    except ValueError:
        return default
    return number if number >= 1 else default


@router.get(
    "/library",
    response_model=ApiResponse[LibraryRead],
    summary="Content Library",
    description="Page through the user's generated content with optional filters and sorting.",
)
async def get_library(
    request: Request,
    user: CurrentUserDep,
    session: SessionDep,
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description=f"Page size, at most {MAX_PAGE_SIZE}"),
    platform: Optional[str] = Query(None, description="Platform filter"),
    content_type: Optional[str] = Query(None, alias="contentType", description="Content type filter"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="createdAt, platform or contentType"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
) -> ApiResponse[LibraryRead]:
    """
    Get the content library.

    Invalid paging values fall back to their defaults, unknown filters are
    ignored (and reported back as null), unknown sort keys sort by creation time.
    """
    page_number = _positive_int(page, 1)
    page_size = min(_positive_int(limit, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

    platform_filter = parse_platform(platform)
    type_filter = content_type if content_type in {t.value for t in ContentType} else None
    sort_field = sort_by if sort_by in {f.value for f in SortField} else SortField.createdAt.value
    order = sort_order if sort_order in {o.value for o in SortOrder} else SortOrder.desc.value

    items, total = await PostRepository(session).list_library(
        user.id,
        platform=platform_filter.value if platform_filter else None,
        content_type=type_filter,
        sort_by=sort_field,
        sort_order=order,
        limit=page_size,
        offset=(page_number - 1) * page_size,
    )
    total_pages = math.ceil(total / page_size) if total else 0
    return success(
        request,
        LibraryRead(
            content=[PostRead.model_validate(post) for post in items],
            pagination=Pagination(
                page=page_number,
                limit=page_size,
                total=total,
                total_pages=total_pages,
                has_next_page=page_number < total_pages,
                has_prev_page=page_number > 1,
            ),
            filters=LibraryFilters(
                platform=platform_filter.value if platform_filter else None,
                content_type=type_filter,
                sort_by=sort_field,
                sort_order=order,
            ),
        ),
    )


@router.delete(
    "/{content_id}",
    response_model=ApiResponse[DeletedRead],
    summary="Delete Content",
    description="Delete one of the user's posts together with its analytics.",
    responses={
        400: {"description": "Invalid content id"},
        403: {"description": "Content belongs to another user"},
        404: {"description": "Content not found"},
    },
)
async def delete_content(
    request: Request, content_id: str, user: CurrentUserDep, session: SessionDep
) -> ApiResponse[DeletedRead]:
    try:
        post_id = int(content_id)
    except ValueError:
        post_id = 0
    if post_id <= 0:
        raise ValidationError("Invalid content ID", code="INVALID_CONTENT_ID")

    posts = PostRepository(session)
    post = await posts.get_by_id(post_id)
    if post is None:
        raise NotFoundError(message="Content not found", code="CONTENT_NOT_FOUND")
    if post.user_id != user.id:
        raise AuthorizationError("You do not have permission to delete this content", code="UNAUTHORIZED_ACCESS")

    await posts.delete(post_id)
    logger.info(f"User {user.id} deleted post {post_id}")
    return success(request, DeletedRead(message="Content deleted successfully", deleted_id=post_id))


@router.get(
    "/usage",
    response_model=ApiResponse[UsageStats],
    summary="Usage Statistics",
    description="Current month's generation usage of the signed-in user.",
)
async def get_usage(
    request: Request, user: CurrentUserDep, subscriptions: SubscriptionServiceDep
) -> ApiResponse[UsageStats]:
    return success(request, await subscriptions.get_usage_stats(user))
