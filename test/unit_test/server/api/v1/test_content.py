"""
Unit tests for the content generation and library endpoints.

The AI facade is replaced by a double, so these tests cover the pipeline
around it: validation, quota checks, persistence, usage accounting and the
seeded analytics.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from contentmagic.core.database.base import utc_now
from contentmagic.core.database.entities import AnalyticsMetric, Post
from contentmagic.core.errors import AIServiceError, ErrorCode
from contentmagic.server.core.rate_limit import SlidingWindowLimiter

pytestmark = pytest.mark.asyncio


class TestGenerateCaption:
    """Test caption generation."""

    async def test_generate_caption_success(self, auth_client: AsyncClient, ai_service, session, current_user):
        response = await auth_client.post(
            "/api/content/generate-caption",
            json={"prompt": "Beach sunset", "platform": "Instagram", "tone": "playful"},
        )
        assert response.status_code == 200, response.text
        data = response.json()["data"]
        assert data["caption"] == "Golden hour at the beach"
        assert data["hashtags"] == ["#sunset", "#beach"]
        assert data["platform"] == "instagram"
        assert data["contentType"] == "caption"
        assert data["characterCount"] == len("Golden hour at the beach")
        assert data["characterLimit"] == 2200

        ai_service.generate_text.assert_awaited_once()
        assert ai_service.generate_text.await_args.kwargs["tone"] == "playful"

        post = await session.get(Post, data["id"])
        assert post.content_data == {"text": "Golden hour at the beach", "hashtags": ["#sunset", "#beach"]}
        assert post.post_metadata["platformSpecific"]["characterLimit"] == 2200
        assert post.post_metadata["tokenUsage"]["totalTokens"] == 20

        await session.refresh(current_user)
        assert current_user.monthly_usage == 1

        metrics = (await session.execute(select(AnalyticsMetric).where(AnalyticsMetric.post_id == post.id))).scalars()
        assert {m.metric_type for m in metrics} == {"views", "likes", "shares", "comments"}

    async def test_generate_caption_without_hashtags(self, auth_client: AsyncClient, ai_service):
        response = await auth_client.post(
            "/api/content/generate-caption",
            json={"prompt": "Beach sunset", "platform": "twitter", "includeHashtags": False},
        )
        assert response.status_code == 200
        assert response.json()["data"]["hashtags"] == []
        assert response.json()["data"]["characterLimit"] == 280
        ai_service.generate_hashtags.assert_not_awaited()

    async def test_hashtag_failure_is_not_fatal(self, auth_client: AsyncClient, ai_service):
        ai_service.generate_hashtags.side_effect = AIServiceError("gemini rate limit exceeded", kind="rate_limit")

        response = await auth_client.post(
            "/api/content/generate-caption", json={"prompt": "Beach sunset", "platform": "instagram"}
        )
        assert response.status_code == 200
        assert response.json()["data"]["hashtags"] == []

    async def test_prompt_is_sanitized(self, auth_client: AsyncClient, ai_service):
        await auth_client.post(
            "/api/content/generate-caption",
            json={"prompt": "  <script>alert(1)</script><b>Beach</b> sunset ", "platform": "instagram"},
        )
        assert ai_service.generate_text.await_args.args[0] == "Beach sunset"

    async def test_missing_prompt(self, auth_client: AsyncClient):
        response = await auth_client.post("/api/content/generate-caption", json={"platform": "instagram"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MISSING_PARAMETERS"

    async def test_invalid_platform(self, auth_client: AsyncClient):
        response = await auth_client.post(
            "/api/content/generate-caption", json={"prompt": "Beach", "platform": "myspace"}
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_PLATFORM"

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.post("/api/content/generate-caption", json={"prompt": "Beach", "platform": "instagram"})
        assert response.status_code == 401

    async def test_usage_limit_reached(self, auth_client: AsyncClient, session, current_user, ai_service):
        current_user.monthly_usage = 10
        current_user.usage_reset_date = utc_now() + timedelta(days=10)
        session.add(current_user)
        await session.commit()

        response = await auth_client.post(
            "/api/content/generate-caption", json={"prompt": "Beach", "platform": "instagram"}
        )
        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "USAGE_LIMIT_EXCEEDED"
        assert "Monthly limit of 10 posts reached" in error["message"]
        assert error["details"]["remainingPosts"] == 0
        ai_service.generate_text.assert_not_awaited()

    async def test_expired_period_resets_usage(self, auth_client: AsyncClient, session, current_user):
        current_user.monthly_usage = 10
        current_user.usage_reset_date = utc_now() - timedelta(days=1)
        session.add(current_user)
        await session.commit()

        response = await auth_client.post(
            "/api/content/generate-caption", json={"prompt": "Beach", "platform": "instagram"}
        )
        assert response.status_code == 200

        await session.refresh(current_user)
        assert current_user.monthly_usage == 1
        assert current_user.usage_reset_date > utc_now() + timedelta(days=25)

    async def test_empty_generation(self, auth_client: AsyncClient, ai_service):
        ai_service.generate_text.side_effect = AIServiceError(
            "Empty response from Gemini API", kind="empty", code=ErrorCode.AI_GENERATION_FAILED, status_code=500
        )
        response = await auth_client.post(
            "/api/content/generate-caption", json={"prompt": "Beach", "platform": "instagram"}
        )
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "AI_GENERATION_FAILED"

    async def test_ai_rate_limit(self, app, auth_client: AsyncClient):
        app.state.rate_limiters.ai = SlidingWindowLimiter("ai", 1, 60)
        payload = {"prompt": "Beach", "platform": "instagram"}

        assert (await auth_client.post("/api/content/generate-caption", json=payload)).status_code == 200
        response = await auth_client.post("/api/content/generate-caption", json=payload)
        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"


class TestGenerateMedia:
    """Test image and video generation."""

    async def test_generate_image(self, auth_client: AsyncClient, ai_service, session):
        response = await auth_client.post(
            "/api/content/generate-image", json={"prompt": "Mountain lake", "platform": "linkedin"}
        )
        assert response.status_code == 200, response.text
        data = response.json()["data"]
        assert data["imageUrl"].startswith("data:image/jpeg;base64,")
        assert data["dimensions"] == {"width": 1200, "height": 627}
        assert data["contentType"] == "image"
        ai_service.generate_image.assert_awaited_once_with("Mountain lake", "linkedin", "photorealistic", None)

        post = await session.get(Post, data["id"])
        assert post.post_metadata["platformSpecific"]["recommendedFormats"] == ["JPG", "PNG"]
        assert post.post_metadata["generationParams"]["aspectRatio"] == "square"

    async def test_generate_image_vertical(self, auth_client: AsyncClient):
        response = await auth_client.post(
            "/api/content/generate-image",
            json={"prompt": "Mountain lake", "platform": "instagram", "aspectRatio": "vertical"},
        )
        assert response.json()["data"]["dimensions"] == {"width": 1080, "height": 1920}

    async def test_generate_video_clamps_duration(self, auth_client: AsyncClient, ai_service):
        response = await auth_client.post(
            "/api/content/generate-video", json={"prompt": "City timelapse", "platform": "instagram", "duration": 120}
        )
        assert response.status_code == 200, response.text
        data = response.json()["data"]
        assert data["duration"] == 60
        assert data["aspectRatio"] == "9:16"
        assert data["videoUrl"] == "https://storage.example.com/video.mp4"
        ai_service.generate_video.assert_awaited_once_with("City timelapse", "instagram", 60, "cinematic")

    async def test_generate_video_default_duration(self, auth_client: AsyncClient):
        response = await auth_client.post(
            "/api/content/generate-video", json={"prompt": "City timelapse", "platform": "linkedin"}
        )
        assert response.json()["data"]["duration"] == 30
        assert response.json()["data"]["aspectRatio"] == "16:9"


class TestLibrary:
    """Test the content library listing."""

    async def test_library_pagination_and_filters(self, auth_client: AsyncClient, current_user, make_post):
        for platform in ("instagram", "instagram", "twitter"):
            await make_post(current_user.id, platform=platform)

        response = await auth_client.get("/api/content/library", params={"platform": "instagram", "limit": 1})
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["content"]) == 1
        assert data["content"][0]["platform"] == "instagram"
        assert "metadata" in data["content"][0]
        assert data["pagination"] == {
            "page": 1,
            "limit": 1,
            "total": 2,
            "totalPages": 2,
            "hasNextPage": True,
            "hasPrevPage": False,
        }
        assert data["filters"]["platform"] == "instagram"

    async def test_library_lenient_params(self, auth_client: AsyncClient):
        response = await auth_client.get(
            "/api/content/library",
            params={"page": "abc", "limit": "500", "platform": "myspace", "sortBy": "password", "sortOrder": "up"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["pagination"]["page"] == 1
        assert data["pagination"]["limit"] == 50
        assert data["pagination"]["totalPages"] == 0
        assert data["filters"] == {"platform": None, "contentType": None, "sortBy": "createdAt", "sortOrder": "desc"}

    async def test_library_only_lists_own_content(self, auth_client: AsyncClient, make_user, make_post):
        other = await make_user(email="other@example.com")
        await make_post(other.id)

        response = await auth_client.get("/api/content/library")
        assert response.json()["data"]["content"] == []


class TestDeleteContent:
    """Test deleting content."""

    async def test_delete_own_content(self, auth_client: AsyncClient, current_user, make_post, session):
        post = await make_post(current_user.id)
        post_id = post.id

        response = await auth_client.delete(f"/api/content/{post_id}")
        assert response.status_code == 200
        assert response.json()["data"] == {"message": "Content deleted successfully", "deletedId": post_id}

        session.expunge_all()
        assert await session.get(Post, post_id) is None

    @pytest.mark.parametrize("content_id", ["abc", "0", "-3"])
    async def test_delete_invalid_id(self, auth_client: AsyncClient, content_id: str):
        response = await auth_client.delete(f"/api/content/{content_id}")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CONTENT_ID"

    async def test_delete_missing(self, auth_client: AsyncClient):
        response = await auth_client.delete("/api/content/999")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "CONTENT_NOT_FOUND"

    async def test_delete_other_users_content(self, auth_client: AsyncClient, make_user, make_post):
        other = await make_user(email="other@example.com")
        post = await make_post(other.id)

        response = await auth_client.delete(f"/api/content/{post.id}")
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "UNAUTHORIZED_ACCESS"


async def test_usage_stats(auth_client: AsyncClient):
    response = await auth_client.get("/api/content/usage")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["currentUsage"] == 0
    assert data["monthlyLimit"] == 10
    assert data["remainingPosts"] == 10
    assert data["tier"] == "free"
