from typing import AsyncGenerator
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from contentmagic.core.database import get_session
from contentmagic.server.core.config import Settings
from contentmagic.server.main import create_app
from contentmagic.server.services.ai import AIService, ImageResult, TextResult, TokenUsage, VideoResult
from contentmagic.server.services.billing import CheckoutSession, StripeGateway

TEST_PASSWORD = "Str0ng!Pass"


@pytest.fixture
def app_settings() -> Settings:
    return Settings(
        environment="test",
        session_secret="test-session-secret",
        google_api_key="test-google-key",
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret="whsec_test_123",
        cors_origins=["http://localhost:5173"],
    )


@pytest.fixture
def ai_service() -> Mock:
    """AI facade double returning canned generations."""
    ai = Mock(spec=AIService)
    ai.generate_text = AsyncMock(
        return_value=TextResult(content="Golden hour at the beach", usage=TokenUsage(12, 8, 20))
    )
    ai.generate_hashtags = AsyncMock(return_value=["#sunset", "#beach"])
    ai.generate_image = AsyncMock(
        return_value=ImageResult(
            image_url="data:image/jpeg;base64,AAAA",
            width=1080,
            height=1080,
            format="jpeg",
            size=3,
            aspect_ratio="1:1",
        )
    )
    ai.generate_video = AsyncMock(
        return_value=VideoResult(
            video_url="https://storage.example.com/video.mp4",
            duration=30,
            width=1080,
            height=1920,
            fps=30,
            format="mp4",
            aspect_ratio="9:16",
            operation_name="operations/veo-1",
        )
    )
    return ai


@pytest.fixture
def billing() -> Mock:
    """Stripe gateway double."""
    gateway = Mock(spec=StripeGateway)
    gateway.configured = True
    gateway.create_checkout_session = AsyncMock(
        return_value=CheckoutSession(session_id="cs_test_123", url="https://checkout.stripe.com/c/cs_test_123")
    )
    gateway.cancel_subscription = AsyncMock(return_value={"id": "sub_123", "status": "canceled"})
    gateway.construct_event = Mock()
    return gateway


@pytest.fixture
def app(app_settings: Settings, ai_service: Mock, billing: Mock):
    application = create_app(app_settings)
    application.state.ai_service = ai_service
    application.state.billing = billing
    return application


@pytest_asyncio.fixture(name="client")
async def client_fixture(app, session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous HTTP client bound to the test database session."""

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_client(client: AsyncClient) -> AsyncClient:
    """Client holding the session cookie of a freshly registered user."""
    response = await client.post(
        "/api/auth/register", json={"email": "creator@example.com", "password": TEST_PASSWORD}
    )
    assert response.status_code == 201, response.text
    return client


@pytest_asyncio.fixture
async def current_user(auth_client: AsyncClient, session: AsyncSession):
    from contentmagic.core.database.repositories import UserRepository

    return await UserRepository(session).get_by_email("creator@example.com")
