"""
Unit tests for the authentication endpoints.

Tests cover:
- Registration with validation, duplicate emails and the guest-only rule
- Login with valid and invalid credentials
- Session handling for /me and logout
- The failed-attempt rate limit
"""

import pytest
from httpx import AsyncClient

from contentmagic.server.core.rate_limit import SlidingWindowLimiter

TEST_PASSWORD = "Str0ng!Pass"

pytestmark = pytest.mark.asyncio


class TestRegister:
    """Test account registration."""

    async def test_register_success_sets_session(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/register", json={"email": "New.User@Example.com", "password": TEST_PASSWORD}
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["requestId"]
        user = body["data"]["user"]
        assert user["email"] == "new.user@example.com"
        assert user["subscriptionTier"] == "free"
        assert user["monthlyUsage"] == 0
        assert "passwordHash" not in user

        me = await client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["data"]["user"]["email"] == "new.user@example.com"

    @pytest.mark.parametrize(
        "password",
        ["password", "Sh0rt!", "Abcdefg!\u0663", "Abcdefg1!\uff11", "Abcdefg1!\n", "Abcdefg1!~"],
    )
    async def test_register_weak_password(self, client: AsyncClient, password: str):
        response = await client.post("/api/auth/register", json={"email": "a@example.com", "password": password})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert any(item["field"] == "password" for item in error["details"])

    async def test_register_invalid_email(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={"email": "not-an-email", "password": TEST_PASSWORD})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_register_duplicate_email(self, client: AsyncClient):
        payload = {"email": "dup@example.com", "password": TEST_PASSWORD}
        assert (await client.post("/api/auth/register", json=payload)).status_code == 201
        await client.post("/api/auth/logout")

        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "User already exists with this email"

    async def test_register_while_signed_in(self, auth_client: AsyncClient):
        response = await auth_client.post(
            "/api/auth/register", json={"email": "other@example.com", "password": TEST_PASSWORD}
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "ALREADY_AUTHENTICATED"


class TestLogin:
    """Test signing in and out."""

    async def test_login_success(self, auth_client: AsyncClient):
        await auth_client.post("/api/auth/logout")

        response = await auth_client.post(
            "/api/auth/login", json={"email": "creator@example.com", "password": TEST_PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "creator@example.com"
        assert (await auth_client.get("/api/auth/me")).status_code == 200

    async def test_login_wrong_password(self, auth_client: AsyncClient):
        await auth_client.post("/api/auth/logout")

        response = await auth_client.post(
            "/api/auth/login", json={"email": "creator@example.com", "password": "Wr0ng!Pass"}
        )
        assert response.status_code == 401
        error = response.json()["error"]
        assert error["code"] == "UNAUTHORIZED"
        assert error["message"] == "Invalid email or password"

    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "ghost@example.com", "password": TEST_PASSWORD})
        assert response.status_code == 401

    async def test_logout_clears_session(self, auth_client: AsyncClient):
        response = await auth_client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json()["data"]["message"] == "Logged out successfully"

        me = await auth_client.get("/api/auth/me")
        assert me.status_code == 401
        assert me.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_me_requires_session(self, client: AsyncClient):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["success"] is False


class TestAuthRateLimit:
    """Only failed attempts count against the auth limit."""

    async def test_failed_logins_are_limited(self, app, client: AsyncClient):
        app.state.rate_limiters.auth = SlidingWindowLimiter("auth", 2, 900)
        payload = {"email": "ghost@example.com", "password": TEST_PASSWORD}

        assert (await client.post("/api/auth/login", json=payload)).status_code == 401
        assert (await client.post("/api/auth/login", json=payload)).status_code == 401

        response = await client.post("/api/auth/login", json=payload)
        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"
        assert int(response.headers["Retry-After"]) > 0

    async def test_successful_logins_do_not_count(self, app, auth_client: AsyncClient):
        app.state.rate_limiters.auth = SlidingWindowLimiter("auth", 1, 900)
        payload = {"email": "creator@example.com", "password": TEST_PASSWORD}

        for _ in range(3):
            await auth_client.post("/api/auth/logout")
            assert (await auth_client.post("/api/auth/login", json=payload)).status_code == 200

    async def test_rejected_payloads_are_limited(self, app, client: AsyncClient):
        app.state.rate_limiters.auth = SlidingWindowLimiter("auth", 3, 900)
        payloads = [
            {"email": "a@example.com", "password": "weak"},
            {"email": "not-an-email", "password": TEST_PASSWORD},
            {"email": "b@example.com"},
        ]

        statuses = [(await client.post("/api/auth/register", json=payload)).status_code for payload in payloads]
        assert statuses == [400, 400, 400]

        response = await client.post("/api/auth/login", json={"email": "c@example.com", "password": TEST_PASSWORD})
        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"

    async def test_validation_errors_elsewhere_do_not_count(self, app, auth_client: AsyncClient):
        app.state.rate_limiters.auth = SlidingWindowLimiter("auth", 1, 900)

        for _ in range(2):
            response = await auth_client.post(
                "/api/analytics/metrics", json={"postId": 1, "metrics": [{"type": "views", "value": -1}]}
            )
            assert response.status_code == 400
        assert not app.state.rate_limiters.auth.is_limited("127.0.0.1")
