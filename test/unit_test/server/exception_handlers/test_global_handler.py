"""
Unit tests for the global exception handlers.

A small FastAPI app with routes that raise each kind of error checks the
JSON error envelope and status codes.
"""

from types import SimpleNamespace

import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, OperationalError

from contentmagic.core.errors import AIServiceError, ErrorCode, NotFoundError, RateLimitError, ValidationError
from contentmagic.server.exception_handlers import setup_exception_handlers

pytestmark = pytest.mark.asyncio


class Item(BaseModel):
    name: str
    quantity: int


def _build_app(production: bool = False) -> FastAPI:
    app = FastAPI()
    app.state.settings = SimpleNamespace(is_production=production)
    setup_exception_handlers(app)

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError("Post")

    @app.get("/validation")
    async def validation():
        raise ValidationError("Prompt is required", code="MISSING_PARAMETERS", details={"field": "prompt"})

    @app.get("/limited")
    async def limited():
        raise RateLimitError(details={"retryAfter": 42})

    @app.get("/ai")
    async def ai():
        raise AIServiceError("Gemini unavailable", kind="unavailable")

    @app.get("/http")
    async def http():
        raise HTTPException(status_code=403, detail="Nope")

    @app.get("/integrity")
    async def integrity():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))

    @app.get("/db-down")
    async def db_down():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    @app.get("/crash")
    async def crash():
        raise RuntimeError("kaboom")

    @app.post("/items")
    async def create_item(item: Item):
        return item

    return app


@pytest_asyncio.fixture
async def make_client():
    clients = []

    async def _make(production: bool = False) -> AsyncClient:
        transport = ASGITransport(app=_build_app(production), raise_app_exceptions=False)
        client = AsyncClient(transport=transport, base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


async def test_app_error_envelope(make_client):
    client = await make_client()
    response = await client.get("/not-found")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"] == {"code": "RESOURCE_NOT_FOUND", "message": "Post not found", "details": None}
    assert "timestamp" in body


async def test_app_error_details_and_code(make_client):
    client = await make_client()
    response = await client.get("/validation")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_PARAMETERS"
    assert response.json()["error"]["details"] == {"field": "prompt"}


async def test_rate_limit_sets_retry_after(make_client):
    client = await make_client()
    response = await client.get("/limited")
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "42"


async def test_upstream_ai_failure(make_client):
    client = await make_client()
    response = await client.get("/ai")
    assert response.status_code == 502
    assert response.json()["error"]["code"] == ErrorCode.AI_SERVICE_ERROR.value


async def test_request_validation(make_client):
    client = await make_client()
    response = await client.post("/items", json={"name": "mug"})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "quantity"


async def test_http_exception(make_client):
    client = await make_client()
    response = await client.get("/http")
    assert response.status_code == 403
    assert response.json()["error"] == {"code": "FORBIDDEN", "message": "Nope", "details": None}


async def test_unknown_route(make_client):
    client = await make_client()
    response = await client.get("/missing")
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Route GET /missing not found"


async def test_integrity_error(make_client):
    client = await make_client()
    response = await client.get("/integrity")
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "RESOURCE_ALREADY_EXISTS"


async def test_database_unavailable(make_client):
    client = await make_client()
    response = await client.get("/db-down")
    assert response.status_code == 503
    assert response.json()["error"]["code"] == "DATABASE_CONNECTION_ERROR"


async def test_unhandled_exception_development(make_client):
    client = await make_client()
    response = await client.get("/crash")
    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "INTERNAL_ERROR"
    assert error["message"] == "kaboom"
    assert len(error["details"]["errorId"]) == 32


async def test_unhandled_exception_production_hides_message(make_client):
    client = await make_client(production=True)
    response = await client.get("/crash")
    assert response.status_code == 500
    assert response.json()["error"]["message"] == "Internal server error"
