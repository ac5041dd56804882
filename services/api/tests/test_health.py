"""Tests for health endpoint and error envelopes."""

import pytest
from httpx import ASGITransport, AsyncClient

from forum.main import app
from forum.repositories.factory import get_repository


@pytest.fixture
async def bare_client():
    """Test client with no storage behind it."""

    async def no_repository():
        yield None

    app.dependency_overrides[get_repository] = no_repository
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health_check(bare_client: AsyncClient):
    """Test health endpoint returns ok."""
    response = await bare_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_storage_failure_is_server_error(bare_client: AsyncClient):
    """Unexpected storage errors surface as a generic 500."""

    class BrokenRepository:
        async def list_personas(self):
            raise ConnectionError("database is gone")

    async def broken_repository():
        yield BrokenRepository()

    app.dependency_overrides[get_repository] = broken_repository
    response = await bare_client.get("/api/personas")

    assert response.status_code == 500
    assert response.json()["error"] == "SERVER_ERROR"


@pytest.mark.asyncio
async def test_non_numeric_path_id_is_invalid_request(bare_client: AsyncClient):
    response = await bare_client.delete("/api/posts/abc")
    assert response.status_code == 400
    assert response.json() == {"error": "INVALID_REQUEST"}


@pytest.mark.asyncio
async def test_malformed_json_is_invalid_request(bare_client: AsyncClient):
    response = await bare_client.post(
        "/api/personas",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "INVALID_REQUEST"}


@pytest.mark.asyncio
async def test_error_envelope_is_documented(bare_client: AsyncClient):
    response = await bare_client.get("/openapi.json")
    schema = response.json()

    assert "ErrorResponse" in schema["components"]["schemas"]
    responses = schema["paths"]["/api/personas"]["post"]["responses"]
    assert responses["409"]["content"]["application/json"]["schema"] == {
        "$ref": "#/components/schemas/ErrorResponse"
    }
