"""Tests for health endpoints, error envelopes and authentication."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from healthsync.api.v1.endpoints import health
from healthsync.dependencies import get_current_user_claims
from healthsync.main import app


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health check."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["status"] == "healthy"


@pytest.mark.asyncio
async def test_detailed_health_degraded_without_redis(client: AsyncClient, monkeypatch):
    """Test detailed health is degraded without Redis."""
    monkeypatch.setattr(health, "check_store_connection", AsyncMock(return_value=True))
    monkeypatch.setattr(health, "check_redis_connection", AsyncMock(return_value=False))

    response = await client.get("/api/v1/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["store"] == "healthy"
    assert data["redis"] == "unhealthy"


@pytest.mark.asyncio
async def test_ping(client: AsyncClient):
    """Test ping endpoint."""
    response = await client.get("/api/v1/ping")

    assert response.json() == {"message": "pong"}


@pytest.mark.asyncio
async def test_root(client: AsyncClient):
    """Test root endpoint."""
    response = await client.get("/")

    assert response.status_code == 200
    assert "version" in response.json()


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    """Test request ID is echoed."""
    response = await client.get("/api/v1/ping", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_missing_token_is_rejected(client: AsyncClient):
    """Test missing token is rejected."""
    app.dependency_overrides.pop(get_current_user_claims)

    response = await client.get("/api/v1/users/me")

    assert response.status_code == 401
    assert response.json() == {
        "ok": False,
        "error": "Missing Authorization header",
        "code": "Unauthorized",
        "path": "/api/v1/users/me",
    }


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client: AsyncClient, monkeypatch):
    """Test invalid token is rejected."""
    app.dependency_overrides.pop(get_current_user_claims)
    monkeypatch.setattr(
        "healthsync.dependencies.verify_firebase_token",
        AsyncMock(side_effect=ValueError("bad token")),
    )

    response = await client.get(
        "/api/v1/users/me", headers={"Authorization": "Bearer not-a-token"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_unknown_account_is_unauthorized(client: AsyncClient, auth_headers: dict):
    """Test unknown account is unauthorized."""
    response = await client.get("/api/v1/users/me", headers=auth_headers)

    assert response.status_code == 401
    assert response.json()["error"] == "User not found"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    """Test unknown route uses error envelope."""
    response = await client.get("/api/v1/does-not-exist")

    assert response.status_code == 404
    data = response.json()
    assert data["ok"] is False
    assert data["code"] == "NotFound"


@pytest.mark.asyncio
async def test_openapi_documents_request_bodies(client: AsyncClient):
    """Test that write endpoints publish their request schemas."""
    response = await client.get("/openapi.json")

    paths = response.json()["paths"]

    def body_schema(path: str, method: str) -> str:
        content = paths[path][method]["requestBody"]["content"]["application/json"]
        return content["schema"]["$ref"].rsplit("/", 1)[-1]

    assert body_schema("/api/v1/medications", "post") == "MedicationCreate"
    assert body_schema("/api/v1/symptoms", "post") == "SymptomCreate"
    assert body_schema("/api/v1/users/me", "patch") == "UserProfileUpdate"
