"""
Health check endpoint tests.

Validates basic test infrastructure and the shared error envelope.
"""

from httpx import AsyncClient


class TestHealthCheck:
    """Tests for GET /api/v1/health."""

    async def test_health_returns_200(self, async_client: AsyncClient):
        """Health check endpoint returns 200 OK."""
        response = await async_client.get("/api/v1/health")
        assert response.status_code == 200

    async def test_health_returns_healthy_status(self, async_client: AsyncClient):
        """Health check returns status: healthy."""
        response = await async_client.get("/api/v1/health")
        data = response.json()
        assert data["status"] == "healthy"

    async def test_health_does_not_require_auth(self, async_client: AsyncClient):
        """Health check works without authentication."""
        response = await async_client.get("/api/v1/health")
        assert response.status_code == 200

    async def test_responses_carry_request_id(self, async_client: AsyncClient):
        """Every response has an X-Request-ID header."""
        response = await async_client.get("/api/v1/health")
        assert response.headers.get("X-Request-ID")


class TestErrorEnvelope:
    """Errors share one JSON shape."""

    async def test_auth_error_uses_envelope(self, async_client: AsyncClient):
        """A rejected request carries code, message, and the request id."""
        response = await async_client.get("/api/v1/accounts/me")
        assert response.status_code == 401
        error = response.json()["error"]
        assert error["code"] == "UNAUTHORIZED"
        assert error["message"]
        assert error["request_id"] == response.headers["X-Request-ID"]
