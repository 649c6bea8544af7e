"""
Tests for app/main.py - health check, error mapping and middleware, driven
through the ASGI app with httpx.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def client(mock_db_session):
    from app.api.deps import get_db
    from app.main import app

    async def override_db():
        yield mock_db_session

    app.dependency_overrides[get_db] = override_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def _auth_header(role: str = "employee", uuid: str = "emp-1", type: str = "employee") -> dict:
    from app.core.security import create_access_token

    token = create_access_token(uuid, claims={"role": role, "email": f"{uuid}@vodichron.com", "type": type})
    return {"Authorization": f"Bearer {token}"}


class TestDatabaseCheck:

    @pytest.mark.asyncio
    async def test_check_db_connection_success(self):
        """Should return True when database is reachable."""
        from app.db.session import check_db_connection

        mock_engine = MagicMock()
        mock_connection = AsyncMock()
        mock_engine.connect = MagicMock(return_value=mock_connection)
        mock_connection.__aenter__ = AsyncMock(return_value=mock_connection)
        mock_connection.__aexit__ = AsyncMock(return_value=None)

        with patch("app.db.session.engine", mock_engine):
            assert await check_db_connection() is True

    @pytest.mark.asyncio
    async def test_check_db_connection_failure(self):
        """Should return False when database is unreachable."""
        from app.db.session import check_db_connection

        mock_engine = MagicMock()
        mock_engine.connect = MagicMock(side_effect=Exception("Connection refused"))

        with patch("app.db.session.engine", mock_engine):
            assert await check_db_connection() is False


class TestHealthEndpoint:

    @pytest.mark.asyncio
    async def test_healthy(self, client):
        with patch("app.main.check_db_connection", AsyncMock(return_value=True)):
            response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"] == {"database": True}
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    @pytest.mark.asyncio
    async def test_database_down_returns_503(self, client):
        with patch("app.main.check_db_connection", AsyncMock(return_value=False)):
            response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestErrorResponses:

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, client):
        response = await client.get("/api/customers")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Could not validate credentials"
        assert body["path"] == "/api/customers"

    @pytest.mark.asyncio
    async def test_invalid_token_is_401(self, client):
        response = await client.get("/api/customers", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_service_errors_map_to_status_codes(self, client):
        from app.core.errors import NotFoundError

        failing = AsyncMock(side_effect=NotFoundError("Unable to find the customer details"))
        with patch("app.api.v1.customers.customer_service.get_customer", failing):
            response = await client.get("/api/customers/cust-404", headers=_auth_header("super_user", "su-1"))

        assert response.status_code == 404
        assert response.json()["message"] == "Unable to find the customer details"

    @pytest.mark.asyncio
    async def test_forbidden_from_service(self, client):
        response = await client.get("/api/customers", headers=_auth_header("employee"))

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied for the operation request."

    @pytest.mark.asyncio
    async def test_validation_errors_are_400(self, client):
        response = await client.post(
            "/api/customers", json={"name": "Acme"}, headers=_auth_header("super_user", "su-1")
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Bad Request"

    @pytest.mark.asyncio
    async def test_oversized_body_is_413(self, client):
        response = await client.post(
            "/api/customers",
            content=b"x" * (1024 * 1024 + 10),
            headers={**_auth_header("super_user", "su-1"), "Content-Type": "application/json"},
        )

        assert response.status_code == 413


class TestAuthRoutes:

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, client):
        with patch("app.api.v1.auth.auth_service.logout", AsyncMock()) as logout:
            response = await client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully."
        logout.assert_awaited_once()
        assert "refreshToken=" in response.headers.get("set-cookie", "")

    @pytest.mark.asyncio
    async def test_expired_reset_link_is_400(self, client):
        with patch("app.api.v1.auth.password_reset_service.validate_reset_link", AsyncMock(return_value=None)):
            response = await client.post("/api/auth/validate-reset-link", json={"token": "tok"})

        assert response.status_code == 400
        assert response.json()["message"] == "Looks like your reset link is expired."
