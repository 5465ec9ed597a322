"""Integration tests for bearer authentication and system endpoints."""

from datetime import timedelta

import pytest
from libs.auth.dependencies import get_current_user
from services.marketplace_service.app.main import app
from tests.conftest import API, make_token, settings


@pytest.fixture
def real_auth(client):
    """Drop the fixture user so requests go through JWT validation."""
    app.dependency_overrides.pop(get_current_user, None)
    return client


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health_echoes_request_id(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": settings.SERVICE_NAME}
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_id_generated_when_missing(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_token_is_rejected(real_auth):
    response = await real_auth.get(f"{API}/notifications")

    assert response.status_code in (401, 403)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_garbage_token_is_401(real_auth):
    response = await real_auth.get(
        f"{API}/notifications", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Could not validate credentials"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_expired_token_is_401(real_auth):
    token = make_token("buyer-1", expires_in=timedelta(minutes=-5))

    response = await real_auth.get(
        f"{API}/notifications", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_valid_token_authenticates(real_auth):
    token = make_token("buyer-7")

    response = await real_auth.post(
        f"{API}/notifications/test",
        json={"title": "Hi"},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 201, response.text
    inbox = await real_auth.get(
        f"{API}/notifications", headers={"Authorization": f"Bearer {token}"}
    )
    assert inbox.json()["total"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_route_rejects_token_without_admin_role(real_auth):
    token = make_token("buyer-1", role="user")

    response = await real_auth.post(
        f"{API}/admin/bookings/expire", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_token_passes(real_auth):
    token = make_token("admin-1", role="admin")

    response = await real_auth.post(
        f"{API}/admin/bookings/expire", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 200
    assert response.json() == {"expired": 0}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_test_notification_blocked_in_production(client, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")

    response = await client.post(f"{API}/notifications/test", json={})

    assert response.status_code == 403
