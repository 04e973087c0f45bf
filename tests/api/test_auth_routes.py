import time

import jwt
import pytest

from core.config import settings


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["data"] == {"status": "healthy"}


@pytest.mark.asyncio
async def test_cart_requires_token(client):
    resp = await client.get("/api/v1/cart")
    assert resp.status_code == 401
    body = resp.json()
    assert body["code"] != 0
    assert body["data"] is None
    assert body["error"]["type"]


@pytest.mark.asyncio
async def test_invalid_token_rejected(client):
    resp = await client.get("/api/v1/cart", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_rejected(client):
    token = jwt.encode({"sub": "u1", "exp": int(time.time()) - 10}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    resp = await client.get("/api/v1/cart", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_route_forbidden_for_user(client, user_headers):
    resp = await client.get("/api/v1/orders", headers=user_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_request_id_echoed(client):
    resp = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers.get("X-Request-ID") == "req-123"
