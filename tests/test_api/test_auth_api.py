from __future__ import annotations

import pytest

from tests.utils import API_PREFIX, PASSWORD, seed_user


@pytest.mark.asyncio
async def test_signup_then_login(client):
    response = await client.post(
        f"{API_PREFIX}/auth/signup",
        json={"email": "Ana@Example.com", "password": PASSWORD, "name": "Ana"},
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["email"] == "ana@example.com"
    assert data["user"]["role"] == "USER"
    assert data["active_plan"] is None

    response = await client.post(
        f"{API_PREFIX}/auth/signup",
        json={"email": "ana@example.com", "password": PASSWORD},
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_ALREADY_REGISTERED"

    response = await client.post(f"{API_PREFIX}/auth/login", json={"email": "ana@example.com", "password": PASSWORD})
    assert response.status_code == 200
    token = response.json()["data"]["token"]

    response = await client.get(f"{API_PREFIX}/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.json()["data"]["name"] == "Ana"


@pytest.mark.asyncio
async def test_login_rejects_wrong_password(client, test_db):
    await seed_user(test_db, "ana@example.com")

    response = await client.post(
        f"{API_PREFIX}/auth/login", json={"email": "ana@example.com", "password": "wrong-password"}
    )
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get(f"{API_PREFIX}/health")
    assert response.status_code == 200
    assert response.json()["data"]["database"] == "healthy"

    response = await client.get(f"{API_PREFIX}/health/live")
    assert response.json()["data"] == {"alive": True}
