from __future__ import annotations

import asyncio
import uuid
from datetime import date

import pytest

from nutritrack.models import SubscriptionStatus
from tests.utils import (
    API_PREFIX,
    build_auth_header,
    interleave_approvals,
    nutrition_plan_payload,
    seed_admin,
    seed_plan,
    seed_subscription,
    seed_user,
)


async def _signup(client, email: str) -> dict:
    response = await client.post(
        f"{API_PREFIX}/auth/signup",
        json={"email": email, "password": "correct-horse-1", "name": "Ana"},
    )
    assert response.status_code == 201
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_upgrade_from_basic_to_premium(client, test_db):
    admin = await seed_admin(test_db)
    basic = await seed_plan(test_db, "Basic", price="9.99", limit=1)
    premium = await seed_plan(test_db, "Premium", price="19.99", limit=None)
    admin_headers = build_auth_header(admin)
    user_headers = await _signup(client, "ana@example.com")

    # No subscription yet: creating a nutrition plan is refused
    response = await client.post(
        f"{API_PREFIX}/nutrition-plans", json=nutrition_plan_payload(date(2026, 3, 1)), headers=user_headers
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ENTITLEMENT_REQUIRED"

    response = await client.post(f"{API_PREFIX}/subscriptions", json={"plan_id": str(basic.id)}, headers=user_headers)
    assert response.status_code == 201
    basic_sub = response.json()["data"]
    assert basic_sub["status"] == "PENDING"
    assert basic_sub["plan_name"] == "Basic"

    response = await client.patch(f"{API_PREFIX}/subscriptions/{basic_sub['id']}/approve", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "APPROVED"
    assert response.json()["data"]["approved_by_user_email"] == "admin@example.com"

    response = await client.post(
        f"{API_PREFIX}/nutrition-plans", json=nutrition_plan_payload(date(2026, 3, 1)), headers=user_headers
    )
    assert response.status_code == 201

    response = await client.post(
        f"{API_PREFIX}/nutrition-plans", json=nutrition_plan_payload(date(2026, 3, 2)), headers=user_headers
    )
    assert response.status_code == 403
    body = response.json()
    assert body["error"]["code"] == "QUOTA_EXCEEDED"
    assert "allows 1" in body["error"]["message"]

    response = await client.post(
        f"{API_PREFIX}/subscriptions", json={"plan_id": str(premium.id)}, headers=user_headers
    )
    premium_sub = response.json()["data"]
    response = await client.patch(f"{API_PREFIX}/subscriptions/{premium_sub['id']}/approve", headers=admin_headers)
    assert response.status_code == 200

    response = await client.get(f"{API_PREFIX}/subscriptions", headers=user_headers)
    statuses = {s["plan_name"]: s["status"] for s in response.json()["data"]}
    assert statuses == {"Basic": "CANCELLED", "Premium": "APPROVED"}

    response = await client.get(f"{API_PREFIX}/subscriptions/count/active", headers=user_headers)
    assert response.json()["data"] == 1

    response = await client.post(
        f"{API_PREFIX}/nutrition-plans", json=nutrition_plan_payload(date(2026, 3, 2)), headers=user_headers
    )
    assert response.status_code == 201

    response = await client.get(f"{API_PREFIX}/subscriptions/me/entitlement", headers=user_headers)
    entitlement = response.json()["data"]
    assert entitlement["plan_name"] == "Premium"
    assert entitlement["nutrition_plan_limit"] is None
    assert entitlement["nutrition_plans_used"] == 2

    response = await client.post(
        f"{API_PREFIX}/auth/login",
        json={"email": "ana@example.com", "password": "correct-horse-1"},
    )
    assert response.json()["data"]["active_plan"]["name"] == "Premium"


@pytest.mark.asyncio
async def test_admin_routes_reject_regular_users(client, test_db):
    user = await seed_user(test_db, "ana@example.com")
    plan = await seed_plan(test_db, "Basic", limit=1)
    subscription = await seed_subscription(test_db, user, plan)
    headers = build_auth_header(user)

    for method, path in [
        ("GET", "/subscriptions/all"),
        ("GET", "/subscriptions/pending"),
        ("GET", "/subscriptions/status/PENDING"),
        ("PATCH", f"/subscriptions/{subscription.id}/approve"),
        ("PATCH", f"/subscriptions/{subscription.id}/reject"),
    ]:
        response = await client.request(method, f"{API_PREFIX}{path}", headers=headers)
        assert response.status_code == 403, path
        assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_requests_without_token_are_unauthorized(client):
    response = await client.get(f"{API_PREFIX}/subscriptions")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "HTTP_401"

    response = await client.get(f"{API_PREFIX}/subscriptions", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_list_by_status_accepts_any_case(client, test_db):
    admin = await seed_admin(test_db)
    user = await seed_user(test_db, "ana@example.com")
    plan = await seed_plan(test_db, "Basic", limit=1)
    await seed_subscription(test_db, user, plan)
    await seed_subscription(test_db, user, plan, SubscriptionStatus.REJECTED, approved_by=admin)
    headers = build_auth_header(admin)

    response = await client.get(f"{API_PREFIX}/subscriptions/status/rejected", headers=headers)
    assert response.status_code == 200
    assert [s["status"] for s in response.json()["data"]] == ["REJECTED"]

    response = await client.get(f"{API_PREFIX}/subscriptions/status/EXPIRED", headers=headers)
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert "APPROVED" in error["details"]["allowed"]


@pytest.mark.asyncio
async def test_transition_errors(client, test_db):
    admin = await seed_admin(test_db)
    user = await seed_user(test_db, "ana@example.com")
    plan = await seed_plan(test_db, "Basic", limit=1)
    approved = await seed_subscription(test_db, user, plan, SubscriptionStatus.APPROVED, approved_by=admin)
    admin_headers = build_auth_header(admin)

    response = await client.patch(f"{API_PREFIX}/subscriptions/{approved.id}/approve", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_TRANSITION"

    response = await client.patch(f"{API_PREFIX}/subscriptions/{approved.id}/reject", headers=admin_headers)
    assert response.status_code == 409

    response = await client.patch(f"{API_PREFIX}/subscriptions/{uuid.uuid4()}/approve", headers=admin_headers)
    assert response.status_code == 404

    # The generic status endpoint reports the same problem as a bad request
    response = await client.patch(
        f"{API_PREFIX}/subscriptions/{approved.id}/status", json={"status": "REJECTED"}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TRANSITION"

    response = await client.patch(
        f"{API_PREFIX}/subscriptions/{approved.id}/status", json={"status": "PENDING"}, headers=admin_headers
    )
    assert response.status_code == 400

    response = await client.patch(
        f"{API_PREFIX}/subscriptions/{uuid.uuid4()}/status", json={"status": "APPROVED"}, headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_status_endpoint_lets_admin_cancel(client, test_db):
    admin = await seed_admin(test_db)
    user = await seed_user(test_db, "ana@example.com")
    plan = await seed_plan(test_db, "Basic", limit=1)
    approved = await seed_subscription(test_db, user, plan, SubscriptionStatus.APPROVED, approved_by=admin)

    response = await client.patch(
        f"{API_PREFIX}/subscriptions/{approved.id}/status",
        json={"status": "CANCELLED"},
        headers=build_auth_header(admin),
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "CANCELLED"


@pytest.mark.asyncio
async def test_cancel_rules(client, test_db):
    admin = await seed_admin(test_db)
    owner = await seed_user(test_db, "ana@example.com")
    other = await seed_user(test_db, "ben@example.com")
    plan = await seed_plan(test_db, "Basic", limit=1)
    pending = await seed_subscription(test_db, owner, plan)
    approved = await seed_subscription(test_db, owner, plan, SubscriptionStatus.APPROVED, approved_by=admin)

    response = await client.patch(f"{API_PREFIX}/subscriptions/{approved.id}/cancel", headers=build_auth_header(other))
    assert response.status_code == 403

    response = await client.patch(f"{API_PREFIX}/subscriptions/{pending.id}/cancel", headers=build_auth_header(owner))
    assert response.status_code == 409

    response = await client.patch(f"{API_PREFIX}/subscriptions/{approved.id}/cancel", headers=build_auth_header(owner))
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "CANCELLED"

    response = await client.get(f"{API_PREFIX}/subscriptions/me/entitlement", headers=build_auth_header(owner))
    assert response.json()["data"]["plan_id"] is None


@pytest.mark.asyncio
async def test_create_subscription_with_bad_plan(client, test_db):
    user = await seed_user(test_db, "ana@example.com")
    retired = await seed_plan(test_db, "Legacy", is_active=False)
    headers = build_auth_header(user)

    response = await client.post(f"{API_PREFIX}/subscriptions", json={"plan_id": str(retired.id)}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PLAN_INACTIVE"

    response = await client.post(f"{API_PREFIX}/subscriptions", json={"plan_id": str(uuid.uuid4())}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "NOT_FOUND"

    response = await client.post(f"{API_PREFIX}/subscriptions", json={"plan_id": "not-a-uuid"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_subscription_visibility(client, test_db):
    admin = await seed_admin(test_db)
    owner = await seed_user(test_db, "ana@example.com")
    other = await seed_user(test_db, "ben@example.com")
    plan = await seed_plan(test_db, "Basic", limit=1)
    subscription = await seed_subscription(test_db, owner, plan)
    path = f"{API_PREFIX}/subscriptions/{subscription.id}"

    response = await client.get(path, headers=build_auth_header(owner))
    assert response.status_code == 200
    assert response.json()["data"]["user_email"] == "ana@example.com"

    response = await client.get(path, headers=build_auth_header(other))
    assert response.status_code == 404

    response = await client.get(path, headers=build_auth_header(admin))
    assert response.status_code == 200

    response = await client.get(f"{API_PREFIX}/subscriptions", headers=build_auth_header(other))
    assert response.json()["data"] == []


@pytest.mark.asyncio
async def test_pending_queue_for_admin(client, test_db):
    admin = await seed_admin(test_db)
    first = await seed_user(test_db, "ana@example.com")
    second = await seed_user(test_db, "ben@example.com")
    plan = await seed_plan(test_db, "Basic", limit=1)
    older = await seed_subscription(test_db, first, plan)
    newer = await seed_subscription(test_db, second, plan)
    await seed_subscription(test_db, second, plan, SubscriptionStatus.APPROVED, approved_by=admin)
    headers = build_auth_header(admin)

    response = await client.get(f"{API_PREFIX}/subscriptions/pending", headers=headers)
    assert [s["id"] for s in response.json()["data"]] == [str(older.id), str(newer.id)]

    response = await client.get(f"{API_PREFIX}/subscriptions/all", headers=headers)
    assert len(response.json()["data"]) == 3


@pytest.mark.asyncio
async def test_racing_approvals_report_conflict(client, test_db, monkeypatch):
    admin = await seed_admin(test_db)
    user = await seed_user(test_db, "ana@example.com")
    plan = await seed_plan(test_db, "Basic", limit=1)
    first = await seed_subscription(test_db, user, plan)
    second = await seed_subscription(test_db, user, plan)
    headers = build_auth_header(admin)
    user_headers = build_auth_header(user)
    interleave_approvals(monkeypatch)

    responses = await asyncio.gather(
        client.patch(f"{API_PREFIX}/subscriptions/{first.id}/approve", headers=headers),
        client.patch(f"{API_PREFIX}/subscriptions/{second.id}/approve", headers=headers),
    )

    assert sorted(r.status_code for r in responses) == [200, 409]
    conflict = next(r for r in responses if r.status_code == 409).json()
    assert conflict["success"] is False
    assert conflict["error"]["code"] == "CONFLICT"

    response = await client.get(f"{API_PREFIX}/subscriptions/count/active", headers=user_headers)
    assert response.json()["data"] == 1
