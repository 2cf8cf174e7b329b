"""
Integration tests for the admin user listing and audit trail endpoints.
"""

import pytest


async def register(client, email, role="ADMIN", **extra):
    response = await client.post("/v1/auth/register", json={
        "email": email,
        "username": email.split("@")[0],
        "password": "password123",
        "role": role,
        **extra
    })
    assert response.status_code == 201
    return response.json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_admin_lists_users_without_secrets(client):
    owner = await register(client, "owner@shop.com", pin="123456")
    await register(client, "staff@shop.com", role="STAFF")

    response = await client.get("/v1/admin/users", headers=bearer(owner["access_token"]))

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["page"] == 1
    by_email = {user["email"]: user for user in data["users"]}
    assert set(by_email) == {"owner@shop.com", "staff@shop.com"}
    assert by_email["owner@shop.com"]["has_pin"] is True
    assert by_email["staff@shop.com"]["has_pin"] is False
    assert by_email["staff@shop.com"]["role"] == "STAFF"
    for user in data["users"]:
        assert "hashed_password" not in user
        assert "hashed_pin" not in user


@pytest.mark.asyncio
async def test_user_listing_is_paginated(client):
    owner = await register(client, "owner@shop.com")
    await register(client, "second@shop.com")
    await register(client, "third@shop.com")

    response = await client.get(
        "/v1/admin/users", params={"page": 2, "page_size": 2}, headers=bearer(owner["access_token"])
    )

    data = response.json()
    assert data["total"] == 3
    assert len(data["users"]) == 1


@pytest.mark.asyncio
async def test_staff_cannot_use_admin_routes(client):
    staff = await register(client, "staff@shop.com", role="STAFF")

    assert (await client.get("/v1/admin/users", headers=bearer(staff["access_token"]))).status_code == 403
    assert (await client.get("/v1/admin/audit-logs", headers=bearer(staff["access_token"]))).status_code == 403


@pytest.mark.asyncio
async def test_admin_routes_require_authentication(client):
    response = await client.get("/v1/admin/users")

    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_audit_logs_filtered_by_action(client):
    owner = await register(client, "owner@shop.com")
    await client.post("/v1/auth/login", json={"email": "owner@shop.com", "password": "wrong-password"})
    await client.post("/v1/auth/login", json={"email": "nobody@shop.com", "password": "password123"})

    response = await client.get(
        "/v1/admin/audit-logs", params={"action": "LOGIN_FAILED"}, headers=bearer(owner["access_token"])
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert {log["meta_data"]["reason"] for log in data["logs"]} == {"Invalid password", "User not found"}


@pytest.mark.asyncio
async def test_audit_logs_for_one_actor_newest_first(client):
    owner = await register(client, "owner@shop.com")
    await register(client, "other@shop.com")
    await client.post("/v1/auth/login", json={"email": "owner@shop.com", "password": "wrong-password"})

    response = await client.get(
        "/v1/admin/audit-logs", params={"actor_id": owner["user_id"]}, headers=bearer(owner["access_token"])
    )

    actions = [log["action"] for log in response.json()["logs"]]
    assert actions == ["LOGIN_FAILED", "USER_REGISTERED"]
