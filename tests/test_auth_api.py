from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def test_missing_token_is_401_envelope(client):
    res = await client.get("/users/profile")

    assert res.status_code == 401
    body = res.json()
    assert body == {
        "statusCode": 401,
        "message": "Access token missing",
        "errors": [],
        "success": False,
    }


async def test_invalid_token_is_401(client):
    res = await client.get("/users/profile", headers=auth_header("garbage"))
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid access token"


async def test_expired_token_always_rejected(client, user, settings):
    # the token works before it expires...
    ok = await client.get("/users/profile", headers=user["headers"])
    assert ok.status_code == 200

    past = datetime.now(timezone.utc) - timedelta(days=2)
    expired = jwt.encode(
        {
            "sub": user["id"],
            "type": "access",
            "iat": int(past.timestamp()),
            "exp": int((past + timedelta(days=1)).timestamp()),
        },
        settings.USER_ACCESS_TOKEN_SECRET,
        algorithm=settings.JWT_ALG,
    )
    for _ in range(3):
        res = await client.get("/users/profile", headers=auth_header(expired))
        assert res.status_code == 401
        assert res.json()["message"] == "Token expired"


async def test_token_for_unknown_principal_is_404(client, app):
    ghost = SimpleNamespace(id=uuid.uuid4(), email="ghost@example.com")
    token = app.state.tokens.issue_access_token("admin", ghost)

    res = await client.get("/admin/profile", headers=auth_header(token))

    assert res.status_code == 404
    assert res.json()["success"] is False


async def test_tokens_do_not_cross_roles(client, venture):
    res = await client.get("/users/profile", headers=venture["headers"])
    assert res.status_code == 401


async def test_profile_hides_credentials(client, venture):
    res = await client.get("/ventures/profile", headers=venture["headers"])

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["statusCode"] == 200
    assert body["data"]["id"] == venture["id"]
    assert "refreshToken" not in body["data"]
    assert "passwordHash" not in body["data"]


async def test_register_validation_and_conflict(client):
    res = await client.post("/users/register", json={})
    assert res.status_code == 400
    assert len(res.json()["errors"]) == 4

    payload = {"name": "Ravi", "phoneNumber": "9811111111", "email": "ravi@example.com", "password": "secret1"}
    assert (await client.post("/users/register", json=payload)).status_code == 201
    dup = await client.post("/users/register", json=payload)
    assert dup.status_code == 409


async def test_register_rejects_password_over_72_bytes(client):
    payload = {"name": "Meera", "phoneNumber": "9822222222", "email": "meera@example.com"}

    # 37 characters, 74 bytes once encoded
    res = await client.post("/users/register", json={**payload, "password": "é" * 37})
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Validation error"
    assert body["errors"] == ["password: Value error, Password must be at most 72 bytes"]

    res = await client.post("/ventures/register", json={
        "businessName": "Lamp House", "email": "lamps@example.com", "password": "p" * 73,
    })
    assert res.status_code == 400

    res = await client.post("/users/register", json={**payload, "password": "p" * 72})
    assert res.status_code == 201
    login = await client.post("/users/login", json={"phoneNumber": "9822222222", "password": "p" * 72})
    assert login.status_code == 200


async def test_login_bad_password(client, admin):
    res = await client.post("/admin/login", json={"email": "root@example.com", "password": "nope"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid credentials"


async def test_admin_login_sets_cookies(client, db):
    from app.services import auth as auth_service

    await auth_service.register(db, "admin", {"name": "Ops", "email": "ops@example.com", "password": "ops-pass"})

    res = await client.post("/admin/login", json={"email": "ops@example.com", "password": "ops-pass"})

    assert res.status_code == 200
    assert "refreshToken" in res.cookies
    assert res.json()["data"]["admin"]["email"] == "ops@example.com"


async def test_refresh_rotates_and_invalidates_previous(client, admin):
    old = admin["refresh"]

    res = await client.post("/admin/refresh-token", headers={"x-refresh-token": old})
    assert res.status_code == 200
    new = res.json()["data"]["refreshToken"]
    assert new != old
    client.cookies.clear()

    # the previous token still has a valid signature but is no longer the stored one
    stale = await client.post("/admin/refresh-token", headers={"x-refresh-token": old})
    assert stale.status_code == 403
    assert stale.json()["message"] == "Invalid refresh token"

    again = await client.post("/admin/refresh-token", headers={"x-refresh-token": new})
    assert again.status_code == 200


async def test_refresh_reads_cookie(client, admin):
    res = await client.post("/admin/refresh-token", headers={"Cookie": f"refreshToken={admin['refresh']}"})
    client.cookies.clear()
    assert res.status_code == 200


async def test_refresh_requires_token(client):
    res = await client.post("/admin/refresh-token")
    assert res.status_code == 401
    assert res.json()["message"] == "Refresh token missing"


async def test_logout_clears_refresh_token(client, admin):
    res = await client.post("/admin/logout", headers=admin["headers"])
    assert res.status_code == 200
    client.cookies.clear()

    after = await client.post("/admin/refresh-token", headers={"x-refresh-token": admin["refresh"]})
    assert after.status_code == 403


async def test_relogin_replaces_refresh_token(client, user):
    phone = (await client.get("/users/profile", headers=user["headers"])).json()["data"]["phoneNumber"]
    res = await client.post("/users/login", json={"phoneNumber": phone, "password": "user-pass"})
    assert res.status_code == 200
    client.cookies.clear()

    stale = await client.post("/users/refresh-token", headers={"x-refresh-token": user["refresh"]})
    assert stale.status_code == 403


async def test_admin_creates_admin(client, admin):
    payload = {"name": "Second", "email": "second@example.com", "password": "second-pass"}

    denied = await client.post("/admin/admins", json=payload)
    assert denied.status_code == 401

    res = await client.post("/admin/admins", json=payload, headers=admin["headers"])
    assert res.status_code == 201
    assert res.json()["data"]["email"] == "second@example.com"


async def test_admin_cannot_self_register(client):
    res = await client.post("/admin/register", json={})
    assert res.status_code in (404, 405)
    assert res.json()["success"] is False
