# tests/test_users.py
from datetime import datetime, timedelta, timezone

from jose import jwt

from supergains.utils.security import create_access_token, decode_access_token
from supergains.utils.settings import JWT_AUDIENCE, JWT_ISSUER, JWT_SECRET
from tests.conftest import auth_headers, make_user


def register(client, email="new@supergains.com", password="secret123", **extra):
    return client.post("/api/users/register", json={"name": "New User", "email": email, "password": password, **extra})


def test_register_returns_token(client):
    res = register(client)
    assert res.status_code == 201
    body = res.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == 3600
    assert body["user"]["email"] == "new@supergains.com"
    assert body["user"]["role"] == "user"
    assert "password_hash" not in body["user"]

    claims = decode_access_token(body["access_token"])
    assert claims["sub"] == str(body["user"]["id"])
    assert claims["role"] == "user"


def test_register_ignores_requested_role(client):
    res = register(client, role="admin")
    assert res.status_code == 201
    assert res.json()["user"]["role"] == "user"


def test_register_duplicate_email(client):
    register(client, email="dup@supergains.com")
    res = register(client, email="DUP@supergains.com")
    assert res.status_code == 400
    assert res.json()["error"] == "User already exists"


def test_register_validation(client):
    res = register(client, email="not-an-email", password="123")
    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert fields == {"email", "password"}


def test_login(client):
    make_user(email="login@supergains.com", password="secret123")

    res = client.post("/api/users/login", json={"email": "login@supergains.com", "password": "secret123"})
    assert res.status_code == 200
    token = res.json()["access_token"]

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "login@supergains.com"
    assert me.json()["last_login"] is not None


def test_login_wrong_password_and_unknown_email_look_the_same(client):
    make_user(email="login@supergains.com", password="secret123")

    wrong = client.post("/api/users/login", json={"email": "login@supergains.com", "password": "nope"})
    unknown = client.post("/api/users/login", json={"email": "ghost@supergains.com", "password": "nope"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"success": False, "error": "Invalid email or password"}


def test_inactive_user_is_rejected(client):
    user = make_user(email="off@supergains.com", password="secret123", active=False)

    res = client.post("/api/users/login", json={"email": "off@supergains.com", "password": "secret123"})
    assert res.status_code == 401
    assert client.get("/api/users/me", headers=auth_headers(user)).status_code == 401


def test_expired_and_forged_tokens(client, user):
    expired = create_access_token(user.id, user.email, user.role, expires_minutes=-1)
    res = client.get("/api/users/me", headers={"Authorization": f"Bearer {expired}"})
    assert res.status_code == 401
    assert res.json()["error"] == "Token expired"

    now = datetime.now(timezone.utc)
    forged = jwt.encode(
        {"sub": str(user.id), "iss": JWT_ISSUER, "aud": JWT_AUDIENCE, "exp": now + timedelta(minutes=5)},
        "wrong-secret",
        algorithm="HS256",
    )
    res = client.get("/api/users/me", headers={"Authorization": f"Bearer {forged}"})
    assert res.status_code == 401
    assert res.json()["error"] == "Invalid token"

    other_audience = jwt.encode(
        {"sub": str(user.id), "iss": JWT_ISSUER, "aud": "someone-else", "exp": now + timedelta(minutes=5)},
        JWT_SECRET,
        algorithm="HS256",
    )
    assert client.get("/api/users/me", headers={"Authorization": f"Bearer {other_audience}"}).status_code == 401


def test_token_for_deleted_user(client):
    token = create_access_token(999, "ghost@supergains.com", "user")
    res = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


def test_admin_lists_and_deactivates_users(client, user, admin, admin_headers, user_headers):
    assert client.get("/api/users/", headers=user_headers).status_code == 403

    res = client.get("/api/users/", headers=admin_headers)
    assert {u["email"] for u in res.json()} == {user.email, admin.email}

    res = client.patch(f"/api/users/{user.id}/status", json={"active": False}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["is_active"] is False
    assert client.get("/api/users/me", headers=user_headers).status_code == 401

    res = client.patch(f"/api/users/{admin.id}/status", json={"active": False}, headers=admin_headers)
    assert res.status_code == 400
