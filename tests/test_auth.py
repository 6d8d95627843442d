"""Tests for registration, login and the password reset flow."""
from urllib.parse import parse_qs, urlparse

import pytest

from app.services.email_service import EmailService

API = "/api/v1"


@pytest.fixture()
def outbox(monkeypatch):
    sent = []

    async def fake_send(to, subject, body):
        sent.append({"to": to, "subject": subject, "body": body})
        return True

    monkeypatch.setattr(EmailService, "send_email", staticmethod(fake_send))
    return sent


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
    assert r.headers["X-Content-Type-Options"] == "nosniff"


def test_register_returns_user_without_password(client):
    r = client.post(f"{API}/auth/register", json={
        "first_name": "Asha",
        "last_name": "Roy",
        "email": "Asha@Example.com",
        "password": "long-enough-1",
    })
    assert r.status_code == 201
    user = r.json()["data"]
    assert user["email"] == "asha@example.com"
    assert "password_hash" not in user
    assert user["reviews"] == []


def test_register_duplicate_email_conflicts(api, client):
    api.register(email="dup@example.com")
    r = client.post(f"{API}/auth/register", json={
        "first_name": "Dup",
        "last_name": "User",
        "email": "dup@example.com",
        "password": "long-enough-1",
    })
    assert r.status_code == 409
    assert r.json()["success"] is False


def test_register_validation_error_is_400(client):
    r = client.post(f"{API}/auth/register", json={
        "first_name": "Short",
        "last_name": "Pw",
        "email": "short@example.com",
        "password": "123",
    })
    assert r.status_code == 400
    assert "password" in r.json()["message"]


def test_login_bad_credentials(api, client):
    api.register(email="someone@example.com")
    r = client.post(f"{API}/auth/login", json={"email": "someone@example.com", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Invalid email or password"}


def test_login_sets_cookie_usable_for_me(api, client):
    api.register(email="cookie@example.com", password="cookie-pass-1")
    r = client.post(f"{API}/auth/login", json={"email": "cookie@example.com", "password": "cookie-pass-1"})
    assert r.status_code == 200
    assert "token" in r.cookies

    me = client.get(f"{API}/auth/me")
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "cookie@example.com"

    client.post(f"{API}/auth/logout")
    client.cookies.clear()
    assert client.get(f"{API}/auth/me").status_code == 401


def test_me_requires_token(client):
    r = client.get(f"{API}/auth/me")
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_me_rejects_garbage_token(client):
    r = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_password_reset_flow(api, client, outbox):
    user_id, _ = api.register(email="forgetful@example.com", password="old-password-1")

    r = client.post(f"{API}/auth/forgot-password", json={"email": "forgetful@example.com"})
    assert r.status_code == 200
    assert len(outbox) == 1

    link = next(word for word in outbox[0]["body"].split() if word.startswith("http"))
    query = parse_qs(urlparse(link).query)
    assert query["id"] == [user_id]
    token = query["token"][0]

    r = client.post(f"{API}/auth/reset-password", json={
        "userId": user_id, "token": token, "password": "new-password-1"
    })
    assert r.status_code == 200
    assert outbox[-1]["subject"] == "Password Reset Successful"

    api.login("forgetful@example.com", "new-password-1")

    # the token is single use
    r = client.post(f"{API}/auth/reset-password", json={
        "userId": user_id, "token": token, "password": "another-pass-1"
    })
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid or expired token"


def test_password_reset_wrong_token(api, client, outbox):
    user_id, _ = api.register(email="wrongtoken@example.com")
    client.post(f"{API}/auth/forgot-password", json={"email": "wrongtoken@example.com"})

    r = client.post(f"{API}/auth/reset-password", json={
        "userId": user_id, "token": "0" * 64, "password": "new-password-1"
    })
    assert r.status_code == 400


def test_forgot_password_unknown_email(client, outbox):
    r = client.post(f"{API}/auth/forgot-password", json={"email": "nobody@example.com"})
    assert r.status_code == 404
    assert outbox == []
