from datetime import timedelta

from conftest import auth_headers, register
from datagateway.core.security import issue_access_token


def test_register_login_and_me(client):
    user = register(client, username="alice", password="secret123")

    resp = client.post("/api/auth/login", json={"username": "alice", "password": "secret123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["userId"] == user["id"]
    assert body["tokenType"] == "bearer"

    resp = client.get("/api/auth/me", headers=auth_headers(body["accessToken"]))
    assert resp.json() == {"id": user["id"], "username": "alice"}


def test_login_with_wrong_password(client):
    register(client, username="bob", password="secret123")

    resp = client.post("/api/auth/login", json={"username": "bob", "password": "nope-nope"})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid username or password"}
    assert resp.headers["www-authenticate"] == "Bearer"


def test_duplicate_username(client):
    register(client, username="carol")

    resp = client.post("/api/auth/register", json={"username": "carol", "password": "secret123"})
    assert resp.status_code == 400


def test_malformed_payload_is_400(client):
    resp = client.post("/api/auth/register", json={"username": "dave", "password": "123"})
    assert resp.status_code == 400
    assert isinstance(resp.json()["message"], list)


def test_expired_and_garbage_tokens(client):
    user = register(client)
    expired = issue_access_token(user["id"], lifetime=timedelta(minutes=-5))

    assert client.get("/api/auth/me", headers=auth_headers(expired)).status_code == 401
    assert client.get("/api/auth/me", headers=auth_headers("not-a-jwt")).status_code == 401
    assert client.get("/api/auth/me").status_code == 401
