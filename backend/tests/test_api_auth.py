# 인증 API 테스트 (쿠키 세션)
from fastapi.testclient import TestClient

from conftest import VALID_PASSWORD


def test_register_sets_cookie_and_hides_password(make_client, welcome_email_queue):
    client = make_client()
    resp = client.post(
        "/api/auth/register",
        json={"username": "luna", "email": "Luna@Example.com", "password": VALID_PASSWORD},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Registration successful"
    assert body["user"]["email"] == "luna@example.com"
    assert body["user"]["preferences"] == {"theme": "dark", "emailNotifications": True, "weeklyDigest": False}
    assert "password" not in body["user"] and "hashed_password" not in body["user"]
    assert "token" in resp.cookies
    assert "httponly" in resp.headers["set-cookie"].lower()
    welcome_email_queue.assert_called_once_with("luna@example.com", "luna")


def test_register_duplicate_email_and_username(register, make_client):
    register("luna", "luna@example.com")
    client = make_client()
    resp = client.post("/api/auth/register",
                       json={"username": "other", "email": "LUNA@example.com", "password": VALID_PASSWORD})
    assert resp.status_code == 409
    assert resp.json()["success"] is False
    assert resp.json()["message"] == "Email is already registered"

    resp = client.post("/api/auth/register",
                       json={"username": "luna", "email": "new@example.com", "password": VALID_PASSWORD})
    assert resp.status_code == 409
    assert resp.json()["message"] == "Username is already taken"


def test_register_validation_envelope(make_client):
    resp = make_client().post("/api/auth/register",
                              json={"username": "x", "email": "not-an-email", "password": "weak"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    fields = {e["field"] for e in body["errors"]}
    assert {"username", "email", "password"} <= fields


def test_login_same_message_for_unknown_email_and_wrong_password(register, make_client):
    register("luna", "luna@example.com")
    client = make_client()
    wrong_pw = client.post("/api/auth/login", json={"email": "luna@example.com", "password": "Wrong1234"})
    unknown = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": VALID_PASSWORD})
    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.json()["message"] == unknown.json()["message"] == "Invalid email or password"


def test_login_me_logout(register, make_client):
    register("luna", "luna@example.com")
    client = make_client()
    resp = client.post("/api/auth/login", json={"email": "LUNA@example.com", "password": VALID_PASSWORD})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Login successful"

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["username"] == "luna"

    assert client.post("/api/auth/refresh").json()["message"] == "Token refreshed"

    out = client.post("/api/auth/logout")
    assert out.json() == {"success": True, "message": "Logout successful"}
    assert client.get("/api/auth/me").status_code == 401


def test_auth_failures_are_all_401(app):
    client = TestClient(app)
    resp = client.get("/api/dreams")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Authentication required"

    client.cookies.set("token", "garbage")
    resp = client.get("/api/dreams")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid token"


def test_me_after_account_vanished(client, user_repo):
    user_repo.docs.clear()
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json()["message"] == "User not found"


def test_health_and_unknown_route(app):
    client = TestClient(app)
    assert client.get("/api/health").json()["message"] == "NightLog API is running"
    assert client.get("/health").json()["status"] == "ok"
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Route /api/nowhere not found"}
