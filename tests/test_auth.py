import pytest

from tuitiondesk.core.config import parse_duration
from tuitiondesk.core.security import create_access_token, decode_access_token

ADMIN_PASSWORD = "secret123"


class TestLogin:
    def test_login_returns_token_and_user(self, client, admin):
        response = client.post("/api/auth/login", json={"email": "ADMIN@brightminds.in", "password": ADMIN_PASSWORD})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"] == {
            "id": admin["id"],
            "name": "Admin",
            "email": "admin@brightminds.in",
            "role": "admin",
            "profile_id": None,
        }
        claims = decode_access_token(data["token"])
        assert claims["sub"] == admin["id"]
        assert claims["role"] == "admin"

    def test_wrong_password(self, client, admin):
        response = client.post("/api/auth/login", json={"email": "admin@brightminds.in", "password": "wrong-one"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_inactive_account(self, client, db, admin):
        db.table("users").update({"is_active": False}).eq("id", admin["id"]).execute()
        response = client.post("/api/auth/login", json={"email": "admin@brightminds.in", "password": ADMIN_PASSWORD})
        assert response.status_code == 401

    def test_invalid_payload(self, client, db):
        response = client.post("/api/auth/login", json={"email": "not-an-email"})
        assert response.status_code == 422
        assert response.json()["errors"] == [
            {"field": "email", "message": "Please include a valid email"},
            {"field": "password", "message": "Password is required"},
        ]

    def test_body_must_be_json(self, client, db):
        response = client.post(
            "/api/auth/login", content="email=x", headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestTokens:
    def test_me(self, client, admin_headers, admin):
        response = client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["id"] == admin["id"]

    def test_missing_token(self, client, db):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["message"] == "Access token is required"

    def test_expired_token(self, client, admin):
        token = create_access_token(admin["id"], "admin", expires_in=-10)
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Token expired"

    def test_tampered_token(self, client, admin):
        token = create_access_token(admin["id"], "admin") + "x"
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_token_for_deleted_user(self, client, db, admin):
        token = create_access_token(admin["id"], "admin")
        db.table("users").delete().eq("id", admin["id"]).execute()
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestRegister:
    def test_first_admin_bootstrap(self, client, db):
        response = client.post("/api/auth/register", json={
            "name": "Owner",
            "email": "owner@brightminds.in",
            "password": "owner123",
        })
        assert response.status_code == 201
        assert response.json()["data"]["user"]["role"] == "admin"
        assert "password_hash" not in response.json()["data"]["user"]

    def test_second_admin_is_refused(self, client, admin):
        response = client.post("/api/auth/register", json={
            "name": "Intruder",
            "email": "intruder@brightminds.in",
            "password": "intrude1",
        })
        assert response.status_code == 403


@pytest.mark.parametrize("value, seconds", [("30d", 2592000), ("12h", 43200), ("45m", 2700), ("900", 900)])
def test_parse_duration(value, seconds):
    assert parse_duration(value) == seconds


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("soon")


def test_health(client):
    assert client.get("/api/health").json()["status"] == "healthy"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"success": False, "data": None, "message": "Not Found"}
