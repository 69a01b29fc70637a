"""
HTTP endpoint tests: /api/v1/auth/*, /api/v1/users/me, /api/v1/health
"""
from datetime import timedelta

from models import storage
from models.token import Token
from services import auth_service
from utils.security import generate_token

SIGNUP = "/api/v1/auth/signup"
LOGIN = "/api/v1/auth/login"
REFRESH = "/api/v1/auth/refresh-token"
LOGOUT = "/api/v1/auth/logout"
ME = "/api/v1/users/me"


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


class TestRoutes:

    def test_auth_endpoints_live_under_auth_prefix(self, app):
        rules = {rule.rule for rule in app.url_map.iter_rules()}
        for path in (SIGNUP, LOGIN, REFRESH, LOGOUT, ME, "/api/v1/health"):
            assert path in rules
        assert "/api/v1/signup" not in rules
        assert "/api/v1/login" not in rules


class TestSignup:

    def test_returns_camel_case_tokens(self, signed_up):
        assert set(signed_up) == {"accessToken", "refreshToken"}

    def test_stores_one_valid_token(self, signed_up, stored_tokens):
        rows = stored_tokens("alice@example.com")
        assert len(rows) == 1
        assert rows[0].is_valid
        assert rows[0].token == signed_up["accessToken"]

    def test_role_defaults_to_user(self, client, alice_payload):
        alice_payload.pop("role")
        assert client.post(SIGNUP, json=alice_payload).status_code == 200
        assert storage.find_user_by_email("alice@example.com").role.value == "USER"

    def test_duplicate_email_conflict(self, client, signed_up, alice_payload):
        resp = client.post(SIGNUP, json=alice_payload)
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "CONFLICT"

    def test_validation_error(self, client):
        resp = client.post(SIGNUP, json={"email": "not-an-email", "password": "short"})
        assert resp.status_code == 422
        body = resp.get_json()
        assert body["error"] == "VALIDATION_ERROR"
        assert "email" in body["details"]
        assert "password" in body["details"]

    def test_unknown_role(self, client, alice_payload):
        alice_payload["role"] = "SUPERUSER"
        assert client.post(SIGNUP, json=alice_payload).status_code == 422


class TestLogin:

    def test_login_revokes_signup_token(self, client, signed_up, alice_payload):
        resp = client.post(LOGIN, json={"email": alice_payload["email"], "password": alice_payload["password"]})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["accessToken"] != signed_up["accessToken"]
        assert body["refreshToken"] != signed_up["refreshToken"]

        old = storage.find_token(signed_up["accessToken"])
        assert old.expired is True
        assert old.revoked is True
        assert storage.find_token(body["accessToken"]).is_valid

    def test_email_is_case_insensitive(self, client, signed_up, alice_payload):
        resp = client.post(LOGIN, json={"email": "Alice@Example.COM", "password": alice_payload["password"]})
        assert resp.status_code == 200

    def test_bad_credentials(self, client, signed_up):
        resp = client.post(LOGIN, json={"email": "alice@example.com", "password": "nope-nope"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"

    def test_missing_fields(self, client):
        assert client.post(LOGIN, json={}).status_code == 422

    def test_invariant_violation_is_internal_error(self, client, monkeypatch):
        monkeypatch.setattr(auth_service, "check_credentials", lambda email, password: None)
        resp = client.post(LOGIN, json={"email": "ghost@example.com", "password": "whatever1"})
        assert resp.status_code == 500
        assert resp.get_json()["error"] == "INTERNAL_ERROR"


class TestRefresh:

    def test_refresh(self, client, signed_up):
        resp = client.post(REFRESH, headers=_bearer(signed_up["refreshToken"]))
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["refreshToken"] == signed_up["refreshToken"]
        assert body["accessToken"] != signed_up["accessToken"]
        assert storage.find_token(signed_up["accessToken"]).revoked is True

    def test_missing_header_is_empty_response(self, client, signed_up):
        resp = client.post(REFRESH)
        assert resp.status_code == 200
        assert resp.data == b""
        assert storage.count(Token) == 1
        assert storage.find_token(signed_up["accessToken"]).is_valid

    def test_malformed_header_is_empty_response(self, client, signed_up):
        resp = client.post(REFRESH, headers={"Authorization": signed_up["refreshToken"]})
        assert resp.status_code == 200
        assert resp.data == b""

    def test_expired_refresh_token_is_empty_response(self, client, signed_up):
        user = storage.find_user_by_email("alice@example.com")
        expired = generate_token(user, timedelta(seconds=-60), token_type="refresh")

        resp = client.post(REFRESH, headers=_bearer(expired))
        assert resp.status_code == 200
        assert resp.data == b""
        assert storage.count(Token) == 1
        assert storage.find_token(signed_up["accessToken"]).is_valid

    def test_garbage_token_unauthorized(self, client, signed_up):
        resp = client.post(REFRESH, headers=_bearer("garbage"))
        assert resp.status_code == 401


class TestProtectedEndpoints:

    def test_me(self, client, signed_up):
        resp = client.get(ME, headers=_bearer(signed_up["accessToken"]))
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["email"] == "alice@example.com"
        assert data["firstname"] == "Alice"
        assert data["role"] == "USER"
        assert "password_hash" not in data

    def test_me_requires_header(self, client):
        assert client.get(ME).status_code == 401

    def test_refresh_token_is_not_an_access_token(self, client, signed_up):
        resp = client.get(ME, headers=_bearer(signed_up["refreshToken"]))
        assert resp.status_code == 401

    def test_superseded_token_rejected(self, client, signed_up, alice_payload):
        client.post(LOGIN, json={"email": alice_payload["email"], "password": alice_payload["password"]})
        resp = client.get(ME, headers=_bearer(signed_up["accessToken"]))
        assert resp.status_code == 401

    def test_logout(self, client, signed_up):
        resp = client.post(LOGOUT, headers=_bearer(signed_up["accessToken"]))
        assert resp.status_code == 204
        assert storage.find_token(signed_up["accessToken"]).revoked is True
        assert client.get(ME, headers=_bearer(signed_up["accessToken"])).status_code == 401


class TestHealth:

    def test_health(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "ok"
        assert body["version"] == "1.0.0"
        assert body["service"] == "wishlist-gateway"

    def test_unknown_route(self, client):
        resp = client.get("/api/v1/nope")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "NOT_FOUND"
