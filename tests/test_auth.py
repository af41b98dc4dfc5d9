"""Tests for session tokens, OAuth state tokens, and the session gate."""

from gitdocify.core.config import settings
from gitdocify.core.token_factory import (
    create_session_token,
    create_state_token,
    decode_session_token,
    verify_state_token,
)


class TestSessionTokens:

    def test_create_and_decode(self):
        token = create_session_token("github:1", "github", "test-secret")
        payload = decode_session_token(token, "test-secret")
        assert payload is not None
        assert payload.sub == "github:1"
        assert payload.provider == "github"

    def test_wrong_secret_returns_none(self):
        token = create_session_token("github:1", "github", "correct-secret")
        assert decode_session_token(token, "wrong-secret") is None

    def test_expired_token_returns_none(self):
        token = create_session_token("github:1", "github", "secret", expires_hours=-1)
        assert decode_session_token(token, "secret") is None

    def test_malformed_token_returns_none(self):
        assert decode_session_token("not.a.token", "secret") is None
        assert decode_session_token("", "secret") is None

    def test_state_token_is_not_a_session(self):
        state = create_state_token("github", "secret")
        assert decode_session_token(state, "secret") is None


class TestStateTokens:

    def test_valid_for_issuing_provider(self):
        state = create_state_token("github", "secret")
        assert verify_state_token(state, "github", "secret") is True

    def test_rejected_for_other_provider(self):
        state = create_state_token("github", "secret")
        assert verify_state_token(state, "google", "secret") is False

    def test_expired_state_rejected(self):
        state = create_state_token("github", "secret", expires_seconds=-1)
        assert verify_state_token(state, "github", "secret") is False

    def test_session_token_is_not_a_state(self):
        token = create_session_token("github:1", "github", "secret")
        assert verify_state_token(token, "github", "secret") is False


class TestSessionGate:

    def test_no_session_returns_401(self, client):
        resp = client.post("/api/documents/generate", json={"prompt": "hello"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Unauthorized"

    def test_invalid_token_returns_401(self, client):
        resp = client.get("/api/documents", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    def test_token_for_deleted_user_returns_401(self, client):
        token = create_session_token("github:404", "github", settings.session_secret)
        resp = client.get("/api/documents", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_bearer_session_accepted(self, client, github_headers):
        resp = client.get("/api/documents", headers=github_headers)
        assert resp.status_code == 200

    def test_cookie_session_accepted(self, client, github_user):
        token = create_session_token(github_user.user_id, "github", settings.session_secret)
        client.cookies.set(settings.session_cookie_name, token)
        resp = client.get("/api/auth/session")
        assert resp.status_code == 200
        data = resp.json()
        assert data["authenticated"] is True
        assert data["provider"] == "github"
        assert data["has_github_credential"] is True
        assert data["user"]["user_id"] == github_user.user_id

    def test_session_endpoint_without_session(self, client):
        resp = client.get("/api/auth/session")
        assert resp.status_code == 200
        assert resp.json() == {
            "authenticated": False,
            "provider": None,
            "has_github_credential": False,
            "user": None,
        }

    def test_session_never_exposes_access_token(self, client, github_headers):
        resp = client.get("/api/auth/session", headers=github_headers)
        assert "gho_testtoken" not in resp.text

    def test_google_session_has_no_github_credential(self, client, google_headers):
        resp = client.get("/api/auth/session", headers=google_headers)
        assert resp.json()["has_github_credential"] is False

    def test_logout_clears_cookie(self, client):
        resp = client.post("/api/auth/logout")
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert settings.session_cookie_name in resp.headers.get("set-cookie", "")
