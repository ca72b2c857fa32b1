"""Integration tests for the /api/auth endpoints."""

from datetime import datetime, timedelta, timezone

import pytest

from api_helpers import PASSWORD, bearer, signup, signup_verified
from services.auth_service import FORGOT_PASSWORD_MESSAGE


class TestSignup:
    def test_created_with_token(self, client, email_sender):
        resp = signup(client)
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["token"]
        assert body["message"].startswith("User registered successfully")
        assert body["user"]["isEmailVerified"] is False
        assert body["user"]["username"] == "u1"
        assert "password_hash" not in body["user"]
        assert email_sender.count("verification") == 1

    def test_email_conflict(self, client):
        signup(client)
        resp = signup(client, username="u2")
        assert resp.status_code == 400
        assert resp.json()["field"] == "email"
        assert resp.json()["error"] == "Email already registered"

    def test_username_conflict(self, client):
        signup(client)
        resp = signup(client, email="e2@x.com")
        assert resp.status_code == 400
        assert resp.json()["field"] == "username"

    def test_missing_field_is_400(self, client):
        resp = client.post("/api/auth/signup", json={"username": "u1"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_email_outage_does_not_fail_signup(self, client, email_sender):
        email_sender.failing.add("verification")
        resp = signup(client)
        assert resp.status_code == 201
        assert "could not be sent" in resp.json()["message"]


class TestLogin:
    def test_unverified_is_403_without_token(self, client):
        signup(client)
        resp = client.post("/api/auth/login", json={"email": "e1@x.com", "password": PASSWORD})
        assert resp.status_code == 403
        body = resp.json()
        assert body["code"] == "email_not_verified"
        assert "token" not in body

    def test_bad_credentials_is_401(self, client):
        signup(client)
        resp = client.post("/api/auth/login", json={"email": "e1@x.com", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid email or password"

    def test_unknown_email_same_401(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@x.com", "password": "x"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid email or password"


class TestOAuth:
    def test_twice_same_user(self, client):
        payload = {"email": "g@x.com", "provider": "google", "providerId": "g1"}
        first = client.post("/api/auth/oauth", json=payload)
        second = client.post("/api/auth/oauth", json=payload)
        assert first.status_code == second.status_code == 200
        assert first.json()["user"]["id"] == second.json()["user"]["id"]
        assert first.json()["user"]["isEmailVerified"] is True

        me = client.get("/api/auth/me", headers=bearer(second.json()["token"]))
        assert me.json()["user"]["id"] == first.json()["user"]["id"]

    def test_non_latin_display_name_still_signs_in(self, client):
        resp = client.post(
            "/api/auth/oauth",
            json={"email": "liel@x.com", "username": "ליאל", "provider": "apple", "providerId": "a1"},
        )
        assert resp.status_code == 200
        assert resp.json()["user"]["username"] == "liel"

    def test_bad_provider_is_400(self, client):
        resp = client.post(
            "/api/auth/oauth", json={"email": "g@x.com", "provider": "myspace", "providerId": "1"}
        )
        assert resp.status_code == 400
        assert resp.json()["field"] == "provider"


class TestVerifyEmail:
    def test_scenario_signup_verify_login(self, client, email_sender):
        signup_resp = signup(client)
        blocked = client.post(
            "/api/auth/login", json={"email": "e1@x.com", "password": PASSWORD}
        )
        assert blocked.status_code == 403

        token = email_sender.last("verification").token
        verified = client.get(f"/api/auth/verify-email/{token}")
        assert verified.status_code == 200
        assert verified.json()["success"] is True

        login = client.post("/api/auth/login", json={"email": "e1@x.com", "password": PASSWORD})
        assert login.status_code == 200
        assert login.json()["user"]["id"] == signup_resp.json()["user"]["id"]
        assert login.json()["user"]["isEmailVerified"] is True

    def test_reuse_is_400(self, client, email_sender):
        signup(client)
        token = email_sender.last("verification").token
        client.get(f"/api/auth/verify-email/{token}")
        resp = client.get(f"/api/auth/verify-email/{token}")
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_or_expired_token"


class TestResendVerification:
    def test_sends_new_token(self, client, email_sender):
        signup(client)
        resp = client.post("/api/auth/resend-verification", json={"email": "e1@x.com"})
        assert resp.status_code == 200
        assert email_sender.count("verification") == 2

    def test_unknown_is_404(self, client):
        resp = client.post("/api/auth/resend-verification", json={"email": "ghost@x.com"})
        assert resp.status_code == 404

    def test_already_verified_is_400(self, client, email_sender):
        signup_verified(client, email_sender)
        resp = client.post("/api/auth/resend-verification", json={"email": "e1@x.com"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "already_verified"

    def test_send_failure_is_500(self, client, email_sender):
        signup(client)
        email_sender.failing.add("verification")
        resp = client.post("/api/auth/resend-verification", json={"email": "e1@x.com"})
        assert resp.status_code == 500
        assert resp.json()["code"] == "email_delivery_failed"


class TestPasswordReset:
    @pytest.mark.parametrize("email", ["e1@x.com", "ghost@x.com"], ids=["known", "unknown"])
    def test_forgot_password_uniform_response(self, client, email):
        signup(client)
        resp = client.post("/api/auth/forgot-password", json={"email": email})
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": FORGOT_PASSWORD_MESSAGE}

    @pytest.mark.parametrize("body", [{}, {"email": ""}], ids=["missing", "empty"])
    def test_forgot_password_without_email_is_200(self, client, body):
        resp = client.post("/api/auth/forgot-password", json=body)
        assert resp.status_code == 200
        assert resp.json()["message"] == FORGOT_PASSWORD_MESSAGE

    def test_forgot_password_uniform_on_send_failure(self, client, email_sender):
        signup(client)
        email_sender.failing.add("password_reset")
        resp = client.post("/api/auth/forgot-password", json={"email": "e1@x.com"})
        assert resp.status_code == 200
        assert resp.json()["message"] == FORGOT_PASSWORD_MESSAGE

    def test_reset_then_login(self, client, email_sender):
        signup_verified(client, email_sender)
        client.post("/api/auth/forgot-password", json={"email": "e1@x.com"})
        token = email_sender.last("password_reset").token

        resp = client.post(f"/api/auth/reset-password/{token}", json={"password": "fresh1"})
        assert resp.status_code == 200

        login = client.post("/api/auth/login", json={"email": "e1@x.com", "password": "fresh1"})
        assert login.status_code == 200

    def test_weak_password_is_400(self, client, email_sender):
        signup(client)
        client.post("/api/auth/forgot-password", json={"email": "e1@x.com"})
        token = email_sender.last("password_reset").token
        resp = client.post(f"/api/auth/reset-password/{token}", json={"password": "123"})
        assert resp.status_code == 400
        assert resp.json()["field"] == "password"

    def test_expired_reset_token_is_400(self, client, email_sender, mongo_db):
        signup(client)
        client.post("/api/auth/forgot-password", json={"email": "e1@x.com"})
        token = email_sender.last("password_reset").token
        mongo_db.sync["users"].update_one(
            {"email": "e1@x.com"},
            {"$set": {"password_reset.expires_at": datetime.now(timezone.utc) - timedelta(seconds=1)}},
        )
        resp = client.post(f"/api/auth/reset-password/{token}", json={"password": "fresh1"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_or_expired_token"


class TestMe:
    def test_requires_token(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {
            "success": False,
            "error": "Not authorized to access this route",
            "code": "authentication_error",
        }

    def test_invalid_token(self, client):
        resp = client.get("/api/auth/me", headers=bearer("junk"))
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid or expired token"

    def test_returns_user(self, client, email_sender):
        token = signup_verified(client, email_sender)
        resp = client.get("/api/auth/me", headers=bearer(token))
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "e1@x.com"
