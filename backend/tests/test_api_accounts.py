"""
Test Suite: Account Endpoints

OTP signup, login, profile and the single-admin account, exercised
through the HTTP API.
"""
from datetime import timedelta
from unittest.mock import AsyncMock, patch

from crisis_api.database import utc_now
from crisis_api.models import AccountStatus, AdminDB, UserDB


def _user(db, email):
    db.expire_all()
    return db.query(UserDB).filter(UserDB.email == email).first()


class TestSignupFlow:

    def test_full_signup(self, client, db):
        with patch("crisis_api.routers.users.send_otp_email", new=AsyncMock(return_value=True)) as send:
            response = client.post("/api/users/signup/request-otp", json={"email": "New.Worker@Example.org"})

        assert response.status_code == 200
        assert response.json()["success"] is True
        user = _user(db, "new.worker@example.org")
        assert user.status == AccountStatus.INACTIVE
        assert len(user.otp) == 6 and user.otp.isdigit()
        send.assert_awaited_once_with("new.worker@example.org", user.otp, "verify")

        response = client.post("/api/users/verify-otp", json={"email": "new.worker@example.org", "otp": user.otp})
        assert response.status_code == 200

        response = client.post("/api/users/signup", json={
            "email": "new.worker@example.org", "name": "New Worker", "password": "secret123",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["token"]
        assert body["user"]["status"] == "active"
        assert "password" not in str(body["user"]).lower()

        response = client.post("/api/users/login", json={"email": "new.worker@example.org", "password": "secret123"})
        assert response.status_code == 200
        token = response.json()["token"]

        me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["user"]["name"] == "New Worker"

    def test_wrong_otp(self, client, db):
        client.post("/api/users/signup/request-otp", json={"email": "w@example.org"})
        otp = _user(db, "w@example.org").otp
        wrong = "000000" if otp != "000000" else "111111"

        response = client.post("/api/users/verify-otp", json={"email": "w@example.org", "otp": wrong})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Invalid or expired OTP", "code": "VALIDATION_ERROR"}

    def test_expired_otp(self, client, db):
        client.post("/api/users/signup/request-otp", json={"email": "late@example.org"})
        user = _user(db, "late@example.org")
        user.otp_expires_at = utc_now() - timedelta(seconds=1)
        db.commit()

        response = client.post("/api/users/verify-otp", json={"email": "late@example.org", "otp": user.otp})

        assert response.status_code == 400

    def test_signup_requires_verified_email(self, client):
        client.post("/api/users/signup/request-otp", json={"email": "unverified@example.org"})

        response = client.post("/api/users/signup", json={
            "email": "unverified@example.org", "name": "Someone", "password": "secret123",
        })

        assert response.status_code == 400

    def test_existing_account_cannot_request_signup(self, client, make_user):
        make_user(email="taken@example.org")

        response = client.post("/api/users/signup/request-otp", json={"email": "taken@example.org"})

        assert response.status_code == 400

    def test_resend_issues_new_code(self, client, db):
        client.post("/api/users/signup/request-otp", json={"email": "again@example.org"})
        first_expiry = _user(db, "again@example.org").otp_expires_at

        response = client.post("/api/users/resend-otp", json={"email": "again@example.org"})

        assert response.status_code == 200
        assert _user(db, "again@example.org").otp_expires_at >= first_expiry

    def test_invalid_email_is_400(self, client):
        response = client.post("/api/users/signup/request-otp", json={"email": "not-an-email"})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["errors"]


class TestLogin:

    def test_wrong_password(self, client, make_user):
        make_user(email="worker@example.org", password="right-password")

        response = client.post("/api/users/login", json={"email": "worker@example.org", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_inactive_account_rejected(self, client, make_user):
        make_user(email="off@example.org", password="password123", status=AccountStatus.INACTIVE)

        response = client.post("/api/users/login", json={"email": "off@example.org", "password": "password123"})

        assert response.status_code == 401

    def test_missing_token(self, client):
        response = client.get("/api/users/me")

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_garbage_token(self, client):
        response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    def test_admin_token_is_not_a_user_token(self, client, admin_headers):
        response = client.get("/api/users/me", headers=admin_headers)

        assert response.status_code == 401


class TestProfileUpdate:

    def test_update_name(self, client, user_headers):
        response = client.put("/api/users/update/profile", data={"name": "Renamed"}, headers=user_headers)

        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Renamed"

    def test_upload_image(self, client, user_headers):
        response = client.put(
            "/api/users/update/profile",
            files={"profileImage": ("me.png", b"\x89PNG fake", "image/png")},
            headers=user_headers,
        )

        assert response.status_code == 200
        assert "/uploads/user-" in response.json()["user"]["profileImage"]

    def test_rejects_non_image(self, client, user_headers):
        response = client.put(
            "/api/users/update/profile",
            files={"profileImage": ("notes.txt", b"hello", "text/plain")},
            headers=user_headers,
        )

        assert response.status_code == 400

    def test_nothing_to_update(self, client, user_headers):
        response = client.put("/api/users/update/profile", headers=user_headers)

        assert response.status_code == 400


class TestAdminAccount:

    def test_signup_then_login(self, client):
        response = client.post("/api/admin/signup", json={
            "name": "Site Admin", "email": "admin@example.org", "password": "adminpass",
        })
        assert response.status_code == 201
        assert response.json()["admin"]["email"] == "admin@example.org"

        response = client.post("/api/admin/login", json={"email": "admin@example.org", "password": "adminpass"})
        assert response.status_code == 200
        assert response.json()["token"]

    def test_second_admin_rejected(self, client, make_admin):
        make_admin()

        response = client.post("/api/admin/signup", json={
            "name": "Another", "email": "other@example.org", "password": "adminpass",
        })

        assert response.status_code == 400
        assert "Only one admin" in response.json()["message"]

    def test_password_reset(self, client, db, make_admin):
        make_admin(email="admin@example.org", password="old-password")

        with patch("crisis_api.routers.admin.send_otp_email", new=AsyncMock(return_value=True)) as send:
            response = client.post("/api/admin/forgot-password", json={"email": "admin@example.org"})
        assert response.status_code == 200

        db.expire_all()
        otp = db.query(AdminDB).first().otp
        send.assert_awaited_once_with("admin@example.org", otp, "reset")

        response = client.post("/api/admin/reset-password", json={
            "email": "admin@example.org", "otp": otp, "newPassword": "new-password",
        })
        assert response.status_code == 200

        assert client.post("/api/admin/login", json={
            "email": "admin@example.org", "password": "new-password",
        }).status_code == 200
        assert client.post("/api/admin/login", json={
            "email": "admin@example.org", "password": "old-password",
        }).status_code == 401

    def test_forgot_password_unknown_admin(self, client):
        response = client.post("/api/admin/forgot-password", json={"email": "nobody@example.org"})

        assert response.status_code == 404

    def test_profile_update_requires_admin(self, client, user_headers):
        response = client.put("/api/admin/profile-image", data={"name": "X"}, headers=user_headers)

        assert response.status_code == 401

    def test_profile_update_rejects_long_name(self, client, admin_headers):
        response = client.put("/api/admin/profile-image", data={"name": "x" * 80}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Name must be between 2 and 50 characters"

    def test_signup_rejects_short_name(self, client):
        response = client.post("/api/admin/signup", json={
            "name": "A", "email": "admin@example.org", "password": "adminpass",
        })

        assert response.status_code == 400

    def test_profile_update(self, client, admin_headers):
        response = client.put("/api/admin/profile-image", data={"name": "Renamed Admin"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["admin"]["name"] == "Renamed Admin"
