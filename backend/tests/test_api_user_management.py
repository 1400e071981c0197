"""
Test Suite: User Management Endpoints

Admin-only administration of field staff accounts.
"""
from datetime import timedelta

from crisis_api.database import utc_now
from crisis_api.models import AccountStatus, UserDB

BASE = "/api/users/management"


class TestAccess:

    def test_user_token_rejected(self, client, user_headers):
        response = client.get(f"{BASE}/all-user", headers=user_headers)

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_no_token_rejected(self, client):
        assert client.get(f"{BASE}/dashboard/stats").status_code == 401


class TestCreateAndUpdate:

    def test_create_user(self, client, db, admin_headers):
        response = client.post(
            f"{BASE}/create-user",
            data={"name": "Outreach Worker", "email": "Outreach@Example.org", "password": "secret123"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["email"] == "outreach@example.org"
        assert user["status"] == "active"
        assert user["isOtpVerified"] is True

        login = client.post("/api/users/login", json={"email": "outreach@example.org", "password": "secret123"})
        assert login.status_code == 200

    def test_duplicate_email(self, client, admin_headers, make_user):
        make_user(email="taken@example.org")

        response = client.post(
            f"{BASE}/create-user",
            data={"name": "Someone", "email": "taken@example.org", "password": "secret123"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "User already exists with this email"

    def test_short_password(self, client, admin_headers):
        response = client.post(
            f"{BASE}/create-user",
            data={"name": "Someone", "email": "short@example.org", "password": "123"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_update_user(self, client, admin_headers, make_user):
        user = make_user(email="before@example.org", name="Before")

        response = client.put(
            f"{BASE}/update-user/{user.id}",
            data={"name": "After", "email": "after@example.org"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["user"]["name"] == "After"
        assert response.json()["user"]["email"] == "after@example.org"

    def test_create_rejects_short_name(self, client, db, admin_headers):
        response = client.post(
            f"{BASE}/create-user",
            data={"name": "A", "email": "single@example.org", "password": "secret123"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Name must be between 2 and 50 characters"
        assert db.query(UserDB).filter(UserDB.email == "single@example.org").first() is None

    def test_update_rejects_long_name(self, client, db, admin_headers, make_user):
        user = make_user(name="Before")

        response = client.put(
            f"{BASE}/update-user/{user.id}",
            data={"name": "x" * 80},
            headers=admin_headers,
        )

        assert response.status_code == 400
        db.expire_all()
        assert db.query(UserDB).filter(UserDB.id == user.id).one().name == "Before"

    def test_update_to_existing_email(self, client, admin_headers, make_user):
        make_user(email="first@example.org")
        second = make_user(email="second@example.org")

        response = client.put(
            f"{BASE}/update-user/{second.id}",
            data={"email": "first@example.org"},
            headers=admin_headers,
        )

        assert response.status_code == 400


class TestStatusAndDelete:

    def test_change_status_toggles(self, client, admin_headers, make_user):
        user = make_user()

        first = client.patch(f"{BASE}/change-status/{user.id}", headers=admin_headers)
        second = client.patch(f"{BASE}/change-status/{user.id}", headers=admin_headers)

        assert first.json()["user"]["status"] == "inactive"
        assert first.json()["message"] == "User status changed to inactive"
        assert second.json()["user"]["status"] == "active"

    def test_change_status_unknown_user(self, client, admin_headers):
        response = client.patch(f"{BASE}/change-status/missing", headers=admin_headers)

        assert response.status_code == 404

    def test_delete(self, client, db, admin_headers, make_user):
        user_id = make_user().id

        response = client.delete(f"{BASE}/delete/{user_id}", headers=admin_headers)

        assert response.status_code == 200
        db.expire_all()
        assert db.query(UserDB).filter(UserDB.id == user_id).first() is None
        assert client.delete(f"{BASE}/delete/{user_id}", headers=admin_headers).status_code == 404


class TestListing:

    def test_pagination(self, client, admin_headers, make_user):
        now = utc_now()
        for i in range(12):
            make_user(name=f"Worker {i:02d}", created_at=now - timedelta(minutes=i))

        response = client.get(f"{BASE}/all-user", params={"page": 2, "limit": 5}, headers=admin_headers)

        body = response.json()
        assert response.status_code == 200
        assert [u["name"] for u in body["users"]] == [f"Worker {i:02d}" for i in range(5, 10)]
        assert body["pagination"] == {
            "currentPage": 2,
            "totalPages": 3,
            "totalUsers": 12,
            "limit": 5,
            "hasNextPage": True,
            "hasPrevPage": True,
        }
        assert body["filter"] == {"status": "all", "search": ""}

    def test_status_and_search_filters(self, client, admin_headers, make_user):
        make_user(name="Dana Field")
        make_user(name="Dana Office", status=AccountStatus.INACTIVE)
        make_user(name="Riley Field")

        response = client.get(
            f"{BASE}/all-user",
            params={"status": "active", "search": "dana"},
            headers=admin_headers,
        )

        assert [u["name"] for u in response.json()["users"]] == ["Dana Field"]

    def test_search_wildcards_are_literal(self, client, admin_headers, make_user):
        make_user(name="Dana Field")
        make_user(name="50% Team")

        percent = client.get(f"{BASE}/all-user", params={"search": "%"}, headers=admin_headers)
        underscore = client.get(f"{BASE}/all-user", params={"search": "_"}, headers=admin_headers)

        assert [u["name"] for u in percent.json()["users"]] == ["50% Team"]
        assert underscore.json()["users"] == []

    def test_unknown_status_filter(self, client, admin_headers):
        response = client.get(f"{BASE}/all-user", params={"status": "banned"}, headers=admin_headers)

        assert response.status_code == 400


class TestStats:

    def test_stats(self, client, admin_headers, make_user):
        now = utc_now()
        make_user(created_at=now - timedelta(days=60))
        make_user(created_at=now - timedelta(days=10), status=AccountStatus.INACTIVE)
        make_user(created_at=now - timedelta(days=3))
        make_user(created_at=now)

        response = client.get(f"{BASE}/dashboard/stats", headers=admin_headers)

        body = response.json()
        assert body["stats"]["totalUsers"] == 4
        assert body["stats"]["activeUsers"] == 3
        assert body["stats"]["inactiveUsers"] == 1
        assert body["stats"]["newUsers"] == 3
        assert body["stats"]["newUsersThisWeek"] == 2
        assert body["stats"]["newUsersToday"] >= 1
        assert body["percentages"] == {"activePercentage": 75, "inactivePercentage": 25}
