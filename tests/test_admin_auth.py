"""Admin login / bootstrap / logout and the admin session status."""

from app.core.security import verify_password
from app.modules.sessions.service import SessionStore
from tests.conftest import ADMIN_PASSWORD, create_admin


class TestAdminLogin:
    def test_login_sets_admin_session_cookie(self, client, fake_db, admin):
        response = client.post(
            "/api/admin/auth",
            json={"action": "login", "email": admin["email"], "password": ADMIN_PASSWORD}
        )
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "user": {"id": admin["id"], "email": admin["email"], "name": admin["name"]},
        }
        assert response.cookies["admin_session"] == fake_db.rows("admin_sessions")[0]["token"]

        # The cookie now opens admin routes
        assert client.get("/api/admin/users").status_code == 200

    def test_wrong_password(self, client, admin):
        response = client.post(
            "/api/admin/auth",
            json={"action": "login", "email": admin["email"], "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    def test_inactive_admin_cannot_login(self, client, fake_db):
        inactive = create_admin(fake_db, email="old@example.com", is_active=False)
        response = client.post(
            "/api/admin/auth",
            json={"action": "login", "email": inactive["email"], "password": ADMIN_PASSWORD}
        )
        assert response.status_code == 401

    def test_user_credentials_are_a_different_space(self, client, user):
        response = client.post(
            "/api/admin/auth",
            json={"action": "login", "email": user["email"], "password": "user-password-1"}
        )
        assert response.status_code == 401

    def test_unknown_action(self, client):
        response = client.post("/api/admin/auth", json={"action": "dance"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action"}


class TestCreateFirstAdmin:
    def test_bootstrap_when_no_admin_exists(self, client, fake_db):
        response = client.post(
            "/api/admin/auth",
            json={"action": "create", "email": "root@example.com", "password": "long-enough", "name": "Root"}
        )
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "root@example.com"
        stored = fake_db.rows("admin_users")[0]
        assert stored["is_active"] is True
        assert verify_password("long-enough", stored["password_hash"])

    def test_refused_once_an_admin_exists(self, client, fake_db, admin):
        response = client.post(
            "/api/admin/auth",
            json={"action": "create", "email": "second@example.com", "password": "long-enough", "name": "Two"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Admin already exists. Use login action."}
        assert len(fake_db.rows("admin_users")) == 1

    def test_requires_all_fields(self, client, fake_db):
        response = client.post(
            "/api/admin/auth",
            json={"action": "create", "email": "root@example.com", "password": "long-enough"}
        )
        assert response.status_code == 400
        assert fake_db.rows("admin_users") == []

    def test_short_password(self, client, fake_db):
        response = client.post(
            "/api/admin/auth",
            json={"action": "create", "email": "root@example.com", "password": "short", "name": "Root"}
        )
        assert response.status_code == 400
        assert "at least 8 characters" in response.json()["error"]


class TestAdminSession:
    def test_status_and_logout(self, admin_client, fake_db, admin):
        status = admin_client.get("/api/admin/auth").json()
        assert status["authenticated"] is True
        assert status["user"]["id"] == admin["id"]

        response = admin_client.post("/api/admin/auth", json={"action": "logout"})
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert fake_db.rows("admin_sessions") == []

    def test_admin_token_cookie_is_accepted(self, client, fake_db, admin):
        token = SessionStore(fake_db, "admin").create(admin["id"], admin["email"])["token"]
        client.cookies.set("admin_token", token)
        assert client.get("/api/admin/auth").json()["authenticated"] is True
        assert client.get("/api/admin/users").status_code == 200

    def test_not_authenticated(self, client):
        assert client.get("/api/admin/auth").json() == {"authenticated": False}

    def test_user_token_in_admin_cookie(self, client, fake_db, user):
        token = SessionStore(fake_db, "user").create(user["id"], user["email"])["token"]
        client.cookies.set("admin_session", token)
        response = client.get("/api/admin/users")
        assert response.status_code == 401
        assert response.json() == {"error": "Not an admin token"}
