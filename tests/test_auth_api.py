"""API tests for registration, login and the credential verifier."""
from datetime import timedelta

from jose import jwt

from conftest import PASSWORD
from financehub.config import Settings
from financehub.data.repositories.user_repository import get_user_by_email
from financehub.domain.models import Role
from financehub.domain.services.auth_service import create_access_token, initialize_admin
from financehub.main import create_app


def register(client, **overrides):
    payload = {"email": "new@example.com", "password": PASSWORD, "full_name": "New User"}
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


class TestRegister:
    def test_register_returns_user_and_token(self, client):
        response = register(client, email="  New@Example.com ")
        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "new@example.com"
        assert body["user"]["role"] == "user"
        assert body["user"]["currency"] == "USD"
        assert "password_hash" not in body["user"]
        assert body["token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200
        assert me.json()["id"] == body["user"]["id"]

    def test_role_in_payload_is_ignored(self, client):
        response = register(client, role="admin")
        assert response.json()["user"]["role"] == "user"

    def test_weak_password_lists_all_problems(self, client):
        response = register(client, password="weak")
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Password does not meet requirements"
        assert len(body["details"]) >= 4

    def test_duplicate_email(self, client):
        assert register(client).status_code == 201
        response = register(client, email="NEW@example.com")
        assert response.status_code == 409
        assert response.json() == {"error": "Email already registered"}

    def test_missing_email(self, client):
        response = client.post("/api/auth/register", json={"password": PASSWORD})
        assert response.status_code == 400
        assert response.json()["error"] == "Email is required"

    def test_full_name_required(self, client):
        response = register(client, full_name="  ")
        assert response.status_code == 400
        assert response.json()["error"] == "Full name is required"

    def test_malformed_json(self, client):
        response = client.post(
            "/api/auth/register",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"


class TestLogin:
    def test_login(self, client, alice):
        response = client.post(
            "/api/auth/login", json={"email": "ALICE@example.com", "password": PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["user"]["id"] == alice.id

    def test_wrong_password(self, client, alice):
        response = client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "Wrong1!pass"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    def test_unknown_email(self, client):
        response = client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": PASSWORD}
        )
        assert response.status_code == 401

    def test_logout(self, client, alice):
        response = client.post("/api/auth/logout", headers=alice.headers)
        assert response.json() == {"message": "Logged out successfully"}


class TestCredentialVerifier:
    def test_missing_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"error": "No token provided"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or expired token"}

    def test_wrong_secret(self, client, alice):
        token = jwt.encode(
            {"sub": alice.id, "email": alice.user.email, "role": "user"},
            "another-secret",
            algorithm="HS256",
        )
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_expired_token(self, client, alice, settings):
        token = create_access_token(alice.user, settings, timedelta(minutes=-1))
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.json() == {"error": "Invalid or expired token"}

    def test_token_without_role(self, client, alice, settings):
        token = jwt.encode(
            {"sub": alice.id, "email": alice.user.email}, settings.secret_key, algorithm="HS256"
        )
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.json() == {"error": "Invalid or expired token"}

    def test_deleted_subject(self, client, alice, admin):
        assert client.delete(f"/api/users/{alice.id}", headers=admin.headers).status_code == 204
        response = client.get("/api/auth/me", headers=alice.headers)
        assert response.status_code == 401
        assert response.json() == {"error": "User not found"}


class TestBootstrapAdmin:
    def test_admin_created_on_startup(self):
        settings = Settings(
            secret_key="s",
            database_url="sqlite://",
            bcrypt_rounds=4,
            log_json=False,
            admin_email="  Root@Example.com ",
            admin_password="Adm1n!Pass",
        )
        app = create_app(settings)
        db = app.state.session_factory()
        try:
            admin = get_user_by_email(db, "root@example.com")
            assert admin is not None
            assert admin.role is Role.ADMIN
            assert admin.full_name == "Admin User"
            # second run leaves the existing user alone
            assert initialize_admin(db, settings) is None
        finally:
            db.close()

    def test_skipped_without_password(self, db):
        incomplete = Settings(secret_key="s", admin_email="root@example.com")
        assert initialize_admin(db, incomplete) is None
        assert get_user_by_email(db, "root@example.com") is None

    def test_skipped_for_invalid_email(self, db):
        invalid = Settings(secret_key="s", admin_email="not-an-email", admin_password="x")
        assert initialize_admin(db, invalid) is None


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}
