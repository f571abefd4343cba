"""
Shared fixtures: one fresh application per test, backed by its own
in-memory SQLite database.
"""
import itertools
from typing import NamedTuple

import pytest
from fastapi.testclient import TestClient

from financehub.config import Settings
from financehub.data.repositories.user_repository import create_user
from financehub.domain.models import Role, User
from financehub.domain.services.auth_service import (
    create_access_token,
    get_password_hash,
)
from financehub.main import create_app

PASSWORD = "Str0ng!Pass"


class Account(NamedTuple):
    user: User
    token: str

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def settings():
    return Settings(
        secret_key="test-secret-key",
        database_url="sqlite://",
        bcrypt_rounds=4,
        log_level="WARNING",
        log_json=False,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_account(db, settings):
    counter = itertools.count()

    def _make(role: Role = Role.USER, email: str | None = None) -> Account:
        email = email or f"{role.value}{next(counter)}@example.com"
        user = create_user(
            db,
            email,
            get_password_hash(PASSWORD, settings.bcrypt_rounds),
            "Test User",
            "USD",
            role,
        )
        return Account(user, create_access_token(user, settings))

    return _make


@pytest.fixture
def alice(make_account):
    return make_account(Role.USER, "alice@example.com")


@pytest.fixture
def bob(make_account):
    return make_account(Role.USER, "bob@example.com")


@pytest.fixture
def manager(make_account):
    return make_account(Role.MANAGER, "manager@example.com")


@pytest.fixture
def admin(make_account):
    return make_account(Role.ADMIN, "admin@example.com")


def create_category(client, account, name="Rent", type="expense", **extra):
    response = client.post(
        "/api/categories",
        json={"name": name, "type": type, **extra},
        headers=account.headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def system_category_id(client, account, name):
    response = client.get("/api/categories", headers=account.headers)
    for category in response.json():
        if category["is_system"] and category["name"] == name:
            return category["id"]
    raise LookupError(name)


@pytest.fixture
def expense_category(client, alice):
    return create_category(client, alice, "Rent", "expense")


@pytest.fixture
def income_category(client, alice):
    return create_category(client, alice, "Salary", "income")
