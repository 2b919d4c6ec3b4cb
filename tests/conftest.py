"""
Shared fixtures: an app on a fresh in-memory database per test.
"""

import uuid

import pytest

from pizza_api.app import create_app
from pizza_shared.db import dispose_engine

ADMIN_EMAIL = "a@jwt.com"
ADMIN_PASSWORD = "admin"

TEST_CONFIG = {
    "database_url": "sqlite://",
    "secret_key": "test_secret_key_for_testing_only",
    "fulfillment_secret": "test_fulfillment_secret",
    "password_pepper": "",
    "password_hash_iterations": 1000,
    "log_level": "WARNING",
    "session_ttl_hours": 0,
    "order_page_size": 10,
    "franchise_page_size": 10,
    "admin_name": "常用名字",
    "admin_email": ADMIN_EMAIL,
    "admin_password": ADMIN_PASSWORD,
}


@pytest.fixture
def app():
    """Create test Flask app with in-memory database and a seeded admin."""
    dispose_engine()
    app = create_app(dict(TEST_CONFIG))
    yield app
    dispose_engine()


@pytest.fixture
def client(app):
    return app.test_client()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def unique_email(prefix="diner"):
    return f"{prefix}-{uuid.uuid4().hex[:8]}@test.com"


def register(client, name="pizza diner", email=None, password="diner"):
    email = email or unique_email()
    response = client.post("/api/auth", json={"name": name, "email": email, "password": password})
    assert response.status_code == 200, response.get_json()
    body = response.get_json()
    return body["user"], body["token"]


def login(client, email, password):
    response = client.put("/api/auth", json={"email": email, "password": password})
    assert response.status_code == 200, response.get_json()
    body = response.get_json()
    return body["user"], body["token"]


@pytest.fixture
def admin_token(client):
    _, token = login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    return token


@pytest.fixture
def diner(client):
    """A freshly registered diner as ``(user, token)``."""
    return register(client)


def create_franchise(client, admin_token, name=None, admin_email=None):
    payload = {
        "name": name or f"pizzaPocket-{uuid.uuid4().hex[:6]}",
        "admins": [{"email": admin_email or unique_email("owner")}],
    }
    response = client.post("/api/franchise", json=payload, headers=bearer(admin_token))
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def create_store(client, token, franchise_id, name="SLC"):
    response = client.post(
        f"/api/franchise/{franchise_id}/store", json={"name": name}, headers=bearer(token)
    )
    assert response.status_code == 201, response.get_json()
    return response.get_json()
