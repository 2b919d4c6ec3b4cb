from datetime import datetime

import jwt
import pytest
from sqlalchemy import update

from conftest import (
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    TEST_CONFIG,
    bearer,
    login,
    register,
    unique_email,
)
from pizza_api.app import create_app
from pizza_shared.db import dispose_engine, get_session
from pizza_shared.errors import ConflictError
from pizza_shared.models import AuthSession, User
from pizza_shared.services import auth_service


def test_register_returns_diner_and_token(client):
    email = unique_email()
    user, token = register(client, name="pizza diner", email=email)

    assert user["email"] == email
    assert user["name"] == "pizza diner"
    assert user["roles"] == [{"role": "diner"}]
    assert "password" not in user
    assert token


def test_register_missing_fields(client):
    response = client.post("/api/auth", json={"name": "x", "email": unique_email()})

    assert response.status_code == 400
    assert response.get_json()["code"] == "INPUT_001"


def test_register_malformed_email(client):
    response = client.post("/api/auth", json={"name": "x", "email": "nope", "password": "p"})

    assert response.status_code == 400


def test_duplicate_registration_conflicts_and_keeps_first_session(client):
    email = unique_email()
    _, token = register(client, email=email)

    response = client.post("/api/auth", json={"name": "other", "email": email, "password": "x"})

    assert response.status_code == 409
    assert response.get_json()["code"] == "CONFLICT_001"
    assert client.get("/api/user/me", headers=bearer(token)).status_code == 200


def test_login_with_put(client):
    email = unique_email()
    register(client, email=email, password="secret")

    user, token = login(client, email, "secret")

    assert user["email"] == email
    assert token


def test_post_without_name_logs_in(client):
    response = client.post("/api/auth", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})

    assert response.status_code == 200
    assert {"role": "admin"} in response.get_json()["user"]["roles"]


def test_bad_credentials_are_indistinguishable(client):
    email = unique_email()
    register(client, email=email, password="secret")

    wrong_password = client.put("/api/auth", json={"email": email, "password": "nope"})
    unknown_email = client.put("/api/auth", json={"email": unique_email(), "password": "nope"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.get_json() == unknown_email.get_json()
    assert wrong_password.get_json() == {"code": "AUTH_001", "message": "unauthorized"}


def test_each_login_opens_a_separate_session(client):
    email = unique_email()
    _, first = register(client, email=email, password="secret")
    _, second = login(client, email, "secret")

    assert first != second
    assert client.delete("/api/auth", headers=bearer(first)).status_code == 200
    assert client.get("/api/user/me", headers=bearer(first)).status_code == 401
    assert client.get("/api/user/me", headers=bearer(second)).status_code == 200


def test_logout_revokes_token(client, diner):
    _, token = diner

    response = client.delete("/api/auth", headers=bearer(token))
    assert response.status_code == 200
    assert response.get_json() == {"message": "logout successful"}

    assert client.get("/api/user/me", headers=bearer(token)).status_code == 401
    assert client.delete("/api/auth", headers=bearer(token)).status_code == 401


def test_logout_without_token(client):
    response = client.delete("/api/auth")

    assert response.status_code == 401


def test_garbage_token_is_unauthorized(client):
    response = client.get("/api/user/me", headers=bearer("not-a-jwt"))

    assert response.status_code == 401
    assert response.get_json()["message"] == "unauthorized"


def test_who_am_i_is_stable(client, diner):
    user, token = diner

    first = client.get("/api/user/me", headers=bearer(token)).get_json()
    second = client.get("/api/user/me", headers=bearer(token)).get_json()

    assert first == second == user


def test_pending_franchise_admin_resolved_on_register(client, admin_token):
    email = unique_email("owner")
    franchise = client.post(
        "/api/franchise",
        json={"name": "pending pizza", "admins": [{"email": email}]},
        headers=bearer(admin_token),
    ).get_json()
    assert franchise["admins"] == [{"id": None, "name": None, "email": email, "pending": True}]

    user, _ = register(client, email=email)

    assert {"role": "franchisee", "objectId": franchise["id"]} in user["roles"]
    listing = client.get("/api/franchise", headers=bearer(admin_token)).get_json()
    admins = next(f for f in listing["franchises"] if f["id"] == franchise["id"])["admins"]
    assert admins == [{"id": user["id"], "name": user["name"], "email": email}]


def test_rejected_input_is_not_echoed(client):
    response = client.post(
        "/api/auth",
        json={"name": "x", "email": "not-an-email", "password": "hunter2-secret"},
    )

    assert response.status_code == 400
    assert all("input" not in error for error in response.get_json()["details"])
    assert b"not-an-email" not in response.data
    assert b"hunter2-secret" not in response.data


def test_concurrent_registration_of_same_email(app, client):
    email = unique_email("race")

    # The other registration is still pending when the email check runs.
    with pytest.raises(ConflictError):
        with app.app_context(), get_session() as db:
            db.add(User(name="first", email=email, password_hash="x"))
            auth_service.register(db, {"name": "second", "email": email, "password": "pw"})

    # Both inserts were rolled back: one registration now succeeds, the next conflicts.
    register(client, email=email)
    duplicate = client.post("/api/auth", json={"name": "third", "email": email, "password": "pw"})
    assert duplicate.status_code == 409


@pytest.fixture
def ttl_client():
    dispose_engine()
    app = create_app(dict(TEST_CONFIG, session_ttl_hours=1))
    yield app, app.test_client()
    dispose_engine()


def test_sessions_expire_with_ttl(ttl_client):
    app, client = ttl_client
    _, token = register(client)

    claims = jwt.decode(token, options={"verify_signature": False})
    assert claims["exp"] - claims["iat"] == 3600
    assert client.get("/api/user/me", headers=bearer(token)).status_code == 200

    with app.app_context(), get_session() as db:
        db.execute(
            update(AuthSession)
            .where(AuthSession.token_id == claims["jti"])
            .values(expires_at=datetime(2000, 1, 1))
        )

    response = client.get("/api/user/me", headers=bearer(token))
    assert response.status_code == 401
    assert response.get_json()["message"] == "unauthorized"
