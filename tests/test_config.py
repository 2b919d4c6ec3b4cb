import pytest

from pizza_shared.config import load_config, validate_required_env_vars


def test_defaults(monkeypatch):
    for name in ("DATABASE_URL", "SESSION_TTL_HOURS", "ORDER_PAGE_SIZE", "FULFILLMENT_SECRET"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SECRET_KEY", "s3cret")

    config = load_config("pizza-test")

    assert config.app_name == "pizza-test"
    assert config.database_url == "sqlite:///pizza.db"
    assert config.session_ttl_hours == 0
    assert config.order_page_size == 10
    assert config.fulfillment_secret == "s3cret"
    assert config.to_flask_config()["SECRET_KEY"] == "s3cret"


def test_cors_origins_are_split(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")

    assert load_config("pizza-test").cors_origins == ["http://a.test", "http://b.test"]


def test_invalid_integer(monkeypatch):
    monkeypatch.setenv("ORDER_PAGE_SIZE", "ten")

    with pytest.raises(RuntimeError):
        load_config("pizza-test")


def test_placeholder_secret_fails_fast(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "super-secret-change-me")
    monkeypatch.setenv("DEBUG_MODE", "false")

    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        validate_required_env_vars()


def test_debug_mode_skips_validation(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.setenv("DEBUG_MODE", "true")

    validate_required_env_vars(skip_in_debug=True)


def test_negative_session_ttl(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "s3cret")
    monkeypatch.setenv("SESSION_TTL_HOURS", "-1")

    with pytest.raises(RuntimeError, match="SESSION_TTL_HOURS"):
        validate_required_env_vars()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_unknown_route_renders_error_body(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert set(response.get_json()) >= {"code", "message"}
