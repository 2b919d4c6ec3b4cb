"""
Utilities to centralize configuration handling for the pizza service.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_MENU_PATH = str(Path(__file__).resolve().parent / "data" / "menu.json")

PLACEHOLDER_SECRETS = {
    "change-me-please",
    "super-secret-change-me",
    "your-secret-key-here",
}


@dataclass
class AppConfig:
    """Simple container for application level settings."""

    app_name: str
    database_url: str
    secret_key: str
    fulfillment_secret: str
    password_pepper: str
    password_hash_iterations: int
    log_level: str
    debug_mode: bool
    # Sessions; 0 means tokens stay valid until logout.
    session_ttl_hours: int
    # Pagination
    order_page_size: int
    franchise_page_size: int
    # Catalog
    menu_path: str
    # Bootstrap admin
    admin_name: str
    admin_email: str
    admin_password: str
    cors_origins: list[str] = field(default_factory=list)

    def to_flask_config(self) -> dict:
        """Keys copied into ``app.config`` so request code can reach them."""
        return {
            "SECRET_KEY": self.secret_key,
            "FULFILLMENT_SECRET": self.fulfillment_secret,
            "PASSWORD_HASH_SALT": self.password_pepper,
            "PASSWORD_HASH_ITERATIONS": self.password_hash_iterations,
            "SESSION_TTL_HOURS": self.session_ttl_hours,
            "ORDER_PAGE_SIZE": self.order_page_size,
            "FRANCHISE_PAGE_SIZE": self.franchise_page_size,
            "DEBUG_MODE": self.debug_mode,
        }


def _read_env(name: str, default: str | None = None) -> str:
    """
    Internal helper to fetch environment variables with support for defaults.
    """
    value = os.getenv(name)
    if value is None:
        if default is None:
            raise RuntimeError(f"Missing required environment variable '{name}'")
        value = default
    return value


def read_bool(name: str, default: str = "false") -> bool:
    value = _read_env(name, default)
    return value.strip().lower() in {"1", "true", "yes", "on"}


def read_int(name: str, default: str) -> int:
    value = _read_env(name, default)
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(f"{name} must be a valid integer, got: {value}")


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def validate_required_env_vars(skip_in_debug: bool = False) -> None:
    """
    Validate that all required environment variables are set.

    Fails fast during startup rather than encountering errors on the first
    login.

    Args:
        skip_in_debug: If True, skip validation when DEBUG_MODE=true

    Raises:
        RuntimeError: If any required variable is missing or has an invalid value
    """
    if skip_in_debug and read_bool("DEBUG_MODE", "false"):
        return

    errors = []

    secret_key = os.getenv("SECRET_KEY", "")
    if not secret_key or secret_key in PLACEHOLDER_SECRETS:
        errors.append(
            "SECRET_KEY must be configured with a secure random value. "
            'Generate with: python3 -c "import secrets; print(secrets.token_urlsafe(32))"'
        )

    ttl = os.getenv("SESSION_TTL_HOURS", "")
    if ttl:
        try:
            if int(ttl) < 0:
                errors.append(f"SESSION_TTL_HOURS must not be negative, got: {ttl}")
        except ValueError:
            errors.append(f"SESSION_TTL_HOURS must be a valid integer, got: {ttl}")

    if errors:
        error_msg = "\nConfiguration errors - missing or invalid environment variables:\n"
        for error in errors:
            error_msg += f"  - {error}\n"
        raise RuntimeError(error_msg)


def load_config(app_name: str) -> AppConfig:
    """
    Produce an AppConfig instance populated from environment variables.

    Each entry point passes its desired `app_name` to keep logs easy to
    differentiate while still reusing the same config loader.
    """
    secret_key = _read_env("SECRET_KEY", "super-secret-change-me")
    return AppConfig(
        app_name=app_name,
        database_url=_read_env("DATABASE_URL", "sqlite:///pizza.db"),
        secret_key=secret_key,
        fulfillment_secret=_read_env("FULFILLMENT_SECRET", secret_key),
        password_pepper=_read_env("PASSWORD_HASH_SALT", ""),
        password_hash_iterations=read_int("PASSWORD_HASH_ITERATIONS", "260000"),
        log_level=_read_env("LOG_LEVEL", "INFO"),
        debug_mode=read_bool("DEBUG_MODE", "false"),
        session_ttl_hours=read_int("SESSION_TTL_HOURS", "0"),
        order_page_size=read_int("ORDER_PAGE_SIZE", "10"),
        franchise_page_size=read_int("FRANCHISE_PAGE_SIZE", "10"),
        menu_path=_read_env("MENU_PATH", DEFAULT_MENU_PATH),
        admin_name=_read_env("ADMIN_NAME", "Pizza Admin"),
        admin_email=_read_env("ADMIN_EMAIL", ""),
        admin_password=_read_env("ADMIN_PASSWORD", ""),
        cors_origins=_split_csv(_read_env("CORS_ORIGINS", "http://localhost:5173")),
    )
