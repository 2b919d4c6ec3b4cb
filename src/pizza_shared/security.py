"""
Security helpers for hashing credentials and minting opaque identifiers.
"""

from __future__ import annotations

import hashlib
import os
import secrets

from flask import current_app

PBKDF2_ITERATIONS = 260_000
HASH_SCHEME = "pbkdf2_sha256"


def _get_pepper() -> str:
    """Application-wide pepper mixed into every password hash."""
    try:
        return current_app.config.get("PASSWORD_HASH_SALT") or ""
    except RuntimeError:
        return os.getenv("PASSWORD_HASH_SALT", "")


def get_hash_iterations() -> int:
    try:
        return int(current_app.config.get("PASSWORD_HASH_ITERATIONS", PBKDF2_ITERATIONS))
    except RuntimeError:
        return int(os.getenv("PASSWORD_HASH_ITERATIONS", str(PBKDF2_ITERATIONS)))


def _derive(password: str, salt: str, iterations: int) -> str:
    payload = f"{password}:{_get_pepper()}".encode("utf-8")
    digest = hashlib.pbkdf2_hmac("sha256", payload, salt.encode("utf-8"), iterations)
    return digest.hex()


def hash_password(password: str) -> str:
    """
    Hash a password with a per-user random salt.

    The stored value is ``scheme$iterations$salt$digest`` so the iteration
    count can be raised later without invalidating existing hashes.
    """
    iterations = get_hash_iterations()
    salt = secrets.token_hex(16)
    digest = _derive(password, salt, iterations)
    return f"{HASH_SCHEME}${iterations}${salt}${digest}"


def verify_password(password: str | None, stored_hash: str | None) -> bool:
    """
    Compare a candidate password against the stored hash.
    """
    if not stored_hash or password is None:
        return False
    try:
        scheme, iterations, salt, digest = stored_hash.split("$", 3)
    except ValueError:
        return False
    if scheme != HASH_SCHEME:
        return False
    candidate = _derive(password, salt, int(iterations))
    return secrets.compare_digest(candidate, digest)


def new_token_id() -> str:
    """Unguessable identifier used as a session key (JWT ``jti``)."""
    return secrets.token_urlsafe(24)
