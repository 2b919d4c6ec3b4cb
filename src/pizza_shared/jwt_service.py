"""
JWT Service - token encoding and decoding for the pizza service.

Two kinds of tokens are minted here:

- access tokens, the bearer credential of a login session. The JWT is only
  the envelope; its ``jti`` must still match a live session row, which is
  what makes logout effective immediately.
- fulfillment tokens, handed back with every order for the downstream
  factory to verify.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from flask import Request, current_app

from .constants import JWT_ALGORITHM, TOKEN_TYPE_ACCESS, TOKEN_TYPE_FULFILLMENT


class JWTError(Exception):
    """Base exception for JWT errors."""

    def __init__(self, message: str, status: int = 401):
        self.message = message
        self.status = status
        super().__init__(message)


class TokenExpiredError(JWTError):
    """Token has expired."""

    def __init__(self):
        super().__init__("Token expired", 401)


class InvalidTokenError(JWTError):
    """Token is invalid or malformed."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, 401)


def _config_value(key: str, default: Any = None) -> Any:
    try:
        value = current_app.config.get(key)
        if value is not None:
            return value
    except RuntimeError:
        pass
    return os.getenv(key, default)


def get_jwt_secret() -> str:
    """Get JWT secret key from config or environment."""
    secret = _config_value("SECRET_KEY")
    if not secret:
        raise RuntimeError("SECRET_KEY must be configured")
    return secret


def get_fulfillment_secret() -> str:
    return _config_value("FULFILLMENT_SECRET") or get_jwt_secret()


def get_session_ttl_hours() -> int:
    return int(_config_value("SESSION_TTL_HOURS", 0) or 0)


def create_access_token(
    user_id: int,
    token_id: str,
    issued_at: datetime,
    expires_at: datetime | None = None,
) -> str:
    """
    Create a JWT access token bound to a session row.

    Args:
        user_id: User database ID
        token_id: Session key stored as the ``jti`` claim
        issued_at: Issue time (UTC)
        expires_at: Optional expiry (UTC); omitted when sessions never expire

    Returns:
        Encoded JWT token string
    """
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "jti": token_id,
        "iat": issued_at,
        "type": TOKEN_TYPE_ACCESS,
    }
    if expires_at is not None:
        payload["exp"] = expires_at

    return jwt.encode(payload, get_jwt_secret(), algorithm=JWT_ALGORITHM)


def session_expiry(issued_at: datetime) -> datetime | None:
    ttl = get_session_ttl_hours()
    if ttl <= 0:
        return None
    return issued_at + timedelta(hours=ttl)


def decode_token(token: str, verify_type: str | None = None) -> dict[str, Any]:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string
        verify_type: Expected token type

    Returns:
        Decoded token payload

    Raises:
        TokenExpiredError: If token has expired
        InvalidTokenError: If token is invalid
    """
    try:
        payload = jwt.decode(token, get_jwt_secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(str(e))

    if verify_type and payload.get("type") != verify_type:
        raise InvalidTokenError(f"Expected {verify_type} token")
    if not payload.get("jti") or not payload.get("sub"):
        raise InvalidTokenError("Token is missing its session claims")
    return payload


def extract_token_from_request(request: Request) -> str | None:
    """
    Extract the bearer token from the Authorization header.

    Args:
        request: Flask request object

    Returns:
        Token string if found, None otherwise
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        return token or None
    return None


def create_fulfillment_token(diner: dict[str, Any], order: dict[str, Any]) -> str:
    """
    Sign an order for the downstream fulfillment collaborator.

    Args:
        diner: ``{id, name, email}`` of the ordering diner
        order: serialized order as returned to the client
    """
    payload = {
        "iat": datetime.now(timezone.utc),
        "type": TOKEN_TYPE_FULFILLMENT,
        "diner": diner,
        "order": order,
    }
    return jwt.encode(payload, get_fulfillment_secret(), algorithm=JWT_ALGORITHM)


def decode_fulfillment_token(token: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, get_fulfillment_secret(), algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(str(e))
    if payload.get("type") != TOKEN_TYPE_FULFILLMENT:
        raise InvalidTokenError(f"Expected {TOKEN_TYPE_FULFILLMENT} token")
    return payload
