"""
JWT Middleware for Flask.

Resolves the bearer token on every request and injects the caller into
``g.current_user``. A token is only honoured while its session row exists,
so a logout is visible to the very next request.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING

from flask import g, request

from .authorization import Principal
from .db import get_session
from .errors import UnauthorizedError
from .jwt_service import (
    InvalidTokenError,
    TokenExpiredError,
    extract_token_from_request,
)
from .services.auth_service import resolve_session

if TYPE_CHECKING:
    from flask import Flask

logger = logging.getLogger(__name__)


def init_jwt_middleware(app: Flask) -> None:
    """
    Initialize JWT middleware for a Flask app.

    Sets up before_request handler to:
    1. Extract the bearer token from the request
    2. Validate it against the session table
    3. Store the caller in g.current_user

    Args:
        app: Flask application instance
    """

    @app.before_request
    def load_jwt_user():
        """Load the caller from the bearer token into Flask g object."""
        g.current_user = None
        g.jwt_token = None

        token = extract_token_from_request(request)
        if not token:
            return

        try:
            with get_session() as db:
                principal = resolve_session(db, token)
        except TokenExpiredError:
            logger.debug(f"Expired token on {request.path}")
            return
        except InvalidTokenError as e:
            logger.warning(f"Invalid token on {request.path}: {e}")
            return

        if principal is None:
            logger.info(f"Revoked or unknown session on {request.path}")
            return

        g.current_user = principal
        g.jwt_token = token


def get_current_user() -> Principal | None:
    """
    Get current authenticated caller from request context.

    Returns:
        Principal if authenticated, None otherwise
    """
    return getattr(g, "current_user", None)


def get_current_token() -> str | None:
    return getattr(g, "jwt_token", None)


def jwt_required(f):
    """
    Decorator to require a valid session for a route.

    Raises UnauthorizedError (401) if no valid token is present.
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if get_current_user() is None:
            raise UnauthorizedError()
        return f(*args, **kwargs)

    return decorated_function


def jwt_optional(f):
    """
    Decorator that allows a token but doesn't require it.

    g.current_user is already populated by the middleware, or None.
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        return f(*args, **kwargs)

    return decorated_function
