"""
Authentication Service - registration, login, logout and session lookup.

Sessions are rows in ``pizza_auth_sessions`` keyed by the ``jti`` of the
bearer JWT. Creating a row is the only way to mint a usable token and
deleting it is the only way to revoke one.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..authorization import Action, Principal, RoleAssignment, Target, require
from ..constants import Roles, TOKEN_TYPE_ACCESS
from ..errors import ConflictError, UnauthorizedError
from ..jwt_service import create_access_token, decode_token, session_expiry
from ..logging_config import get_logger
from ..models import AuthSession, PendingFranchiseAdmin, User, UserRole
from ..schemas import LoginRequest, RegisterRequest
from ..security import get_hash_iterations, hash_password, new_token_id, verify_password
from ..serializers import serialize_user
from ..validation import parse_payload

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@lru_cache(maxsize=4)
def _dummy_hash(iterations: int) -> str:
    # Keyed by iteration count so unknown-email logins cost the same as real ones.
    return hash_password(secrets.token_hex(8))


def to_principal(user: User, token_id: str | None = None) -> Principal:
    """Detach the fields the guard needs from an ORM user."""
    return Principal(
        user_id=user.id,
        name=user.name,
        email=user.email,
        roles=frozenset(
            RoleAssignment(Roles(role.role), role.object_id) for role in user.roles
        ),
        token_id=token_id,
    )


def issue_session(db: Session, user: User) -> str:
    """Create a session row for ``user`` and return its bearer token."""
    now = _utcnow()
    expires_at = session_expiry(now)
    token_id = new_token_id()
    db.add(
        AuthSession(
            token_id=token_id,
            user_id=user.id,
            issued_at=now.replace(tzinfo=None),
            expires_at=expires_at.replace(tzinfo=None) if expires_at else None,
        )
    )
    db.flush()
    return create_access_token(user.id, token_id, now, expires_at)


def resolve_pending_admins(db: Session, user: User) -> None:
    """Turn franchise-admin placeholders for this email into scoped roles."""
    pending = (
        db.execute(select(PendingFranchiseAdmin).where(PendingFranchiseAdmin.email == user.email))
        .scalars()
        .all()
    )
    for placeholder in pending:
        if not user.has_role(Roles.FRANCHISEE, placeholder.franchise_id):
            user.roles.append(
                UserRole(role=Roles.FRANCHISEE.value, object_id=placeholder.franchise_id)
            )
        logger.info(
            f"Resolved pending franchise admin: user {user.id} -> franchise {placeholder.franchise_id}"
        )
        db.delete(placeholder)
    if pending:
        db.flush()


def register(db: Session, payload: Any) -> dict[str, Any]:
    """
    Register a diner and open a session for them.

    Raises:
        InvalidInputError: missing or malformed name, email or password
        ConflictError: the email is already registered
    """
    data = parse_payload(RegisterRequest, payload)

    exists = db.execute(select(User.id).where(User.email == data.email)).scalar()
    if exists is not None:
        raise ConflictError("email already registered")

    user = User(
        name=data.name.strip(),
        email=data.email,
        password_hash=hash_password(data.password),
    )
    user.roles.append(UserRole(role=Roles.DINER.value))
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email.
        raise ConflictError("email already registered")

    resolve_pending_admins(db, user)
    token = issue_session(db, user)
    logger.info(f"Registered user {user.id}")
    return {"user": serialize_user(user), "token": token}


def login(db: Session, payload: Any) -> dict[str, Any]:
    """
    Authenticate by email and password and open a fresh session.

    Raises:
        UnauthorizedError: unknown email or wrong password, indistinguishably
    """
    data = parse_payload(LoginRequest, payload)

    user = db.execute(select(User).where(User.email == data.email)).scalars().one_or_none()
    if user is None:
        verify_password(data.password, _dummy_hash(get_hash_iterations()))
        logger.warning("Login failed")
        raise UnauthorizedError()
    if not verify_password(data.password, user.password_hash):
        logger.warning("Login failed")
        raise UnauthorizedError()

    resolve_pending_admins(db, user)
    token = issue_session(db, user)
    logger.info(f"Login successful: user {user.id}")
    return {"user": serialize_user(user), "token": token}


def logout(db: Session, principal: Principal) -> dict[str, str]:
    """
    Revoke the caller's session.

    Raises:
        UnauthorizedError: the session no longer exists
    """
    result = db.execute(delete(AuthSession).where(AuthSession.token_id == principal.token_id))
    if result.rowcount == 0:
        raise UnauthorizedError()
    logger.info(f"Logout: user {principal.user_id}")
    return {"message": "logout successful"}


def resolve_session(db: Session, token: str) -> Principal | None:
    """
    Map a bearer token to its caller.

    Returns None when the token's session was revoked, expired or never
    existed; raises the jwt_service errors when the token itself is bad.
    """
    payload = decode_token(token, verify_type=TOKEN_TYPE_ACCESS)
    session_row = db.get(AuthSession, payload["jti"])
    if session_row is None or str(session_row.user_id) != str(payload["sub"]):
        return None
    if session_row.expires_at is not None and session_row.expires_at <= _utcnow().replace(
        tzinfo=None
    ):
        return None
    return to_principal(session_row.user, session_row.token_id)


def who_am_i(db: Session, principal: Principal) -> dict[str, Any]:
    """Current record of the caller; roles reflect any later promotion."""
    require(principal, Action.READ_USER, Target(user_id=principal.user_id if principal else None))
    user = db.get(User, principal.user_id)
    if user is None:
        raise UnauthorizedError()
    return serialize_user(user)
