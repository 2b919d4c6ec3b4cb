"""
User profile maintenance.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..authorization import Action, Principal, Target, require
from ..constants import Roles
from ..errors import ConflictError, NotFoundError
from ..logging_config import get_logger
from ..models import Franchise, User, UserRole
from ..schemas import UpdateUserRequest
from ..security import hash_password
from ..serializers import paginated_response, serialize_user
from ..validation import name_filter_pattern, parse_payload

logger = get_logger(__name__)


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("unknown user")
    return user


def update_user(
    db: Session,
    principal: Principal | None,
    user_id: int,
    payload: Any,
    token: str | None = None,
) -> dict[str, Any]:
    """
    Update name, email, password and (admins only) role assignments.

    The caller keeps their current session; ``token`` is echoed back so
    clients can treat the response like a login.

    Raises:
        UnauthorizedError: no session
        ForbiddenError: not the account owner, or a non-admin touching roles
        NotFoundError: unknown user
        ConflictError: the new email belongs to someone else
    """
    require(principal, Action.UPDATE_USER, Target(user_id=user_id))
    data = parse_payload(UpdateUserRequest, payload)
    if data.roles is not None:
        require(principal, Action.UPDATE_ROLES, Target(user_id=user_id))

    user = _get_user(db, user_id)

    if data.email is not None and data.email != user.email:
        taken = db.execute(
            select(User.id).where(User.email == data.email, User.id != user.id)
        ).scalar()
        if taken is not None:
            raise ConflictError("email already registered")
        user.email = data.email
    if data.name is not None:
        user.name = data.name.strip()
    if data.password is not None:
        user.password_hash = hash_password(data.password)
    if data.roles is not None:
        wanted = list(dict.fromkeys((r.role.value, r.object_id) for r in data.roles))
        for role, object_id in wanted:
            if role == Roles.FRANCHISEE.value and db.get(Franchise, object_id) is None:
                raise NotFoundError(f"unknown franchise {object_id}")
        user.roles.clear()
        # Removed rows must be gone before re-inserting the same (role, objectId).
        db.flush()
        for role, object_id in wanted:
            user.roles.append(UserRole(role=role, object_id=object_id))

    try:
        db.flush()
    except IntegrityError:
        raise ConflictError("email already registered")

    logger.info(f"User {user.id} updated by user {principal.user_id}")
    return {"user": serialize_user(user), "token": token}


def list_users(
    db: Session,
    principal: Principal | None,
    name_filter: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> dict[str, Any]:
    """Admin listing of registered users, optionally filtered by name."""
    require(principal, Action.LIST_USERS)

    query = select(User).order_by(User.id)
    pattern = name_filter_pattern(name_filter)
    if pattern is not None:
        query = query.where(User.name.like(pattern, escape="\\"))

    users = db.execute(query.offset((page - 1) * limit).limit(limit + 1)).scalars().all()
    more = len(users) > limit
    return paginated_response("users", [serialize_user(user) for user in users[:limit]], page, more)
