"""
Franchise and store registry.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..authorization import Action, Principal, Target, authorize, require
from ..constants import Roles
from ..errors import ConflictError, NotFoundError
from ..logging_config import get_logger
from ..models import Franchise, PendingFranchiseAdmin, Store, User, UserRole
from ..schemas import CreateFranchiseRequest, CreateStoreRequest
from ..serializers import paginated_response, serialize_franchise, serialize_store
from ..validation import name_filter_pattern, parse_payload

logger = get_logger(__name__)


def _franchise_admins(db: Session, franchise_ids: list[int]) -> dict[int, list[User]]:
    """Resolved admins per franchise, in role-grant order."""
    if not franchise_ids:
        return {}
    rows = db.execute(
        select(UserRole.object_id, User)
        .join(User, User.id == UserRole.user_id)
        .where(UserRole.role == Roles.FRANCHISEE.value, UserRole.object_id.in_(franchise_ids))
        .order_by(UserRole.id)
    ).all()
    admins: dict[int, list[User]] = {franchise_id: [] for franchise_id in franchise_ids}
    for franchise_id, user in rows:
        admins[franchise_id].append(user)
    return admins


def _get_franchise(db: Session, franchise_id: int) -> Franchise:
    franchise = db.get(Franchise, franchise_id)
    if franchise is None:
        raise NotFoundError("unknown franchise")
    return franchise


def create_franchise(db: Session, principal: Principal | None, payload: Any) -> dict[str, Any]:
    """
    Create a franchise and designate its admins.

    Admin emails that belong to an existing user grant that user a
    franchisee role scoped to the new franchise; unknown emails are kept as
    placeholders until someone registers or logs in with them.

    Raises:
        UnauthorizedError / ForbiddenError: caller is not a global admin
        InvalidInputError: missing name or malformed email
        ConflictError: a franchise with this name already exists
    """
    require(principal, Action.CREATE_FRANCHISE)
    data = parse_payload(CreateFranchiseRequest, payload)

    exists = db.execute(select(Franchise.id).where(Franchise.name == data.name)).scalar()
    if exists is not None:
        raise ConflictError("franchise name already exists")

    franchise = Franchise(name=data.name)
    db.add(franchise)
    try:
        db.flush()
    except IntegrityError:
        raise ConflictError("franchise name already exists")

    for email in data.admin_emails():
        user = db.execute(select(User).where(User.email == email)).scalars().one_or_none()
        if user is None:
            franchise.pending_admins.append(PendingFranchiseAdmin(email=email))
        elif not user.has_role(Roles.FRANCHISEE, franchise.id):
            user.roles.append(UserRole(role=Roles.FRANCHISEE.value, object_id=franchise.id))
    db.flush()

    logger.info(f"Franchise {franchise.id} created by user {principal.user_id}")
    admins = _franchise_admins(db, [franchise.id])[franchise.id]
    return serialize_franchise(franchise, admins, include_admins=True)


def close_franchise(db: Session, principal: Principal | None, franchise_id: int) -> dict[str, str]:
    """
    Close a franchise: its stores, scoped roles and placeholders go with it.

    Raises:
        UnauthorizedError / ForbiddenError: caller is not a global admin
        NotFoundError: unknown franchise
    """
    require(principal, Action.CLOSE_FRANCHISE, Target(franchise_id=franchise_id))
    franchise = _get_franchise(db, franchise_id)

    db.execute(
        delete(UserRole).where(
            UserRole.role == Roles.FRANCHISEE.value, UserRole.object_id == franchise_id
        )
    )
    db.delete(franchise)
    db.flush()
    logger.info(f"Franchise {franchise_id} closed by user {principal.user_id}")
    return {"message": "franchise deleted"}


def create_store(
    db: Session, principal: Principal | None, franchise_id: int, payload: Any
) -> dict[str, Any]:
    """
    Open a store inside a franchise.

    Raises:
        UnauthorizedError: no session
        ForbiddenError: caller neither admin nor franchisee of this franchise
        NotFoundError: unknown franchise
        InvalidInputError: missing store name
    """
    require(principal, Action.CREATE_STORE, Target(franchise_id=franchise_id))
    franchise = _get_franchise(db, franchise_id)
    data = parse_payload(CreateStoreRequest, payload)

    store = Store(name=data.name, total_revenue=Decimal("0"))
    franchise.stores.append(store)
    db.flush()
    logger.info(f"Store {store.id} created in franchise {franchise_id} by user {principal.user_id}")
    return serialize_store(store, include_revenue=True)


def list_franchises(
    db: Session,
    principal: Principal | None,
    name_filter: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> dict[str, Any]:
    """
    Public franchise listing used by the ordering flow.

    Anonymous callers get names and stores only; ``admins`` is added for the
    franchises the caller may view (all of them for an admin, their own for
    a franchisee).
    """
    query = select(Franchise).order_by(Franchise.id)
    pattern = name_filter_pattern(name_filter)
    if pattern is not None:
        query = query.where(Franchise.name.like(pattern, escape="\\"))

    # One extra row tells us whether another page exists.
    franchises = (
        db.execute(query.offset((page - 1) * limit).limit(limit + 1)).scalars().all()
    )
    more = len(franchises) > limit
    franchises = franchises[:limit]

    visible = [
        franchise.id
        for franchise in franchises
        if principal is not None
        and authorize(principal, Action.VIEW_FRANCHISE, Target(franchise_id=franchise.id))
    ]
    admins = _franchise_admins(db, visible)
    items = [
        serialize_franchise(
            franchise,
            admins.get(franchise.id),
            include_admins=franchise.id in admins,
        )
        for franchise in franchises
    ]
    return paginated_response("franchises", items, page, more)


def list_user_franchises(
    db: Session, principal: Principal | None, user_id: int
) -> list[dict[str, Any]]:
    """
    Franchises administered by ``user_id``, with store revenue.

    Raises:
        UnauthorizedError: no session
        ForbiddenError: neither the user themself nor an admin
    """
    require(principal, Action.LIST_USER_FRANCHISES, Target(user_id=user_id))
    franchise_ids = (
        db.execute(
            select(UserRole.object_id)
            .where(UserRole.user_id == user_id, UserRole.role == Roles.FRANCHISEE.value)
            .order_by(UserRole.object_id)
        )
        .scalars()
        .all()
    )
    if not franchise_ids:
        return []
    franchises = (
        db.execute(select(Franchise).where(Franchise.id.in_(franchise_ids)).order_by(Franchise.id))
        .scalars()
        .all()
    )
    admins = _franchise_admins(db, [franchise.id for franchise in franchises])
    return [
        serialize_franchise(
            franchise, admins[franchise.id], include_admins=True, include_revenue=True
        )
        for franchise in franchises
    ]
