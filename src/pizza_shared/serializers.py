"""
Serializers for consistent API responses.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from .models import Franchise, Order, OrderItem, PendingFranchiseAdmin, Store, User, UserRole


def _safe_float(value) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def money(value: Decimal | None) -> float:
    """Render a Decimal amount as a JSON number, trimmed of float noise."""
    if value is None:
        return 0.0
    return _safe_float(Decimal(value).normalize())


def serialize_role(role: UserRole) -> dict[str, Any]:
    data: dict[str, Any] = {"role": role.role}
    if role.object_id is not None:
        data["objectId"] = role.object_id
    return data


def serialize_user(user: User) -> dict[str, Any]:
    """Serialize User model. The password hash never leaves the service."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "roles": [serialize_role(role) for role in user.roles],
    }


def serialize_user_ref(user: User) -> dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email}


def serialize_pending_admin(pending: PendingFranchiseAdmin) -> dict[str, Any]:
    return {"id": None, "name": None, "email": pending.email, "pending": True}


def serialize_store(store: Store, include_revenue: bool = False) -> dict[str, Any]:
    data: dict[str, Any] = {"id": store.id, "name": store.name}
    if include_revenue:
        data["franchiseId"] = store.franchise_id
        data["totalRevenue"] = money(store.total_revenue)
    return data


def serialize_franchise(
    franchise: Franchise,
    admins: list[User] | None = None,
    include_admins: bool = False,
    include_revenue: bool = False,
) -> dict[str, Any]:
    """
    Serialize Franchise model.

    ``admins`` is only rendered for callers allowed to see it; the public
    ordering flow just needs names and stores.
    """
    data: dict[str, Any] = {
        "id": franchise.id,
        "name": franchise.name,
        "stores": [serialize_store(store, include_revenue) for store in franchise.stores],
    }
    if include_admins:
        data["admins"] = [serialize_user_ref(user) for user in admins or []] + [
            serialize_pending_admin(pending) for pending in franchise.pending_admins
        ]
    return data


def serialize_order_item(item: OrderItem) -> dict[str, Any]:
    return {
        "menuId": item.menu_id,
        "description": item.description,
        "price": money(item.price),
    }


def serialize_order(order: Order) -> dict[str, Any]:
    """Serialize Order model."""
    return {
        "id": order.id,
        "franchiseId": order.franchise_id,
        "storeId": order.store_id,
        "date": order.created_at.isoformat(),
        "status": order.status,
        "items": [serialize_order_item(item) for item in order.items],
        "total": money(order.total),
    }


def paginated_response(key: str, items: list[Any], page: int, more: bool) -> dict[str, Any]:
    """
    Create a standardized paginated response.

    Args:
        key: Name of the collection field (e.g. ``franchises``)
        items: Serialized items for the current page
        page: Current page number (1-indexed)
        more: Whether a further page exists
    """
    return {key: items, "page": page, "more": more}


def error_response(code: str, message: str, details: Any | None = None) -> dict[str, Any]:
    """Create a standardized error response."""
    response: dict[str, Any] = {"code": code, "message": message}
    if details:
        response["details"] = details
    return response
