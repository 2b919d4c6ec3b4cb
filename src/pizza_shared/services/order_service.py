"""
Domain logic around diner orders.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..authorization import Action, Principal, Target, require
from ..constants import OrderStatus
from ..errors import InvalidInputError, NotFoundError, UnauthorizedError
from ..jwt_service import JWTError, create_fulfillment_token, decode_fulfillment_token
from ..logging_config import LoggerAdapter, get_logger
from ..models import Order, OrderItem, Store
from ..schemas import CreateOrderRequest, VerifyOrderRequest
from ..serializers import paginated_response, serialize_order
from ..validation import parse_payload
from .menu_service import Menu

logger = get_logger(__name__)


def _price_items(menu: Menu, data: CreateOrderRequest) -> tuple[list[OrderItem], Decimal]:
    """Build order lines from current menu prices; the client's prices are ignored."""
    unknown = sorted({item.menu_id for item in data.items if menu.get(item.menu_id) is None})
    if unknown:
        raise InvalidInputError(
            "unknown menu items", [{"menuId": menu_id} for menu_id in unknown]
        )

    lines: list[OrderItem] = []
    total = Decimal("0")
    for requested in data.items:
        menu_item = menu.get(requested.menu_id)
        lines.append(
            OrderItem(
                menu_id=menu_item.id,
                description=menu_item.title,
                price=menu_item.price,
            )
        )
        total += menu_item.price
    return lines, total


def _find_store(db: Session, store_id: int, franchise_id: int | None) -> Store:
    store = db.get(Store, store_id)
    if store is None or (franchise_id is not None and store.franchise_id != franchise_id):
        raise NotFoundError("unknown store")
    return store


def create_order(
    db: Session, menu: Menu, principal: Principal | None, payload: Any
) -> dict[str, Any]:
    """
    Price and record an order, then sign it for fulfillment.

    Everything is validated before the first insert, so a rejected order
    leaves no rows behind and consumes no order id.

    Raises:
        UnauthorizedError: no session
        ForbiddenError: caller is not a diner
        InvalidInputError: empty cart, unknown menu ids or malformed body
        NotFoundError: unknown store
    """
    require(principal, Action.CREATE_ORDER)
    log = LoggerAdapter(logger, {"user_id": principal.user_id})

    data = parse_payload(CreateOrderRequest, payload)
    lines, total = _price_items(menu, data)
    store = _find_store(db, data.store_id, data.franchise_id)

    order = Order(
        diner_id=principal.user_id,
        franchise_id=store.franchise_id,
        store_id=store.id,
        status=OrderStatus.CREATED.value,
        total=total,
        created_at=datetime.now(timezone.utc).replace(tzinfo=None),
        items=lines,
    )
    db.add(order)
    db.flush()

    serialized = serialize_order(order)
    token = create_fulfillment_token(
        {"id": principal.user_id, "name": principal.name, "email": principal.email},
        serialized,
    )
    log.info(f"Order {order.id} created for store {store.id} ({len(lines)} items)")
    return {"order": serialized, "jwt": token}


def list_orders(
    db: Session,
    principal: Principal | None,
    diner_id: int | None = None,
    page: int = 1,
    limit: int = 10,
) -> dict[str, Any]:
    """
    Order history of a diner, oldest first.

    Diners see their own orders; an admin may pass ``diner_id``.

    Raises:
        UnauthorizedError: no session
        ForbiddenError: not a diner, or another diner's history
    """
    if principal is None:
        raise UnauthorizedError()
    diner_id = diner_id if diner_id is not None else principal.user_id
    require(principal, Action.LIST_ORDERS, Target(user_id=diner_id))

    orders = (
        db.execute(
            select(Order)
            .where(Order.diner_id == diner_id)
            .order_by(Order.id)
            .offset((page - 1) * limit)
            .limit(limit + 1)
        )
        .scalars()
        .all()
    )
    more = len(orders) > limit
    response = paginated_response(
        "orders", [serialize_order(order) for order in orders[:limit]], page, more
    )
    response["dinerId"] = diner_id
    return response


def verify_order(payload: Any) -> dict[str, Any]:
    """
    Check a fulfillment token the way the downstream factory does.

    Raises:
        UnauthorizedError: the token is not a valid fulfillment token
    """
    data = parse_payload(VerifyOrderRequest, payload)
    try:
        claims = decode_fulfillment_token(data.jwt)
    except JWTError as e:
        logger.warning(f"Fulfillment token rejected: {e.message}")
        raise UnauthorizedError()
    return {"message": "valid", "payload": {"diner": claims["diner"], "order": claims["order"]}}
