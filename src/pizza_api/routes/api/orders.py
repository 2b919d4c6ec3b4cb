"""
Menu and order endpoints.
"""

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from pizza_shared.db import get_session
from pizza_shared.jwt_middleware import get_current_user, jwt_required
from pizza_shared.services import order_service
from pizza_shared.services.menu_service import Menu, list_menu
from pizza_shared.validation import validate_pagination

orders_bp = Blueprint("pizza_orders", __name__)


def _menu() -> Menu:
    return current_app.extensions["pizza_menu"]


@orders_bp.get("/order/menu")
def get_menu():
    """The catalog, in menu order. No authentication needed."""
    return jsonify(list_menu(_menu())), HTTPStatus.OK


@orders_bp.get("/order")
@jwt_required
def list_orders():
    """
    Order history of the caller.

    Query params: ``page`` (1-based) and, for admins, ``dinerId``.
    """
    page, limit = validate_pagination(
        request.args.get("page", type=int),
        None,
        default_limit=current_app.config.get("ORDER_PAGE_SIZE"),
    )
    with get_session() as db:
        response = order_service.list_orders(
            db, get_current_user(), request.args.get("dinerId", type=int), page, limit
        )
    return jsonify(response), HTTPStatus.OK


@orders_bp.post("/order")
@jwt_required
def create_order():
    payload = request.get_json(silent=True)
    with get_session() as db:
        response = order_service.create_order(db, _menu(), get_current_user(), payload)
    return jsonify(response), HTTPStatus.OK


@orders_bp.post("/order/verify")
def verify_order():
    """Check a fulfillment token issued with an order."""
    return jsonify(order_service.verify_order(request.get_json(silent=True))), HTTPStatus.OK
