"""
User endpoints.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from pizza_shared.db import get_session
from pizza_shared.jwt_middleware import get_current_token, get_current_user, jwt_required
from pizza_shared.services import auth_service, user_service
from pizza_shared.validation import validate_pagination

users_bp = Blueprint("pizza_users", __name__)


@users_bp.get("/user/me")
@jwt_required
def who_am_i():
    """Return the authenticated caller's current record."""
    with get_session() as db:
        user = auth_service.who_am_i(db, get_current_user())
    return jsonify(user), HTTPStatus.OK


@users_bp.put("/user/<int:user_id>")
@jwt_required
def update_user(user_id: int):
    payload = request.get_json(silent=True)
    with get_session() as db:
        response = user_service.update_user(
            db, get_current_user(), user_id, payload, token=get_current_token()
        )
    return jsonify(response), HTTPStatus.OK


@users_bp.get("/user")
@jwt_required
def list_users():
    """Admin listing; supports ``page``, ``limit`` and ``name`` query params."""
    page, limit = validate_pagination(
        request.args.get("page", type=int), request.args.get("limit", type=int)
    )
    with get_session() as db:
        response = user_service.list_users(
            db, get_current_user(), request.args.get("name"), page, limit
        )
    return jsonify(response), HTTPStatus.OK
