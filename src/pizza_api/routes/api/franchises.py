"""
Franchise and store endpoints.
"""

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from pizza_shared.db import get_session
from pizza_shared.jwt_middleware import get_current_user, jwt_optional, jwt_required
from pizza_shared.services import franchise_service
from pizza_shared.validation import validate_pagination

franchises_bp = Blueprint("pizza_franchises", __name__)


@franchises_bp.get("/franchise")
@jwt_optional
def list_franchises():
    """
    List franchises with their stores.

    Query params: ``name`` (``*`` wildcard), ``page`` (1-based), ``limit``.
    """
    page, limit = validate_pagination(
        request.args.get("page", type=int),
        request.args.get("limit", type=int),
        default_limit=current_app.config.get("FRANCHISE_PAGE_SIZE"),
    )
    with get_session() as db:
        response = franchise_service.list_franchises(
            db, get_current_user(), request.args.get("name"), page, limit
        )
    return jsonify(response), HTTPStatus.OK


@franchises_bp.get("/franchise/<int:user_id>")
@jwt_required
def list_user_franchises(user_id: int):
    with get_session() as db:
        franchises = franchise_service.list_user_franchises(db, get_current_user(), user_id)
    return jsonify(franchises), HTTPStatus.OK


@franchises_bp.post("/franchise")
def create_franchise():
    payload = request.get_json(silent=True)
    with get_session() as db:
        franchise = franchise_service.create_franchise(db, get_current_user(), payload)
    return jsonify(franchise), HTTPStatus.CREATED


@franchises_bp.delete("/franchise/<int:franchise_id>")
def close_franchise(franchise_id: int):
    with get_session() as db:
        response = franchise_service.close_franchise(db, get_current_user(), franchise_id)
    return jsonify(response), HTTPStatus.OK


@franchises_bp.post("/franchise/<int:franchise_id>/store")
def create_store(franchise_id: int):
    payload = request.get_json(silent=True)
    with get_session() as db:
        store = franchise_service.create_store(db, get_current_user(), franchise_id, payload)
    return jsonify(store), HTTPStatus.CREATED
