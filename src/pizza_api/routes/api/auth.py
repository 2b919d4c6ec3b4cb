"""
Authentication endpoints: register, login and logout.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from pizza_shared.db import get_session
from pizza_shared.jwt_middleware import get_current_user, jwt_required
from pizza_shared.services import auth_service

auth_bp = Blueprint("pizza_auth", __name__)


@auth_bp.post("/auth")
def register_or_login():
    """
    Register a diner, or log in when no ``name`` is given.

    Both answer ``{user, token}``.
    """
    payload = request.get_json(silent=True)
    with get_session() as db:
        if isinstance(payload, dict) and "name" in payload:
            response = auth_service.register(db, payload)
        else:
            response = auth_service.login(db, payload)
    return jsonify(response), HTTPStatus.OK


@auth_bp.put("/auth")
def login():
    payload = request.get_json(silent=True)
    with get_session() as db:
        response = auth_service.login(db, payload)
    return jsonify(response), HTTPStatus.OK


@auth_bp.delete("/auth")
@jwt_required
def logout():
    with get_session() as db:
        response = auth_service.logout(db, get_current_user())
    return jsonify(response), HTTPStatus.OK
