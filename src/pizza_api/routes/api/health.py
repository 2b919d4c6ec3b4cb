"""
Health check endpoint.
"""

from http import HTTPStatus

from flask import Blueprint, jsonify
from sqlalchemy import text

from pizza_shared.db import get_session

health_bp = Blueprint("pizza_health", __name__)


@health_bp.get("/health")
def healthcheck():
    """Confirm the process is up and the database answers."""
    with get_session() as db:
        db.execute(text("SELECT 1"))
    return jsonify({"status": "ok", "service": "pizza-api"}), HTTPStatus.OK
