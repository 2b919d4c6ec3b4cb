"""
Pizza API - Modular Blueprint Structure

All endpoints are registered under the main api_bp blueprint, which the app
factory mounts at /api.
"""

from flask import Blueprint

# Create main API blueprint
api_bp = Blueprint("pizza_api", __name__)

# Import all sub-blueprints
from pizza_api.routes.api.auth import auth_bp
from pizza_api.routes.api.franchises import franchises_bp
from pizza_api.routes.api.orders import orders_bp
from pizza_api.routes.api.users import users_bp

# Register all sub-blueprints with the main API blueprint
api_bp.register_blueprint(auth_bp)
api_bp.register_blueprint(users_bp)
api_bp.register_blueprint(franchises_bp)
api_bp.register_blueprint(orders_bp)

__all__ = ["api_bp"]
