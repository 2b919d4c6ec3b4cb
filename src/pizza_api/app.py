"""
Factory for the Pizza API Service (REST).

Every endpoint lives under /api and authenticates with bearer tokens backed
by server-side session rows.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from flask import Flask
from flask_cors import CORS

from pizza_api.routes.api import api_bp
from pizza_api.routes.api.health import health_bp
from pizza_shared.config import load_config, validate_required_env_vars
from pizza_shared.db import get_session, init_db, init_engine
from pizza_shared.error_handlers import register_error_handlers
from pizza_shared.jwt_middleware import init_jwt_middleware
from pizza_shared.logging_config import configure_logging
from pizza_shared.models import Base
from pizza_shared.services.menu_service import Menu
from pizza_shared.services.seed_service import ensure_admin

MENU_EXTENSION = "pizza_menu"


def create_app(test_config: dict[str, Any] | None = None) -> Flask:
    """
    Build the API application.

    ``test_config`` overrides fields of the environment-derived AppConfig
    (e.g. ``database_url``) and skips the production secret checks.
    """
    config = load_config("pizza-api")
    if test_config:
        config = dataclasses.replace(config, **test_config)
    else:
        validate_required_env_vars(skip_in_debug=True)

    configure_logging(config.app_name, config.log_level)

    app = Flask(__name__)
    app.config.update(config.to_flask_config())
    app.config["APP_NAME"] = "Pizza API"
    app.config["TESTING"] = bool(test_config)
    app.config["DEBUG"] = config.debug_mode

    # Database
    init_engine(config)
    init_db(Base.metadata)

    # Catalog is read once and shared by every request.
    app.extensions[MENU_EXTENSION] = Menu.load(config.menu_path)

    if config.admin_email and config.admin_password:
        with app.app_context(), get_session() as db:
            ensure_admin(db, config.admin_name, config.admin_email, config.admin_password)

    # Initialize JWT middleware
    init_jwt_middleware(app)

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(health_bp)

    register_error_handlers(app)

    CORS(app, resources={r"/api/*": {"origins": config.cors_origins}})

    app.logger.info(f"{config.app_name} ready with {len(app.extensions[MENU_EXTENSION])} menu items")
    return app
