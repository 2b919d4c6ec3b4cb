"""
Centralized error handlers for the Flask application.
"""

from http import HTTPStatus

from flask import Flask, jsonify
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .errors import InvalidInputError, ServiceError, UnauthorizedError
from .logging_config import get_logger
from .serializers import error_response

logger = get_logger(__name__)


def register_error_handlers(app: Flask) -> None:
    """
    Register centralized error handlers for the Flask app.

    Every failure is rendered as ``{"code", "message"}`` JSON.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(e: ServiceError):
        """Handle expected per-request failures raised by the services."""
        if isinstance(e, UnauthorizedError):
            logger.info(f"Unauthorized request: {e.code}")
        else:
            logger.warning(f"{type(e).__name__}: {e.message}")
        return jsonify(error_response(e.code, e.message, e.details)), e.status

    @app.errorhandler(PydanticValidationError)
    def handle_pydantic_validation_error(e: PydanticValidationError):
        """Handle Pydantic validation errors."""
        logger.warning(f"Pydantic validation error: {e}")
        return jsonify(
            error_response(
                InvalidInputError.code,
                "invalid request",
                e.errors(include_url=False, include_context=False, include_input=False),
            )
        ), HTTPStatus.BAD_REQUEST

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e: SQLAlchemyError):
        """Handle database errors."""
        logger.error(f"Database error: {e}", exc_info=True)
        return jsonify(
            error_response("SYSTEM_001", "database error")
        ), HTTPStatus.INTERNAL_SERVER_ERROR

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Handle HTTP exceptions from Werkzeug (404 routes, 405, bad JSON)."""
        logger.warning(f"HTTP exception {e.code}: {e.description}")
        code = InvalidInputError.code if e.code == HTTPStatus.BAD_REQUEST else f"HTTP_{e.code}"
        return jsonify(error_response(code, e.description or e.name)), e.code

    @app.errorhandler(Exception)
    def handle_generic_exception(e: Exception):
        """Handle any unhandled exceptions."""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify(
            error_response("SYSTEM_001", "internal server error")
        ), HTTPStatus.INTERNAL_SERVER_ERROR
