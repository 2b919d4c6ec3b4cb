"""
Domain errors raised by the service layer.

Every error carries the HTTP status and the stable code that the error
handlers render as ``{"code": ..., "message": ...}``.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

# One message for bad credentials and bad tokens alike, so responses never
# reveal whether an email is registered.
UNAUTHORIZED_MESSAGE = "unauthorized"


class ServiceError(Exception):
    """Base class for expected, per-request failures."""

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    code: str = "SYSTEM_001"

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInputError(ServiceError):
    status = HTTPStatus.BAD_REQUEST
    code = "INPUT_001"


class UnauthorizedError(ServiceError):
    status = HTTPStatus.UNAUTHORIZED
    code = "AUTH_001"

    def __init__(self) -> None:
        super().__init__(UNAUTHORIZED_MESSAGE)


class ForbiddenError(ServiceError):
    status = HTTPStatus.FORBIDDEN
    code = "PERM_001"


class NotFoundError(ServiceError):
    status = HTTPStatus.NOT_FOUND
    code = "NOT_FOUND_001"


class ConflictError(ServiceError):
    status = HTTPStatus.CONFLICT
    code = "CONFLICT_001"
