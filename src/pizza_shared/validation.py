"""
Input validation utilities.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError

from .constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .errors import InvalidInputError


def parse_payload(schema: type[BaseModel], payload: Any):
    """
    Validate a JSON body against ``schema``.

    Raises:
        InvalidInputError: body missing, not an object, or failing the schema
    """
    if not isinstance(payload, dict):
        raise InvalidInputError("request body must be a JSON object")
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise InvalidInputError(
            "invalid request",
            e.errors(include_url=False, include_context=False, include_input=False),
        )


def validate_pagination(page: int | None, limit: int | None, default_limit: int | None = None) -> tuple[int, int]:
    """
    Validate and normalize pagination parameters.

    Returns: (page, limit) tuple with validated values.
    """
    if page is None or page < 1:
        page = 1

    if limit is None or limit < 1:
        limit = default_limit or DEFAULT_PAGE_SIZE
    elif limit > MAX_PAGE_SIZE:
        limit = MAX_PAGE_SIZE

    return page, limit


def name_filter_pattern(name_filter: str | None) -> str | None:
    """
    Translate a user name filter into a SQL LIKE pattern.

    ``*`` is a wildcard; without one the filter matches as a substring.
    ``None``, empty and ``*`` alone mean "no filter".
    """
    if name_filter is None:
        return None
    name_filter = name_filter.strip()
    if not name_filter or name_filter == "*":
        return None
    escaped = name_filter.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    if "*" in escaped:
        return escaped.replace("*", "%")
    return f"%{escaped}%"
