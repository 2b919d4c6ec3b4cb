"""
Application constants and enums.
"""

from enum import Enum


class Roles(str, Enum):
    DINER = "diner"
    ADMIN = "admin"
    FRANCHISEE = "franchisee"


class OrderStatus(str, Enum):
    # Payment and fulfillment transitions belong to the downstream factory.
    CREATED = "created"


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

JWT_ALGORITHM = "HS256"
TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_FULFILLMENT = "fulfillment"
