"""
Pydantic schemas for request validation.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import Roles

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _not_blank(value: str | None) -> str | None:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    # Emails are stored exactly as given; the address is the account key.
    email: str = Field(..., min_length=3, max_length=320, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

    @field_validator("name", "password")
    @classmethod
    def validate_not_blank(cls, v):
        return _not_blank(v)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RoleAssignmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: Roles
    object_id: int | None = Field(None, alias="objectId", validate_default=True)

    @field_validator("object_id")
    @classmethod
    def validate_scope(cls, v, info):
        role = info.data.get("role")
        if role == Roles.FRANCHISEE and v is None:
            raise ValueError("franchisee roles need an objectId")
        if role in (Roles.DINER, Roles.ADMIN) and v is not None:
            raise ValueError(f"{role.value} roles are not scoped")
        return v


class UpdateUserRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, min_length=3, max_length=320, pattern=EMAIL_PATTERN)
    password: str | None = Field(None, min_length=1)
    roles: list[RoleAssignmentRequest] | None = None

    @field_validator("name", "password")
    @classmethod
    def validate_not_blank(cls, v):
        return _not_blank(v)


class AdminRef(BaseModel):
    email: str = Field(..., min_length=3, max_length=320, pattern=EMAIL_PATTERN)


class CreateFranchiseRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    admin_email: str | None = Field(
        None, alias="adminEmail", min_length=3, max_length=320, pattern=EMAIL_PATTERN
    )
    admins: list[AdminRef] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name")
    @classmethod
    def validate_not_blank(cls, v):
        return _not_blank(v).strip()

    @model_validator(mode="after")
    def validate_has_admin(self):
        if not self.admin_email and not self.admins:
            raise ValueError("a franchise needs at least one admin email")
        return self

    def admin_emails(self) -> list[str]:
        """Admins named either as ``adminEmail`` or as ``admins: [{email}]``."""
        emails = [ref.email for ref in self.admins]
        if self.admin_email:
            emails.insert(0, self.admin_email)
        return list(dict.fromkeys(emails))


class CreateStoreRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def validate_not_blank(cls, v):
        return _not_blank(v).strip()


class OrderItemRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    menu_id: int = Field(..., alias="menuId")
    # Client-sent description and price are informational; the menu decides.
    description: str | None = None
    price: float | None = None


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    store_id: int = Field(..., alias="storeId")
    franchise_id: int | None = Field(None, alias="franchiseId")
    items: list[OrderItemRequest] = Field(..., min_length=1)


class VerifyOrderRequest(BaseModel):
    jwt: str = Field(..., min_length=1)
