"""
Authorization guard.

Every role assignment is a tagged value ``(role, object_id)``; franchisee
assignments carry the franchise they are scoped to. ``authorize`` is a pure
function over the caller's assignments, the requested action and its target,
so route and service code never branch on roles directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .constants import Roles
from .errors import ForbiddenError, UnauthorizedError


class Action(str, Enum):
    """Operations subject to authorization."""

    CREATE_FRANCHISE = "franchise:create"
    CLOSE_FRANCHISE = "franchise:close"
    VIEW_FRANCHISE = "franchise:view"
    LIST_USER_FRANCHISES = "franchise:list_for_user"
    CREATE_STORE = "store:create"
    READ_USER = "user:read"
    UPDATE_USER = "user:update"
    UPDATE_ROLES = "user:update_roles"
    LIST_USERS = "user:list"
    CREATE_ORDER = "order:create"
    LIST_ORDERS = "order:list"


@dataclass(frozen=True)
class RoleAssignment:
    role: Roles
    object_id: int | None = None


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, detached from any database session."""

    user_id: int
    name: str
    email: str
    roles: frozenset[RoleAssignment] = field(default_factory=frozenset)
    token_id: str | None = None

    def has_role(self, role: Roles, object_id: int | None = None) -> bool:
        return any(
            assignment.role == role
            and (object_id is None or assignment.object_id == object_id)
            for assignment in self.roles
        )

    @property
    def is_admin(self) -> bool:
        return self.has_role(Roles.ADMIN)


@dataclass(frozen=True)
class Target:
    franchise_id: int | None = None
    user_id: int | None = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOWED = Decision(True)

FRANCHISEE_ACTIONS = frozenset({Action.CREATE_STORE, Action.VIEW_FRANCHISE})
DINER_ACTIONS = frozenset({Action.CREATE_ORDER, Action.LIST_ORDERS})
SELF_ACTIONS = frozenset({Action.READ_USER, Action.UPDATE_USER, Action.LIST_USER_FRANCHISES})


def denied(reason: str) -> Decision:
    return Decision(False, reason)


def authorize(principal: Principal, action: Action, target: Target | None = None) -> Decision:
    """Decide whether ``principal`` may perform ``action`` on ``target``."""
    target = target or Target()

    if principal.is_admin:
        return ALLOWED

    if action in SELF_ACTIONS:
        if target.user_id is not None and target.user_id == principal.user_id:
            return ALLOWED
        return denied("only the account owner or an admin may do this")

    if action in FRANCHISEE_ACTIONS:
        if target.franchise_id is not None and principal.has_role(
            Roles.FRANCHISEE, target.franchise_id
        ):
            return ALLOWED
        return denied("requires the franchisee role for this franchise")

    if action in DINER_ACTIONS:
        if not principal.has_role(Roles.DINER):
            return denied("requires the diner role")
        if target.user_id is not None and target.user_id != principal.user_id:
            return denied("diners may only act on their own orders")
        return ALLOWED

    return denied("requires the admin role")


def require(principal: Principal | None, action: Action, target: Target | None = None) -> Principal:
    """
    Enforce ``authorize``.

    Raises:
        UnauthorizedError: no authenticated caller
        ForbiddenError: caller authenticated but not permitted
    """
    if principal is None:
        raise UnauthorizedError()
    decision = authorize(principal, action, target)
    if not decision:
        raise ForbiddenError(decision.reason or "forbidden")
    return principal
