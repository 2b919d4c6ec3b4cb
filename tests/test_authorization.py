import pytest

from pizza_shared.authorization import (
    Action,
    Principal,
    RoleAssignment,
    Target,
    authorize,
    require,
)
from pizza_shared.constants import Roles
from pizza_shared.errors import ForbiddenError, UnauthorizedError


def make_principal(user_id, *roles):
    return Principal(
        user_id=user_id,
        name=f"user {user_id}",
        email=f"u{user_id}@test.com",
        roles=frozenset(roles),
    )


ADMIN = make_principal(1, RoleAssignment(Roles.ADMIN))
DINER = make_principal(2, RoleAssignment(Roles.DINER))
FRANCHISEE = make_principal(
    3, RoleAssignment(Roles.DINER), RoleAssignment(Roles.FRANCHISEE, 7)
)


@pytest.mark.parametrize("action", list(Action))
def test_admin_may_do_everything(action):
    assert authorize(ADMIN, action, Target(franchise_id=99, user_id=42))


@pytest.mark.parametrize(
    "action", [Action.CREATE_FRANCHISE, Action.CLOSE_FRANCHISE, Action.LIST_USERS, Action.UPDATE_ROLES]
)
def test_admin_only_actions_denied_to_others(action):
    assert not authorize(DINER, action)
    assert not authorize(FRANCHISEE, action, Target(franchise_id=7))


def test_franchisee_scope_is_checked():
    assert authorize(FRANCHISEE, Action.CREATE_STORE, Target(franchise_id=7))
    decision = authorize(FRANCHISEE, Action.CREATE_STORE, Target(franchise_id=8))
    assert not decision
    assert decision.reason


def test_diner_cannot_create_store():
    assert not authorize(DINER, Action.CREATE_STORE, Target(franchise_id=7))


def test_diner_orders_only_for_self():
    assert authorize(DINER, Action.CREATE_ORDER)
    assert authorize(DINER, Action.LIST_ORDERS, Target(user_id=DINER.user_id))
    assert not authorize(DINER, Action.LIST_ORDERS, Target(user_id=FRANCHISEE.user_id))


def test_user_without_diner_role_cannot_order():
    nobody = make_principal(9)
    assert not authorize(nobody, Action.CREATE_ORDER)


def test_self_actions_need_matching_user():
    assert authorize(DINER, Action.UPDATE_USER, Target(user_id=DINER.user_id))
    assert not authorize(DINER, Action.UPDATE_USER, Target(user_id=ADMIN.user_id))
    assert not authorize(DINER, Action.READ_USER)


def test_require_without_principal_is_unauthorized():
    with pytest.raises(UnauthorizedError):
        require(None, Action.CREATE_ORDER)


def test_require_denied_is_forbidden():
    with pytest.raises(ForbiddenError):
        require(DINER, Action.CREATE_FRANCHISE)


def test_require_returns_principal():
    assert require(FRANCHISEE, Action.VIEW_FRANCHISE, Target(franchise_id=7)) is FRANCHISEE

