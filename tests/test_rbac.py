"""Unit tests for the role gate."""

import pytest

from app.auth.rbac import REQUIRED_ROLES, authorize, check_permission, required_roles_for
from app.core.enums import DenyKind, Role


def test_missing_actor_is_unauthenticated() -> None:
    decision = authorize(None, {Role.ADMIN})
    assert not decision.allowed
    assert decision.kind is DenyKind.UNAUTHENTICATED


def test_role_outside_required_set_is_forbidden() -> None:
    decision = authorize(Role.TEACHER, {Role.ADMIN})
    assert not decision.allowed
    assert decision.kind is DenyKind.FORBIDDEN


def test_role_inside_required_set_is_allowed() -> None:
    decision = authorize(Role.TEACHER, [Role.ADMIN, Role.TEACHER])
    assert decision.allowed
    assert decision.kind is None


@pytest.mark.parametrize("module", ["academic_years", "terms"])
def test_calendar_writes_are_admin_only(module: str) -> None:
    for action in ("create", "update", "delete", "lock", "unlock"):
        assert required_roles_for(module, action) == frozenset({Role.ADMIN})
    assert required_roles_for(module, "read") == frozenset({Role.ADMIN, Role.TEACHER})


def test_access_checks_open_to_every_role() -> None:
    assert REQUIRED_ROLES[("access_checks", "read")] == frozenset(Role)


def test_undeclared_operation_fails_when_route_is_declared() -> None:
    with pytest.raises(LookupError):
        check_permission("attendance", "create")
