import json

import pytest

from stockpos.auth.results import AuthError, Err, Ok
from stockpos.rbac import gates
from stockpos.rbac.permissions import (
    Permissions,
    check_permission,
    feature_of,
    is_valid_permission_name,
    permission_matches,
)
from stockpos.rbac.requirements import PermissionRequirement, RoleRequirement
from tests.conftest import bearer, make_request

pytestmark = pytest.mark.unit


# ── Matching ─────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "held, required, expected",
    [
        ("users.view", "users.view", True),
        ("users.view", "users.create", False),
        ("users.*", "users.delete", True),
        ("users.*", "users.assign_roles", True),
        ("roles.*", "users.view", False),
        ("users.*", "users_archive.view", False),
        ("users.view", "users.*", False),
    ],
)
def test_permission_matches(held, required, expected):
    assert permission_matches(held, required) is expected


def test_check_permission_any_held():
    held = {"brands.view", "users.*"}
    assert check_permission(held, "users.delete")
    assert check_permission(held, "brands.view")
    assert not check_permission(held, "brands.delete")
    assert not check_permission(set(), "users.view")
    assert not check_permission(held, "")


@pytest.mark.parametrize(
    "name, valid",
    [
        ("users.view", True),
        ("roles.assign_permissions", True),
        ("brands.*", True),
        ("Users.view", False),
        ("users", False),
        ("users.view.extra", False),
        ("", False),
    ],
)
def test_permission_name_format(name, valid):
    assert is_valid_permission_name(name) is valid


def test_catalog_entries_are_well_formed():
    for entry in Permissions:
        assert is_valid_permission_name(entry.value)
    assert feature_of(Permissions.USERS_ASSIGN_ROLES.value) == "users"


# ── Requirements ─────────────────────────────────────────────────
def _identity(codec, roles=(), permissions=()):
    return codec.verify(codec.issue("u1", roles, permissions)).value


def test_role_requirement_any_of(codec):
    requirement = RoleRequirement.of(["admin", "manager"])
    assert requirement.is_satisfied_by(_identity(codec, roles=["manager"]))
    assert not requirement.is_satisfied_by(_identity(codec, roles=["cashier"]))
    assert not requirement.is_satisfied_by(_identity(codec))


def test_permission_requirement_uses_snapshot(codec):
    requirement = PermissionRequirement("users.view")
    assert requirement.is_satisfied_by(_identity(codec, permissions=["users.*"]))
    assert not requirement.is_satisfied_by(_identity(codec, roles=["admin"]))


# ── Gates ────────────────────────────────────────────────────────
def _body(err: Err) -> tuple[int, dict]:
    response = err.to_response()
    return response.status_code, json.loads(response.body)


def test_authenticate_without_header(codec):
    result = gates.authenticate(make_request(), codec)
    assert result == Err(AuthError.AUTHENTICATION_REQUIRED)
    assert _body(result) == (401, {"success": False, "message": "Authentication required"})


def test_authenticate_with_bad_token(codec):
    result = gates.authenticate(make_request(bearer("garbage")), codec)
    assert _body(result) == (401, {"success": False, "message": "Invalid or expired token"})


def test_require_permission_denies_with_403(codec):
    token = codec.issue("u1", ["cashier"], ["users.view"])
    request = make_request(bearer(token))

    assert isinstance(gates.require_permission(request, codec, "users.view"), Ok)

    denied = gates.require_permission(request, codec, "users.delete")
    assert _body(denied) == (403, {"success": False, "message": "Insufficient permissions"})


def test_require_any_role(codec):
    token = codec.issue("u1", ["manager"], [])
    request = make_request(bearer(token))

    assert isinstance(gates.require_any_role(request, codec, ["admin", "manager"]), Ok)
    assert gates.require_any_role(request, codec, ["admin"]) == Err(
        AuthError.INSUFFICIENT_PERMISSIONS
    )


def test_missing_token_is_401_even_for_role_gate(codec):
    result = gates.require_any_role(make_request(), codec, ["admin"])
    assert result == Err(AuthError.AUTHENTICATION_REQUIRED)


def test_admin_gate_with_mixed_roles(codec):
    both = make_request(bearer(codec.issue("u1", ["admin", "cashier"], [])))
    cashier = make_request(bearer(codec.issue("u2", ["cashier"], [])))

    assert isinstance(gates.require_any_role(both, codec, ["admin"]), Ok)
    assert gates.require_any_role(cashier, codec, ["admin"]) == Err(
        AuthError.INSUFFICIENT_PERMISSIONS
    )


def test_empty_permission_set_fails_permission_gate(codec):
    request = make_request(bearer(codec.issue("u1", ["admin"], [])))
    assert gates.require_permission(request, codec, "users.view") == Err(
        AuthError.INSUFFICIENT_PERMISSIONS
    )
