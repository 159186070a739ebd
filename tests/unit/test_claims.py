import pytest
from bson import ObjectId

from stockpos.auth.claims import ClaimsAssembler
from stockpos.store import PermissionRepository, RoleRepository
from tests.conftest import create_permission, create_role, create_user

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


async def test_union_of_role_permissions_without_duplicates(db):
    view = await create_permission(db, "users.view")
    create = await create_permission(db, "users.create")
    brands = await create_permission(db, "brands.view")
    manager = await create_role(db, "manager", [view, create])
    cashier = await create_role(db, "cashier", [view, brands])
    user = await create_user(db, "m@example.com", [manager, cashier])

    claims = await ClaimsAssembler(db).assemble(user)

    assert claims.role_names == {"manager", "cashier"}
    assert claims.permission_names == {"users.view", "users.create", "brands.view"}
    assert claims.skipped_roles == 0
    assert claims.skipped_permissions == 0


async def test_user_without_roles_has_empty_claims(db):
    user = await create_user(db, "nobody@example.com", [])
    claims = await ClaimsAssembler(db).assemble(user)
    assert claims.role_names == frozenset()
    assert claims.permission_names == frozenset()


async def test_inactive_role_contributes_nothing(db):
    view = await create_permission(db, "users.view")
    delete = await create_permission(db, "users.delete")
    active = await create_role(db, "viewer", [view])
    retired = await create_role(db, "janitor", [delete], is_active=False)
    user = await create_user(db, "u@example.com", [active, retired])

    assembler = ClaimsAssembler(db)
    claims = await assembler.assemble(user)

    assert claims.role_names == {"viewer"}
    assert claims.permission_names == {"users.view"}
    assert claims.inactive_roles == 1
    assert await assembler.resolve_role_names(user) == {"viewer"}
    assert await assembler.resolve_effective_permissions(user) == {"users.view"}


async def test_dangling_references_are_skipped(db):
    view = await create_permission(db, "users.view")
    doomed_perm = await create_permission(db, "users.delete")
    role = await create_role(db, "manager", [view, doomed_perm])
    doomed_role = await create_role(db, "temp", [view])
    user = await create_user(db, "u@example.com", [role, doomed_role])
    user["roles"].append(ObjectId())

    await PermissionRepository(db).delete(doomed_perm["_id"])
    await RoleRepository(db).delete(doomed_role["_id"])

    claims = await ClaimsAssembler(db).assemble(user)

    assert claims.role_names == {"manager"}
    assert claims.permission_names == {"users.view"}
    assert claims.skipped_roles == 2
    assert claims.skipped_permissions == 1


async def test_wildcard_and_concrete_from_different_roles_are_both_kept(db):
    exact = await create_permission(db, "brands.view")
    wildcard = await create_permission(db, "brands.*")
    viewer = await create_role(db, "brand-viewer", [exact])
    manager = await create_role(db, "brand-manager", [wildcard])
    user = await create_user(db, "b@example.com", [viewer, manager])

    claims = await ClaimsAssembler(db).assemble(user)

    assert claims.role_names == {"brand-viewer", "brand-manager"}
    assert claims.permission_names == {"brands.view", "brands.*"}
