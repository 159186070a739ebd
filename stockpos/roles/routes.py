from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from stockpos.config import get_database
from stockpos.rbac.decorators import require_any_role, require_permission
from stockpos.rbac.permissions import ADMIN_ROLE, Permissions
from stockpos.utils import pagination_meta, success_response
from .schemas import AssignPermissionsRequest, CreateRoleRequest, UpdateRoleRequest
from .service import RoleService

roles_router = APIRouter()


@roles_router.get("")
@require_any_role(ADMIN_ROLE)
async def list_roles(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = RoleService(db)
    roles, total = await svc.list_roles(page=page, limit=limit, search=search)
    return success_response(
        data={"roles": roles, "pagination": pagination_meta(page, limit, total)}
    )


@roles_router.post("")
@require_any_role(ADMIN_ROLE)
async def create_role(
    request: Request,
    body: CreateRoleRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = RoleService(db)
    role = await svc.create_role(body.model_dump())
    return success_response(data={"role": role}, message="Role created successfully", code=201)


@roles_router.get("/{role_id}")
@require_permission(Permissions.ROLES_VIEW)
async def get_role(
    request: Request,
    role_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = RoleService(db)
    return success_response(data={"role": await svc.get_role(role_id)})


@roles_router.put("/{role_id}")
@require_any_role(ADMIN_ROLE)
async def update_role(
    request: Request,
    role_id: str,
    body: UpdateRoleRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = RoleService(db)
    role = await svc.update_role(role_id, body.model_dump(exclude_unset=True))
    return success_response(data={"role": role}, message="Role updated successfully")


@roles_router.delete("/{role_id}")
@require_any_role(ADMIN_ROLE)
async def delete_role(
    request: Request,
    role_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = RoleService(db)
    await svc.delete_role(role_id)
    return success_response(message="Role deleted successfully")


@roles_router.put("/{role_id}/permissions")
@require_permission(Permissions.ROLES_ASSIGN_PERMISSIONS)
async def assign_permissions(
    request: Request,
    role_id: str,
    body: AssignPermissionsRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = RoleService(db)
    role = await svc.assign_permissions(role_id, body.permission_ids)
    return success_response(
        data={"role": role}, message="Permissions assigned to role successfully"
    )


@roles_router.post("/{role_id}/clone")
@require_permission(Permissions.ROLES_CREATE)
async def clone_role(
    request: Request,
    role_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = RoleService(db)
    role = await svc.clone_role(role_id)
    return success_response(data={"role": role}, message="Role cloned successfully", code=201)
