from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from stockpos.config import get_database
from stockpos.rbac.decorators import require_any_role, require_permission
from stockpos.rbac.permissions import ADMIN_ROLE, Permissions
from stockpos.utils import pagination_meta, success_response
from .schemas import CreatePermissionRequest, UpdatePermissionRequest
from .service import PermissionService

permissions_router = APIRouter()


@permissions_router.get("")
@require_any_role(ADMIN_ROLE)
async def list_permissions(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    feature: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = PermissionService(db)
    permissions, total = await svc.list_permissions(
        page=page, limit=limit, feature=feature, search=search
    )
    return success_response(
        data={"permissions": permissions, "pagination": pagination_meta(page, limit, total)}
    )


@permissions_router.post("")
@require_any_role(ADMIN_ROLE)
async def create_permission(
    request: Request,
    body: CreatePermissionRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = PermissionService(db)
    permission = await svc.create_permission(body.model_dump())
    return success_response(
        data={"permission": permission},
        message="Permission created successfully",
        code=201,
    )


@permissions_router.get("/{permission_id}")
@require_permission(Permissions.PERMISSIONS_VIEW)
async def get_permission(
    request: Request,
    permission_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = PermissionService(db)
    permission = await svc.get_permission(permission_id)
    return success_response(data={"permission": permission})


@permissions_router.put("/{permission_id}")
@require_any_role(ADMIN_ROLE)
async def update_permission(
    request: Request,
    permission_id: str,
    body: UpdatePermissionRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = PermissionService(db)
    permission = await svc.update_permission(
        permission_id, body.model_dump(exclude_unset=True)
    )
    return success_response(
        data={"permission": permission}, message="Permission updated successfully"
    )


@permissions_router.delete("/{permission_id}")
@require_any_role(ADMIN_ROLE)
async def delete_permission(
    request: Request,
    permission_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = PermissionService(db)
    await svc.delete_permission(permission_id)
    return success_response(message="Permission deleted successfully")
