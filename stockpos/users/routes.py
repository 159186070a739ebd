from fastapi import APIRouter, Depends, Request, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from stockpos.config import get_database
from stockpos.utils import pagination_meta, success_response
from stockpos.rbac.decorators import require_permission
from stockpos.rbac.permissions import Permissions
from .schemas import AssignRolesRequest, CreateUserRequest, UpdateUserRequest
from .service import UserService

users_router = APIRouter()


@users_router.post("")
@require_permission(Permissions.USERS_CREATE)
async def create_user(
    request: Request,
    body: CreateUserRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    user = await svc.create_user(data=body.model_dump())
    return success_response(data={"user": user}, message="User created successfully", code=201)


@users_router.get("")
@require_permission(Permissions.USERS_VIEW)
async def list_users(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    users, total = await svc.list_users(page=page, limit=limit, search=search, role_name=role)
    return success_response(
        data={"users": users, "pagination": pagination_meta(page, limit, total)}
    )


@users_router.get("/{user_id}")
@require_permission(Permissions.USERS_VIEW)
async def get_user(
    request: Request,
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    user = await svc.get_user(user_id)
    return success_response(data={"user": user})


@users_router.put("/{user_id}")
@require_permission(Permissions.USERS_UPDATE)
async def update_user(
    request: Request,
    user_id: str,
    body: UpdateUserRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    user = await svc.update_user(user_id, body.model_dump(exclude_unset=True))
    return success_response(data={"user": user}, message="User updated successfully")


@users_router.delete("/{user_id}")
@require_permission(Permissions.USERS_DELETE)
async def deactivate_user(
    request: Request,
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    await svc.deactivate_user(user_id)
    return success_response(message="User deactivated successfully")


@users_router.post("/{user_id}/activate")
@require_permission(Permissions.USERS_UPDATE)
async def activate_user(
    request: Request,
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    user = await svc.activate_user(user_id)
    return success_response(data={"user": user}, message="User activated successfully")


@users_router.put("/{user_id}/roles")
@require_permission(Permissions.USERS_ASSIGN_ROLES)
async def assign_roles(
    request: Request,
    user_id: str,
    body: AssignRolesRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    svc = UserService(db)
    user = await svc.assign_roles(user_id, body.roles)
    return success_response(data={"user": user}, message="Roles assigned successfully")
