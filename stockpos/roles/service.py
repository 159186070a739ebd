"""Role CRUD, permission assignment and cloning."""

import re
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from stockpos.store import PermissionRepository, RoleRepository
from stockpos.utils import parse_object_id, serialize_mongo_doc
from stockpos.utils.exceptions import NotFoundError
from stockpos.utils.logger import Logger

logger = Logger("roles.service")


def clone_name_candidates(name: str):
    """Names to probe for a clone: Copy of X, Copy of X (1), Copy of X (2), ..."""
    yield f"Copy of {name}"
    counter = 1
    while True:
        yield f"Copy of {name} ({counter})"
        counter += 1


class RoleService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.roles = RoleRepository(db)
        self.permissions = PermissionRepository(db)

    async def _populate(self, role: dict) -> dict:
        """Serialize a role with its permission documents inlined."""
        resolved = await self.permissions.dereference(role.get("permissions") or [])
        safe = serialize_mongo_doc(role)
        safe["permissions"] = serialize_mongo_doc(resolved.found) or []
        return safe

    async def _validated_permission_ids(self, permission_ids: list[str]) -> list:
        unique_ids = list(dict.fromkeys(permission_ids))
        if await self.permissions.missing_ids(unique_ids):
            raise NotFoundError("One or more permissions not found")
        return [parse_object_id(pid) for pid in unique_ids]

    async def create_role(self, data: dict) -> dict:
        permission_ids = await self._validated_permission_ids(data.get("permission_ids") or [])
        role = await self.roles.create(
            {
                "name": data["name"],
                "description": data.get("description"),
                "permissions": permission_ids,
                "is_active": data.get("is_active", True),
            }
        )
        logger.info(f"Created role '{role['name']}' with {len(permission_ids)} permission(s)")
        return await self._populate(role)

    async def get_role(self, role_id: str) -> dict:
        return await self._populate(await self.roles.get_by_id(role_id))

    async def list_roles(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> tuple[list[dict], int]:
        filters: dict = {}
        if search:
            pattern = re.escape(search)
            filters["$or"] = [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"description": {"$regex": pattern, "$options": "i"}},
            ]
        total = await self.roles.count(filters)
        docs = await self.roles.find_many(filters, skip=(page - 1) * limit, limit=limit)
        return [await self._populate(r) for r in docs], total

    async def update_role(self, role_id: str, data: dict) -> dict:
        changes = {k: data.get(k) for k in ("name", "description", "is_active") if k in data}
        role = await self.roles.update(role_id, changes, clearable=("description",))
        return await self._populate(role)

    async def delete_role(self, role_id: str) -> None:
        # No cascade: users keep the dangling id, claims assembly skips it.
        await self.roles.delete(role_id)
        logger.info(f"Deleted role {role_id}")

    async def assign_permissions(self, role_id: str, permission_ids: list[str]) -> dict:
        """Full-set replace; an empty list clears the role."""
        await self.roles.get_by_id(role_id)
        validated = await self._validated_permission_ids(permission_ids)
        role = await self.roles.replace_permissions(role_id, validated)
        logger.info(f"Role '{role['name']}' now has {len(validated)} permission(s)")
        return await self._populate(role)

    async def clone_role(self, role_id: str) -> dict:
        original = await self.roles.get_by_id(role_id)

        for candidate in clone_name_candidates(original["name"]):
            if await self.roles.find_one({"name": candidate}) is None:
                break

        clone = await self.roles.create(
            {
                "name": candidate,
                "description": original.get("description"),
                "permissions": list(original.get("permissions") or []),
                "is_active": True,
            }
        )
        logger.info(f"Cloned role '{original['name']}' as '{candidate}'")
        return await self._populate(clone)
