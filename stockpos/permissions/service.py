"""Permission catalog CRUD."""

import re
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from stockpos.rbac.permissions import feature_of
from stockpos.store import PermissionRepository
from stockpos.utils import serialize_mongo_doc
from stockpos.utils.exceptions import ValidationError


class PermissionService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.permissions = PermissionRepository(db)

    async def create_permission(self, data: dict) -> dict:
        doc = await self.permissions.create(
            {
                "name": data["name"],
                "feature": data.get("feature") or feature_of(data["name"]),
                "description": data.get("description"),
            }
        )
        return serialize_mongo_doc(doc)

    async def get_permission(self, permission_id: str) -> dict:
        return serialize_mongo_doc(await self.permissions.get_by_id(permission_id))

    async def list_permissions(
        self,
        page: int = 1,
        limit: int = 10,
        feature: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[dict], int]:
        filters: dict = {}
        if feature:
            filters["feature"] = feature
        if search:
            pattern = re.escape(search)
            filters["$or"] = [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"description": {"$regex": pattern, "$options": "i"}},
            ]

        total = await self.permissions.count(filters)
        docs = await self.permissions.find_many(filters, skip=(page - 1) * limit, limit=limit)
        return serialize_mongo_doc(docs) or [], total

    async def update_permission(self, permission_id: str, data: dict) -> dict:
        """Rename / re-describe. The feature always follows the name."""
        current = await self.permissions.get_by_id(permission_id)
        name = data.get("name") or current["name"]
        feature = data.get("feature") or feature_of(name)
        if feature != feature_of(name):
            raise ValidationError(f"Feature must be '{feature_of(name)}' for permission '{name}'")

        changes = {"name": data.get("name"), "feature": feature}
        if "description" in data:
            changes["description"] = data["description"]
        doc = await self.permissions.update(permission_id, changes, clearable=("description",))
        return serialize_mongo_doc(doc)

    async def delete_permission(self, permission_id: str) -> None:
        # Roles still referencing it skip the id at claims-assembly time.
        await self.permissions.delete(permission_id)
