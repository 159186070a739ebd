"""User CRUD, role assignment and activation toggling."""

import re
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from stockpos.auth.helpers import hash_password
from stockpos.store import RoleRepository, UserRepository
from stockpos.utils import parse_object_id, serialize_mongo_doc
from stockpos.utils.exceptions import ValidationError
from stockpos.utils.logger import Logger

logger = Logger("users.service")


class UserService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.users = UserRepository(db)
        self.roles = RoleRepository(db)

    async def _populate(self, user: dict) -> dict:
        """Serialize a user with its role documents inlined (no password hash)."""
        resolved = await self.roles.dereference(user.get("roles") or [])
        safe = serialize_mongo_doc(user)
        safe["roles"] = serialize_mongo_doc(resolved.found) or []
        return safe

    async def _validated_role_ids(self, role_ids: list[str]) -> list:
        unique_ids = list(dict.fromkeys(role_ids))
        if await self.roles.missing_ids(unique_ids):
            raise ValidationError("One or more roles not found")
        return [parse_object_id(rid) for rid in unique_ids]

    async def create_user(self, data: dict) -> dict:
        """Hashes the password, validates role ids, enforces unique email."""
        role_ids = await self._validated_role_ids(data.get("roles") or [])
        user = await self.users.create(
            {
                "name": data["name"],
                "email": data["email"],
                "password_hash": hash_password(data["password"]),
                "roles": role_ids,
                "is_active": data.get("is_active", True),
            }
        )
        logger.info(f"Created user {user['email']}")
        return await self._populate(user)

    async def get_user(self, user_id: str) -> dict:
        return await self._populate(await self.users.get_by_id(user_id))

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        role_name: Optional[str] = None,
    ) -> tuple[list[dict], int]:
        """Active users only, optionally filtered by search text or role name."""
        filters: dict = {"is_active": True}
        if search:
            pattern = re.escape(search)
            filters["$or"] = [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"email": {"$regex": pattern, "$options": "i"}},
            ]
        if role_name:
            role = await self.roles.find_one({"name": role_name})
            if role:
                filters["roles"] = role["_id"]

        total = await self.users.count(filters)
        docs = await self.users.find_many(filters, skip=(page - 1) * limit, limit=limit)
        return [await self._populate(u) for u in docs], total

    async def update_user(self, user_id: str, data: dict) -> dict:
        changes = {k: data.get(k) for k in ("name", "email", "is_active") if k in data}
        if data.get("roles") is not None:
            changes["roles"] = await self._validated_role_ids(data["roles"])
        user = await self.users.update(user_id, changes)
        return await self._populate(user)

    async def assign_roles(self, user_id: str, role_ids: list[str]) -> dict:
        """Full-set replace of the user's roles."""
        await self.users.get_by_id(user_id)
        validated = await self._validated_role_ids(role_ids)
        user = await self.users.update(user_id, {"roles": validated})
        logger.info(f"User {user['email']} now has {len(validated)} role(s)")
        return await self._populate(user)

    async def deactivate_user(self, user_id: str) -> dict:
        """Soft delete. Tokens already issued stay valid until they expire."""
        user = await self.users.set_active(user_id, False)
        logger.info(f"Deactivated user {user['email']}")
        return await self._populate(user)

    async def activate_user(self, user_id: str) -> dict:
        user = await self.users.set_active(user_id, True)
        logger.info(f"Activated user {user['email']}")
        return await self._populate(user)
