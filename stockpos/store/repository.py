"""
MongoDB repositories for permissions, roles and users.

Each repository wraps one collection and honours a single unique key with a
pre-check-then-write: a colliding create or rename raises ``DuplicateError``
(409).  Lookups return ``None`` for a missing document; mutations of a
missing document raise ``NotFoundError`` (404).

Many-to-many relations are stored as lists of ObjectIds
(``role.permissions``, ``user.roles``) and resolved with
``dereference``, which skips ids that no longer resolve.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from stockpos.utils.exceptions import DuplicateError, NotFoundError
from stockpos.utils.helpers import parse_object_id


def _to_object_id(value: Any) -> Optional[ObjectId]:
    try:
        return parse_object_id(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Dereferenced:
    """Documents found for a list of ids, plus how many ids did not resolve."""

    found: list[dict] = field(default_factory=list)
    skipped: int = 0


class MongoRepository:
    collection_name: str = ""
    entity: str = "Resource"
    unique_field: Optional[str] = None

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[self.collection_name]

    # ── Reads ────────────────────────────────────────────────────
    async def find_by_id(self, doc_id: Any) -> Optional[dict]:
        oid = _to_object_id(doc_id)
        if oid is None:
            return None
        return await self.collection.find_one({"_id": oid})

    async def get_by_id(self, doc_id: Any) -> dict:
        doc = await self.find_by_id(doc_id)
        if doc is None:
            raise NotFoundError(f"{self.entity} not found")
        return doc

    async def find_one(self, filters: dict) -> Optional[dict]:
        return await self.collection.find_one(filters)

    async def find_many(
        self,
        filters: Optional[dict] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> list[dict]:
        cursor = (
            self.collection.find(filters or {})
            .sort("created_at", -1)
            .skip(skip)
            .limit(limit)
        )
        return await cursor.to_list(length=limit)

    async def count(self, filters: Optional[dict] = None) -> int:
        return await self.collection.count_documents(filters or {})

    async def dereference(self, ids: Iterable[Any]) -> Dereferenced:
        """
        Best-effort lookup of a list of ids, preserving their order.

        Malformed ids and ids whose documents were deleted are counted in
        ``skipped`` instead of failing the whole lookup.
        """
        wanted: list[ObjectId] = []
        skipped = 0
        for raw in ids or []:
            oid = _to_object_id(raw)
            if oid is None:
                skipped += 1
            elif oid not in wanted:
                wanted.append(oid)

        if not wanted:
            return Dereferenced(found=[], skipped=skipped)

        cursor = self.collection.find({"_id": {"$in": wanted}})
        by_id = {doc["_id"]: doc for doc in await cursor.to_list(length=len(wanted))}
        found = [by_id[oid] for oid in wanted if oid in by_id]
        skipped += len(wanted) - len(found)
        return Dereferenced(found=found, skipped=skipped)

    async def missing_ids(self, ids: Iterable[Any]) -> list[str]:
        """Ids from ``ids`` that do not resolve to a document."""
        result = []
        for raw in ids:
            if await self.find_by_id(raw) is None:
                result.append(str(raw))
        return result

    # ── Writes ───────────────────────────────────────────────────
    async def ensure_unique(self, value: Any, exclude_id: Optional[ObjectId] = None) -> None:
        if self.unique_field is None:
            return
        query: dict = {self.unique_field: value}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        if await self.collection.find_one(query):
            raise DuplicateError(
                f"{self.entity} with this {self.unique_field} already exists"
            )

    def normalize(self, data: dict) -> dict:
        return data

    async def create(self, data: dict) -> dict:
        doc = self.normalize(dict(data))
        if self.unique_field:
            await self.ensure_unique(doc[self.unique_field])

        now = datetime.now(timezone.utc)
        doc.setdefault("created_at", now)
        doc["updated_at"] = now
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateError(
                f"{self.entity} with this {self.unique_field} already exists"
            )
        doc["_id"] = result.inserted_id
        return doc

    async def update(
        self,
        doc_id: Any,
        changes: dict,
        clearable: Iterable[str] = (),
    ) -> dict:
        """Apply ``changes``; ``None`` means "leave as is" except for ``clearable`` fields."""
        oid = _to_object_id(doc_id)
        if oid is None:
            raise NotFoundError(f"{self.entity} not found")

        clean = self.normalize(
            {k: v for k, v in changes.items() if v is not None or k in clearable}
        )
        if self.unique_field and self.unique_field in clean:
            await self.ensure_unique(clean[self.unique_field], exclude_id=oid)
        clean["updated_at"] = datetime.now(timezone.utc)

        try:
            result = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": clean},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise DuplicateError(
                f"{self.entity} with this {self.unique_field} already exists"
            )
        if result is None:
            raise NotFoundError(f"{self.entity} not found")
        return result

    async def delete(self, doc_id: Any) -> None:
        oid = _to_object_id(doc_id)
        if oid is None:
            raise NotFoundError(f"{self.entity} not found")
        result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundError(f"{self.entity} not found")


class PermissionRepository(MongoRepository):
    collection_name = "permissions"
    entity = "Permission"
    unique_field = "name"


class RoleRepository(MongoRepository):
    collection_name = "roles"
    entity = "Role"
    unique_field = "name"

    async def replace_permissions(self, role_id: Any, permission_ids: list[ObjectId]) -> dict:
        """Full-set replace of a role's permissions in one write."""
        return await self.update(role_id, {"permissions": permission_ids})


class UserRepository(MongoRepository):
    collection_name = "users"
    entity = "User"
    unique_field = "email"

    def normalize(self, data: dict) -> dict:
        if data.get("email"):
            data["email"] = data["email"].strip().lower()
        return data

    async def find_by_email(self, email: str) -> Optional[dict]:
        return await self.collection.find_one({"email": email.strip().lower()})

    async def set_active(self, user_id: Any, is_active: bool) -> dict:
        return await self.update(user_id, {"is_active": is_active})
