from __future__ import annotations

import copy
import re
from types import SimpleNamespace
from typing import Any, AsyncIterator

import httpx
import pytest
from bson import ObjectId
from starlette.requests import Request

from stockpos.app import create_app
from stockpos.auth.helpers import hash_password
from stockpos.auth.tokens import TokenCodec
from stockpos.config import Settings, get_database
from stockpos.store import PermissionRepository, RoleRepository, UserRepository

TEST_SECRET = "unit-test-secret"


# ── In-memory stand-in for the Motor collections used by the store ──
def _match_condition(value: Any, cond: Any) -> bool:
    if isinstance(cond, dict) and any(k.startswith("$") for k in cond):
        for op, arg in cond.items():
            if op == "$in":
                if isinstance(value, list):
                    if not any(v in arg for v in value):
                        return False
                elif value not in arg:
                    return False
            elif op == "$ne":
                if value == arg:
                    return False
            elif op == "$regex":
                flags = re.IGNORECASE if "i" in cond.get("$options", "") else 0
                if not isinstance(value, str) or not re.search(arg, value, flags):
                    return False
            elif op == "$options":
                continue
            else:
                raise NotImplementedError(op)
        return True
    if isinstance(value, list) and not isinstance(cond, list):
        return cond in value
    return value == cond


def _matches(doc: dict, filters: dict) -> bool:
    for key, cond in (filters or {}).items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in cond):
                return False
        elif not _match_condition(doc.get(key), cond):
            return False
    return True


class FakeCursor:
    def __init__(self, docs: list[dict]):
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def skip(self, n: int) -> "FakeCursor":
        self._skip = n
        return self

    def limit(self, n: int) -> "FakeCursor":
        self._limit = n
        return self

    async def to_list(self, length: int | None = None) -> list[dict]:
        docs = self._docs[self._skip:]
        if self._limit:
            docs = docs[: self._limit]
        if length:
            docs = docs[:length]
        return [copy.deepcopy(d) for d in docs]


class FakeCollection:
    def __init__(self, name: str):
        self.name = name
        self.docs: list[dict] = []

    async def create_index(self, *_args, **_kwargs) -> str:
        return "noop"

    async def find_one(self, filters: dict, *_args) -> dict | None:
        for doc in self.docs:
            if _matches(doc, filters):
                return copy.deepcopy(doc)
        return None

    def find(self, filters: dict | None = None, *_args) -> FakeCursor:
        return FakeCursor([d for d in self.docs if _matches(d, filters or {})])

    async def count_documents(self, filters: dict) -> int:
        return sum(1 for d in self.docs if _matches(d, filters))

    async def insert_one(self, doc: dict):
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def update_one(self, filters: dict, update: dict):
        for doc in self.docs:
            if _matches(doc, filters):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def find_one_and_update(self, filters: dict, update: dict, return_document=None):
        for doc in self.docs:
            if _matches(doc, filters):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return copy.deepcopy(doc)
        return None

    async def delete_one(self, filters: dict):
        for i, doc in enumerate(self.docs):
            if _matches(doc, filters):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self):
        self._collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection(name))


# ── Fixtures ─────────────────────────────────────────────────────
@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(secret_key=TEST_SECRET)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(secret_key=TEST_SECRET, seed_on_startup=False, debug=False)


@pytest.fixture
def app(db: FakeDatabase, test_settings: Settings):
    application = create_app(test_settings)

    async def override_get_database():
        return db

    application.dependency_overrides[get_database] = override_get_database
    return application


@pytest.fixture
async def client(app) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


def make_request(headers: dict[str, str] | None = None, path: str = "/api/v1/test") -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": raw,
        "query_string": b"",
    }
    return Request(scope)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ── Data builders ────────────────────────────────────────────────
async def create_permission(db, name: str) -> dict:
    return await PermissionRepository(db).create(
        {"name": name, "feature": name.split(".")[0], "description": None}
    )


async def create_role(db, name: str, permissions: list[dict], is_active: bool = True) -> dict:
    return await RoleRepository(db).create(
        {
            "name": name,
            "description": None,
            "permissions": [p["_id"] for p in permissions],
            "is_active": is_active,
        }
    )


async def create_user(
    db,
    email: str,
    roles: list[dict],
    password: str = "secret123",
    is_active: bool = True,
) -> dict:
    return await UserRepository(db).create(
        {
            "name": email.split("@")[0],
            "email": email,
            "password_hash": hash_password(password),
            "roles": [r["_id"] for r in roles],
            "is_active": is_active,
        }
    )
