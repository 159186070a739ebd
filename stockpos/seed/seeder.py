"""
Bootstrap seeding.

Idempotent, safe to run on every start:
  1. Create each catalog permission that is missing (matched by name).
  2. Create the admin role if missing, with every permission present at
     that moment.  An existing admin role is left untouched.
  3. Create the bootstrap admin user if missing (matched by email).
"""

from dataclasses import dataclass
from typing import Iterable

from motor.motor_asyncio import AsyncIOMotorDatabase

from stockpos.auth.helpers import hash_password
from stockpos.rbac.permissions import ADMIN_ROLE, feature_of
from stockpos.store import PermissionRepository, RoleRepository, UserRepository
from stockpos.utils.logger import Logger

logger = Logger("seed")


@dataclass
class SeedReport:
    permissions_created: int = 0
    permissions_skipped: int = 0
    admin_role_created: bool = False
    admin_user_created: bool = False


def _describe(key: str) -> str:
    # USERS_ASSIGN_ROLES → "users assign roles permission"
    return f"{key.replace('_', ' ').lower()} permission"


async def seed_permissions(db: AsyncIOMotorDatabase, catalog: Iterable, report: SeedReport) -> None:
    permissions = PermissionRepository(db)
    for entry in catalog:
        name = entry.value
        if await permissions.find_one({"name": name}):
            report.permissions_skipped += 1
            continue
        await permissions.create(
            {
                "name": name,
                "feature": feature_of(name),
                "description": _describe(entry.name),
            }
        )
        logger.debug(f"Created permission: {name}")
        report.permissions_created += 1

    logger.info(
        f"Permissions seeded: {report.permissions_created} created, "
        f"{report.permissions_skipped} already existed"
    )


async def seed_admin_role(db: AsyncIOMotorDatabase, report: SeedReport) -> dict:
    roles = RoleRepository(db)
    existing = await roles.find_one({"name": ADMIN_ROLE})
    if existing:
        logger.info("Admin role already exists, leaving its permissions as they are")
        return existing

    all_permissions = await PermissionRepository(db).collection.find({}, {"_id": 1}).to_list(length=None)
    role = await roles.create(
        {
            "name": ADMIN_ROLE,
            "description": "Administrator",
            "permissions": [p["_id"] for p in all_permissions],
            "is_active": True,
        }
    )
    report.admin_role_created = True
    logger.info(f"Created admin role with {len(role['permissions'])} permission(s)")
    return role


async def seed_admin_user(
    db: AsyncIOMotorDatabase,
    admin_role: dict,
    name: str,
    email: str,
    password: str,
    report: SeedReport,
) -> None:
    users = UserRepository(db)
    if await users.find_by_email(email):
        logger.info(f"Bootstrap admin {email} already exists")
        return

    await users.create(
        {
            "name": name,
            "email": email,
            "password_hash": hash_password(password),
            "roles": [admin_role["_id"]],
            "is_active": True,
        }
    )
    report.admin_user_created = True
    logger.info(f"Created bootstrap admin {email}")


async def run_seeders(
    db: AsyncIOMotorDatabase,
    catalog: Iterable,
    admin_name: str,
    admin_email: str,
    admin_password: str,
) -> SeedReport:
    report = SeedReport()
    await seed_permissions(db, catalog, report)
    admin_role = await seed_admin_role(db, report)
    await seed_admin_user(db, admin_role, admin_name, admin_email, admin_password, report)
    return report
