"""
Claims assembly: flattens a user's roles into the token snapshot.

Runs once per login.  Protected requests never call it; they read the
snapshot from the token.
"""

from dataclasses import dataclass

from motor.motor_asyncio import AsyncIOMotorDatabase

from stockpos.store import PermissionRepository, RoleRepository
from stockpos.utils.logger import Logger

logger = Logger("auth.claims")


@dataclass(frozen=True)
class AssembledClaims:
    role_names: frozenset[str]
    permission_names: frozenset[str]
    skipped_roles: int = 0
    skipped_permissions: int = 0
    inactive_roles: int = 0


class ClaimsAssembler:
    """
    Resolves ``user.roles`` → roles → ``role.permissions`` → permission names.

    Inactive roles contribute neither their name nor their permissions.
    References to deleted roles or permissions are skipped and counted.
    Wildcards such as "brands.*" are kept verbatim, not expanded.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.roles = RoleRepository(db)
        self.permissions = PermissionRepository(db)

    async def _active_roles(self, user: dict) -> tuple[list[dict], int, int]:
        resolved = await self.roles.dereference(user.get("roles") or [])
        active = [r for r in resolved.found if r.get("is_active", True)]
        return active, resolved.skipped, len(resolved.found) - len(active)

    async def resolve_role_names(self, user: dict) -> frozenset[str]:
        active, _, _ = await self._active_roles(user)
        return frozenset(r["name"] for r in active)

    async def resolve_effective_permissions(self, user: dict) -> frozenset[str]:
        return (await self.assemble(user)).permission_names

    async def assemble(self, user: dict) -> AssembledClaims:
        active, skipped_roles, inactive = await self._active_roles(user)

        permission_ids = []
        for role in active:
            permission_ids.extend(role.get("permissions") or [])
        resolved = await self.permissions.dereference(permission_ids)

        claims = AssembledClaims(
            role_names=frozenset(r["name"] for r in active),
            permission_names=frozenset(p["name"] for p in resolved.found),
            skipped_roles=skipped_roles,
            skipped_permissions=resolved.skipped,
            inactive_roles=inactive,
        )

        if claims.skipped_roles or claims.skipped_permissions:
            logger.warning(
                f"User {user.get('_id')}: skipped {claims.skipped_roles} dangling role "
                f"and {claims.skipped_permissions} dangling permission reference(s)"
            )
        if claims.inactive_roles:
            logger.info(
                f"User {user.get('_id')}: ignored {claims.inactive_roles} inactive role(s)"
            )
        return claims
