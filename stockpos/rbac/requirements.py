"""
Route requirements.

Both coarse role checks and fine permission checks are expressed as a
requirement that an identity either satisfies or not.  Routes pick one of
the two variants.
"""

from dataclasses import dataclass
from typing import Iterable, Union

from stockpos.auth.tokens import Identity
from .permissions import check_permission


@dataclass(frozen=True)
class RoleRequirement:
    """Satisfied when the identity holds any one of ``any_of``."""

    any_of: frozenset[str]

    @classmethod
    def of(cls, roles: Iterable[str]) -> "RoleRequirement":
        return cls(any_of=frozenset(roles))

    def is_satisfied_by(self, identity: Identity) -> bool:
        return not identity.role_names.isdisjoint(self.any_of)


@dataclass(frozen=True)
class PermissionRequirement:
    """Satisfied by an exact or feature-wildcard permission."""

    name: str

    def is_satisfied_by(self, identity: Identity) -> bool:
        # tokens without a permission claim never pass a permission gate
        if identity.permission_names is None:
            return False
        return check_permission(identity.permission_names, self.name)


Requirement = Union[RoleRequirement, PermissionRequirement]
