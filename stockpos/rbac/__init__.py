from .permissions import (
    ADMIN_ROLE,
    Permissions,
    check_permission,
    feature_of,
    is_valid_permission_name,
    permission_matches,
)
from .requirements import PermissionRequirement, Requirement, RoleRequirement
from .gates import authenticate, authorize, require_any_role, require_permission

__all__ = [
    "ADMIN_ROLE",
    "Permissions",
    "check_permission",
    "feature_of",
    "is_valid_permission_name",
    "permission_matches",
    "PermissionRequirement",
    "Requirement",
    "RoleRequirement",
    "authenticate",
    "authorize",
    "require_any_role",
    "require_permission",
]
