"""
Permission taxonomy and matching.

Permission format:  "{feature}.{action}"
  - e.g. "users.view", "roles.assign_permissions"
  - Wildcard: "users.*" means every action of the users feature
"""

import re
from enum import Enum

ADMIN_ROLE = "admin"
WILDCARD_SUFFIX = ".*"

PERMISSION_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*\.([a-z][a-z0-9_]*|\*)$")


class Permissions(str, Enum):
    # ── Users ────────────────────────────────────────────────────
    USERS_VIEW = "users.view"
    USERS_CREATE = "users.create"
    USERS_UPDATE = "users.update"
    USERS_DELETE = "users.delete"
    USERS_ASSIGN_ROLES = "users.assign_roles"

    # ── Roles ────────────────────────────────────────────────────
    ROLES_VIEW = "roles.view"
    ROLES_CREATE = "roles.create"
    ROLES_UPDATE = "roles.update"
    ROLES_DELETE = "roles.delete"
    ROLES_ASSIGN_PERMISSIONS = "roles.assign_permissions"

    # ── Permissions ──────────────────────────────────────────────
    PERMISSIONS_VIEW = "permissions.view"
    PERMISSIONS_CREATE = "permissions.create"
    PERMISSIONS_UPDATE = "permissions.update"
    PERMISSIONS_DELETE = "permissions.delete"

    # ── Brands ───────────────────────────────────────────────────
    BRANDS_VIEW = "brands.view"
    BRANDS_CREATE = "brands.create"
    BRANDS_UPDATE = "brands.update"
    BRANDS_DELETE = "brands.delete"

    # ── Products ─────────────────────────────────────────────────
    PRODUCTS_VIEW = "products.view"
    PRODUCTS_CREATE = "products.create"
    PRODUCTS_UPDATE = "products.update"
    PRODUCTS_DELETE = "products.delete"

    # ── Categories ───────────────────────────────────────────────
    CATEGORIES_VIEW = "categories.view"
    CATEGORIES_CREATE = "categories.create"
    CATEGORIES_UPDATE = "categories.update"
    CATEGORIES_DELETE = "categories.delete"


def feature_of(permission_name: str) -> str:
    """Namespace prefix of a permission name ("users.view" → "users")."""
    return permission_name.split(".", 1)[0]


def is_valid_permission_name(permission_name: str) -> bool:
    return bool(PERMISSION_NAME_PATTERN.match(permission_name or ""))


def permission_matches(held: str, required: str) -> bool:
    """
    Check if one held permission satisfies the required permission.

      - "users.view" → exact match only
      - "users.*"    → any "users.<action>"
    """
    if held == required:
        return True
    if held.endswith(WILDCARD_SUFFIX):
        # keep the dot so "users.*" does not cover "users_archive.view"
        return required.startswith(held[:-1])
    return False


def check_permission(held_permissions, required: str) -> bool:
    """True if any held permission satisfies ``required``."""
    if not required:
        return False
    return any(permission_matches(held, required) for held in held_permissions)
