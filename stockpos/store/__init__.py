from .repository import (
    Dereferenced,
    MongoRepository,
    PermissionRepository,
    RoleRepository,
    UserRepository,
)

__all__ = [
    "Dereferenced",
    "MongoRepository",
    "PermissionRepository",
    "RoleRepository",
    "UserRepository",
]
