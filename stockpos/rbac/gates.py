"""
Authorization gates.

Every gate returns ``Ok(identity)`` or ``Err(AuthError)``; none of them
touches the database.  Role and permission claims are read from the
verified token only.

Per request:

    UNAUTHENTICATED → TOKEN_CHECKED → AUTHENTICATED → AUTHORIZED | DENIED
"""

from typing import Iterable

from starlette.requests import Request

from stockpos.auth.results import AuthError, Err, Result
from stockpos.auth.tokens import Identity, TokenCodec
from stockpos.utils.logger import Logger
from .requirements import PermissionRequirement, Requirement, RoleRequirement

logger = Logger("rbac.gates")


def authenticate(request: Request, codec: TokenCodec) -> Result[Identity]:
    token = codec.extract_from_request(request)
    if token is None:
        return Err(AuthError.AUTHENTICATION_REQUIRED)
    return codec.verify(token)


def authorize(
    request: Request,
    codec: TokenCodec,
    requirement: Requirement,
) -> Result[Identity]:
    """Authenticate, then check ``requirement``. Auth failures pass through untouched."""
    result = authenticate(request, codec)
    if isinstance(result, Err):
        return result

    if not requirement.is_satisfied_by(result.value):
        logger.warning(
            f"Denied {request.method} {request.url.path} "
            f"for user {result.value.subject_id}: requires {requirement}"
        )
        return Err(AuthError.INSUFFICIENT_PERMISSIONS)
    return result


def require_any_role(
    request: Request,
    codec: TokenCodec,
    allowed_roles: Iterable[str],
) -> Result[Identity]:
    return authorize(request, codec, RoleRequirement.of(allowed_roles))


def require_permission(
    request: Request,
    codec: TokenCodec,
    required_permission: str,
) -> Result[Identity]:
    return authorize(request, codec, PermissionRequirement(required_permission))
