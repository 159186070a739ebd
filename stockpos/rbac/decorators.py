"""
Declarative gate decorators for route handlers.

Usage:
    @router.get("/")
    @require_permission(Permissions.USERS_VIEW)
    async def list_users(request: Request):
        identity = request.state.identity
        ...

Must be applied AFTER the route decorator.  The handler never runs when the
gate denies; the gate's error response is returned as-is.
"""

from functools import wraps
from typing import Callable, Iterable

from starlette.requests import Request

from stockpos.auth.results import Err
from stockpos.auth.tokens import TokenCodec
from . import gates
from .requirements import PermissionRequirement, Requirement, RoleRequirement


def _find_request(args, kwargs) -> Request:
    request: Request | None = kwargs.get("request")
    if request is None:
        for arg in args:
            if isinstance(arg, Request):
                request = arg
                break
    if request is None:
        raise RuntimeError("Request object not found in handler")
    return request


def get_token_codec(request: Request) -> TokenCodec:
    """Codec installed on the application at startup."""
    return request.app.state.token_codec


def _gate(check: Callable[[Request, TokenCodec], object]):
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request = _find_request(args, kwargs)
            result = check(request, get_token_codec(request))
            if isinstance(result, Err):
                return result.to_response()

            request.state.identity = result.value
            return await func(*args, **kwargs)

        return wrapper

    return decorator


def authenticated(func):
    """Any valid token passes."""
    return _gate(gates.authenticate)(func)


def require(requirement: Requirement):
    return _gate(lambda request, codec: gates.authorize(request, codec, requirement))


def require_any_role(*roles: str | Iterable[str]):
    """``@require_any_role("admin", "manager")`` or ``@require_any_role(["admin"])``."""
    names: list[str] = []
    for role in roles:
        if isinstance(role, str):
            names.append(role)
        else:
            names.extend(role)
    return require(RoleRequirement.of(names))


def require_permission(permission: str):
    return require(PermissionRequirement(str(getattr(permission, "value", permission))))
