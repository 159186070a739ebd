"""
Tagged results returned by the token codec and the authorization gates.

A gate never raises for an expected denial.  It hands back either
``Ok(identity)`` or ``Err(AuthError)``; callers branch with ``isinstance``
and return ``err.to_response()`` untouched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

from fastapi import status
from fastapi.responses import JSONResponse

from stockpos.utils.helpers import error_response

T = TypeVar("T")


class AuthError(Enum):
    """Authorization failures with their fixed HTTP status and message."""

    AUTHENTICATION_REQUIRED = (status.HTTP_401_UNAUTHORIZED, "Authentication required")
    INVALID_OR_EXPIRED = (status.HTTP_401_UNAUTHORIZED, "Invalid or expired token")
    INSUFFICIENT_PERMISSIONS = (status.HTTP_403_FORBIDDEN, "Insufficient permissions")

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: AuthError

    @property
    def is_ok(self) -> bool:
        return False

    def to_response(self) -> JSONResponse:
        return error_response(self.error.message, code=self.error.status_code)


Result = Union[Ok[T], Err]
