"""
Bearer token codec.

Tokens are HS256 JWTs carrying a point-in-time snapshot of the user's
role names and flattened permission names:

    {"sub": "<user id>", "email": "...", "roles": [...],
     "permissions": [...], "iat": <int>, "exp": <int>}

The snapshot is not refreshed when roles or permissions change later;
a user sees such edits only after logging in again.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from jose import JWTError, jwt
from starlette.requests import Request

from stockpos.utils.logger import Logger
from .results import AuthError, Err, Ok, Result

logger = Logger("auth.tokens")

DEFAULT_TTL = timedelta(days=1)
BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Identity:
    """Decoded claims of a verified token."""

    subject_id: str
    role_names: frozenset[str]
    # None for tokens issued without a permission claim.
    permission_names: Optional[frozenset[str]]
    issued_at: datetime
    expires_at: datetime
    email: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.subject_id,
            "email": self.email,
            "roleNames": sorted(self.role_names),
            "permissionNames": (
                sorted(self.permission_names)
                if self.permission_names is not None
                else None
            ),
            "issuedAt": self.issued_at.isoformat(),
            "expiresAt": self.expires_at.isoformat(),
        }


class TokenCodec:
    """Signs and verifies bearer tokens with a server-held secret."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_TTL,
    ):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.ttl = ttl

    def issue(
        self,
        subject_id: str,
        role_names: Iterable[str],
        permission_names: Iterable[str],
        email: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(subject_id),
            "roles": sorted(set(role_names)),
            "permissions": sorted(set(permission_names)),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        if email is not None:
            payload["email"] = email
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> Result[Identity]:
        """Check signature and expiry. Every failure is INVALID_OR_EXPIRED."""
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_sub": True},
            )
            identity = self._to_identity(payload)
        except (JWTError, KeyError, TypeError, ValueError) as e:
            logger.debug(f"Token rejected: {e}")
            return Err(AuthError.INVALID_OR_EXPIRED)
        return Ok(identity)

    @staticmethod
    def extract_from_request(request: Request) -> Optional[str]:
        """Bearer token from the Authorization header, or None."""
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith(BEARER_PREFIX):
            return None
        token = auth_header[len(BEARER_PREFIX):].strip()
        return token or None

    @staticmethod
    def _to_identity(payload: dict) -> Identity:
        roles = payload.get("roles") or []
        permissions = payload.get("permissions")
        if not isinstance(roles, list):
            raise TypeError("roles claim must be a list")
        if permissions is not None and not isinstance(permissions, list):
            raise TypeError("permissions claim must be a list")

        return Identity(
            subject_id=str(payload["sub"]),
            email=payload.get("email"),
            role_names=frozenset(str(r) for r in roles),
            permission_names=(
                frozenset(str(p) for p in permissions)
                if permissions is not None
                else None
            ),
            issued_at=datetime.fromtimestamp(int(payload.get("iat", 0)), timezone.utc),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), timezone.utc),
        )
