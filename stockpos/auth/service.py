"""Login issues the bearer token; register creates users."""

from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase

from stockpos.store import UserRepository
from stockpos.utils import serialize_mongo_doc
from stockpos.utils.exceptions import AuthenticationError
from stockpos.utils.logger import Logger
from .claims import ClaimsAssembler
from .helpers import hash_password, verify_password
from .tokens import TokenCodec

logger = Logger("auth.service")


class AuthService:
    def __init__(self, db: AsyncIOMotorDatabase, codec: TokenCodec):
        self.db = db
        self.codec = codec
        self.users = UserRepository(db)
        self.claims = ClaimsAssembler(db)

    async def login(self, email: str, password: str) -> dict:
        """
        1. Look up the user by (lower-cased) email.
        2. Refuse deactivated accounts before checking the password.
        3. Verify password.
        4. Snapshot roles + effective permissions into a token.
        """
        # ── 1. Find user ─────────────────────────────────────────
        user = await self.users.find_by_email(email)
        if not user:
            logger.info(f"Login failed for {email}: unknown email")
            raise AuthenticationError("Invalid credentials")

        # ── 2. Active? ───────────────────────────────────────────
        if not user.get("is_active", True):
            logger.info(f"Login refused for {email}: account deactivated")
            raise AuthenticationError("Account is deactivated")

        # ── 3. Verify password ───────────────────────────────────
        if not verify_password(password, user.get("password_hash", "")):
            logger.info(f"Login failed for {email}: bad password")
            raise AuthenticationError("Invalid credentials")

        # ── 4. Resolve claims + build token ──────────────────────
        claims = await self.claims.assemble(user)
        token = self.codec.issue(
            subject_id=str(user["_id"]),
            email=user["email"],
            role_names=claims.role_names,
            permission_names=claims.permission_names,
        )

        await self.users.collection.update_one(
            {"_id": user["_id"]},
            {"$set": {"last_login": datetime.now(timezone.utc)}},
        )

        logger.info(
            f"Login for {email}: {len(claims.role_names)} role(s), "
            f"{len(claims.permission_names)} permission(s)"
        )
        return {
            "token": token,
            "user": {
                "id": str(user["_id"]),
                "name": user["name"],
                "email": user["email"],
                "roleNames": sorted(claims.role_names),
            },
        }

    async def register(self, name: str, email: str, password: str) -> dict:
        """Self-registration. New accounts start active and without roles."""
        user = await self.users.create(
            {
                "name": name,
                "email": email,
                "password_hash": hash_password(password),
                "roles": [],
                "is_active": True,
            }
        )
        logger.info(f"Registered user {user['email']}")
        return serialize_mongo_doc(user)
