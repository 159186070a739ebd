from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # ── Application ──────────────────────────────────────────────
    app_name: str = "StockPOS Access Control"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"
    api_version: str = "v1"

    # ── Database ─────────────────────────────────────────────────
    mongodb_uri: Optional[str] = "mongodb://localhost:27017"
    database_name: str = "stockpos_db"

    # ── JWT / Security ───────────────────────────────────────────
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    # ── Bootstrap ────────────────────────────────────────────────
    seed_on_startup: bool = True
    admin_name: str = "Admin User"
    admin_email: str = "admin@example.com"
    admin_password: str = "password"

    # ── CORS ─────────────────────────────────────────────────────
    cors_allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    cors_allow_credentials: bool = True
    cors_allowed_methods: list[str] = ["*"]
    cors_allowed_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# ── Module-level singleton ──────────────────────────────────────
settings = Settings()
