"""
StockPOS access control: main application.

Assembles config, the token codec, request logging, error handlers and the
auth / users / roles / permissions routers.
"""

import time
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from stockpos.config import Settings, settings, db_manager
from stockpos.auth.tokens import TokenCodec
from stockpos.rbac.permissions import Permissions
from stockpos.seed import run_seeders
from stockpos.utils import Logger, configure_logging, error_response

# ── Route imports ────────────────────────────────────────────────
from stockpos.auth.routes import auth_router
from stockpos.users.routes import users_router
from stockpos.roles.routes import roles_router
from stockpos.permissions.routes import permissions_router

logger = Logger("request")


# ── Request Logging Middleware ───────────────────────────────────
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request: method, path, status code, and duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "unknown"

        logger.info(f"--> {method} {path} (from {client})")

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = round((time.time() - start) * 1000, 2)
            logger.error(f"<-- {method} {path} | 500 | {duration}ms")
            logger.error(f"    Exception: {exc}")
            raise

        duration = round((time.time() - start) * 1000, 2)
        status = response.status_code

        if status >= 500:
            logger.error(f"<-- {method} {path} | {status} | {duration}ms")
        elif status >= 400:
            logger.warning(f"<-- {method} {path} | {status} | {duration}ms")
        else:
            logger.info(f"<-- {method} {path} | {status} | {duration}ms")

        return response


# ── Lifespan ─────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg: Settings = app.state.settings
    await db_manager.connect()
    await db_manager.ensure_indexes()
    if cfg.seed_on_startup:
        report = await run_seeders(
            db_manager.database,
            catalog=Permissions,
            admin_name=cfg.admin_name,
            admin_email=cfg.admin_email,
            admin_password=cfg.admin_password,
        )
        logger.info(f"Bootstrap: {report}")
    yield
    db_manager.close()


def build_token_codec(cfg: Settings) -> TokenCodec:
    return TokenCodec(
        secret_key=cfg.secret_key,
        algorithm=cfg.algorithm,
        ttl=timedelta(minutes=cfg.access_token_expire_minutes),
    )


# ── App factory ──────────────────────────────────────────────────
def create_app(cfg: Settings = settings) -> FastAPI:
    app = FastAPI(
        title=cfg.app_name,
        version=cfg.app_version,
        description="Role-based access control for the StockPOS inventory system",
        docs_url="/api/docs",
        lifespan=lifespan,
    )
    configure_logging("DEBUG" if cfg.debug else cfg.log_level)
    app.state.settings = cfg
    app.state.token_codec = build_token_codec(cfg)

    # ── CORS (must be first) ─────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_allowed_origins,
        allow_credentials=cfg.cors_allow_credentials,
        allow_methods=cfg.cors_allowed_methods,
        allow_headers=cfg.cors_allowed_headers,
    )

    # ── Request logging (runs on every request) ──────────────
    app.add_middleware(RequestLoggingMiddleware)

    # ── Exception handlers ───────────────────────────────────
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(
            message=str(exc.detail),
            code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(p) for p in err.get("loc", ())[1:]),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        return error_response(message="Validation failed", code=400, errors=errors)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return error_response(
            message=str(exc) if cfg.debug else "Internal server error",
            code=500,
        )

    # ── Routes ───────────────────────────────────────────────
    v = cfg.api_version  # "v1"

    app.include_router(auth_router, prefix=f"/api/{v}/auth", tags=["Authentication"])
    app.include_router(users_router, prefix=f"/api/{v}/users", tags=["Users"])
    app.include_router(roles_router, prefix=f"/api/{v}/roles", tags=["Roles"])
    app.include_router(
        permissions_router,
        prefix=f"/api/{v}/permissions",
        tags=["Permissions"],
    )

    # ── Health check ─────────────────────────────────────────
    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "app": cfg.app_name,
            "version": cfg.app_version,
            "database": db_manager.is_connected,
        }

    return app


# ── Create the app instance ──────────────────────────────────────
app = create_app()
