from fastapi import APIRouter, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from stockpos.config import get_database
from stockpos.rbac.decorators import authenticated, get_token_codec
from stockpos.utils import success_response
from .schemas import LoginRequest, RegisterRequest
from .service import AuthService

auth_router = APIRouter()


def get_auth_service(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> AuthService:
    return AuthService(db, get_token_codec(request))


@auth_router.post("/login")
async def login(body: LoginRequest, svc: AuthService = Depends(get_auth_service)):
    """Authenticate user and return the bearer token + user summary."""
    result = await svc.login(email=body.email, password=body.password)
    return success_response(data=result, message="Login successful")


@auth_router.post("/register")
async def register(body: RegisterRequest, svc: AuthService = Depends(get_auth_service)):
    user = await svc.register(name=body.name, email=body.email, password=body.password)
    return success_response(
        data={"user": user}, message="User registered successfully", code=201
    )


@auth_router.post("/logout")
async def logout():
    # Tokens are stateless; the client discards its copy.
    response = success_response(message="Logout successful")
    response.delete_cookie("auth-token", path="/")
    return response


@auth_router.get("/me")
@authenticated
async def me(request: Request):
    return success_response(data={"user": request.state.identity.to_dict()})
