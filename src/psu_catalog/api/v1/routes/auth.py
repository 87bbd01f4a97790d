import logging

from fastapi import APIRouter, Request

from psu_catalog.api.deps import JWTManagerDep, UserServiceDep, get_bearer_token
from psu_catalog.api.v1.responses import success
from psu_catalog.schemas.user import (
    LoginRequest,
    LoginResponse,
    TokenResponse,
    UserCreateRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
async def register(payload: UserCreateRequest, service: UserServiceDep):
    user = await service.create(payload)
    return success(UserResponse.model_validate(user))


@router.post("/login")
async def login(payload: LoginRequest, service: UserServiceDep, jwt_manager: JWTManagerDep):
    user = await service.login(payload)
    token = jwt_manager.issue_token(user.id, user.username)
    return success(LoginResponse(token=token, user=UserResponse.model_validate(user)))


@router.post("/refresh")
async def refresh(request: Request, jwt_manager: JWTManagerDep):
    """Exchange a still-valid token for one with a fresh expiry."""
    token = jwt_manager.refresh_token(get_bearer_token(request))
    return success(TokenResponse(token=token))
