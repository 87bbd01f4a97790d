"""
FastAPI dependencies: settings, session, repositories, services, and the
bearer-token guard. Everything long-lived comes from `app.state`, filled in
by the app factory.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from psu_catalog.auth.jwt_manager import JWTManager, TokenClaims
from psu_catalog.auth.passwords import PasswordHasher
from psu_catalog.config.settings import Settings
from psu_catalog.database.session import get_async_session
from psu_catalog.exceptions.base import InvalidTokenError, UnauthorizedError
from psu_catalog.repositories.power_supply_repository import PowerSupplyRepository
from psu_catalog.repositories.user_repository import UserRepository
from psu_catalog.services.power_supply_service import PowerSupplyService
from psu_catalog.services.user_service import UserService

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must become our UNAUTHORIZED envelope, not a bare 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_jwt_manager(request: Request) -> JWTManager:
    return request.app.state.jwt_manager


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


SessionDep = Annotated[AsyncSession, Depends(get_async_session)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]


def get_user_repository(db: SessionDep, settings: SettingsDep) -> UserRepository:
    return UserRepository(db, query_timeout=settings.DB_QUERY_TIMEOUT)


def get_power_supply_repository(db: SessionDep, settings: SettingsDep) -> PowerSupplyRepository:
    return PowerSupplyRepository(db, query_timeout=settings.DB_QUERY_TIMEOUT)


def get_user_service(
    repository: Annotated[UserRepository, Depends(get_user_repository)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserService:
    return UserService(repository, password_hasher)


def get_power_supply_service(
    repository: Annotated[PowerSupplyRepository, Depends(get_power_supply_repository)],
) -> PowerSupplyService:
    return PowerSupplyService(repository)


def get_bearer_token(request: Request) -> str:
    """
    Extract the raw token from `Authorization: Bearer <token>`.

    Raises:
        UnauthorizedError: header missing.
        InvalidTokenError: header present but not in Bearer form.
    """
    header = request.headers.get("Authorization")
    if not header:
        logger.info("auth.missing_header", extra={"path": request.url.path})
        raise UnauthorizedError()

    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        logger.info("auth.malformed_header", extra={"path": request.url.path})
        raise InvalidTokenError()
    return token.strip()


async def get_current_claims(
    request: Request,
    jwt_manager: Annotated[JWTManager, Depends(get_jwt_manager)],
    # declared so the OpenAPI docs show the bearer scheme; parsing happens in get_bearer_token
    _credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenClaims:
    claims = jwt_manager.parse_token(get_bearer_token(request))
    logger.debug(
        "auth.authenticated",
        extra={"user_id": claims.user_id, "path": request.url.path},
    )
    return claims


CurrentClaims = Annotated[TokenClaims, Depends(get_current_claims)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
PowerSupplyServiceDep = Annotated[PowerSupplyService, Depends(get_power_supply_service)]
JWTManagerDep = Annotated[JWTManager, Depends(get_jwt_manager)]
