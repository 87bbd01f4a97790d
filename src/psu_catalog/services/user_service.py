"""
User business logic: registration, profile updates, listing and login.
"""

import logging
from typing import Any

from psu_catalog.auth.passwords import PasswordHasher
from psu_catalog.exceptions.base import (
    AlreadyExistsError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from psu_catalog.models.user import User
from psu_catalog.repositories.user_repository import UserRepository
from psu_catalog.schemas.query_options import UserQueryOptions
from psu_catalog.schemas.user import (
    LoginRequest,
    UserCreateRequest,
    UserListRequest,
    UserUpdateRequest,
)
from psu_catalog.utils.pagination import get_page_info

logger = logging.getLogger(__name__)

# Same message for "no such user" and "wrong password" (no account enumeration)
INVALID_CREDENTIALS_MESSAGE = "username or password incorrect"
ACCOUNT_DISABLED_MESSAGE = "account disabled"

STATUS_ENABLED = 1


class UserService:
    def __init__(self, repository: UserRepository, password_hasher: PasswordHasher | None = None):
        self.repository = repository
        self.password_hasher = password_hasher or PasswordHasher()

    async def create(self, request: UserCreateRequest) -> User:
        """
        Register a user.

        The username pre-check only gives a friendlier error; the unique index
        stays the authority, so a concurrent duplicate (or a duplicate email)
        still surfaces as AlreadyExistsError from the repository.
        """
        try:
            await self.repository.find_by_username(request.username)
        except NotFoundError:
            pass
        else:
            logger.info("user.create.duplicate_username", extra={"username": request.username})
            raise AlreadyExistsError("username", fields=["username"])

        user = User(
            username=request.username,
            hashed_password=self.password_hasher.hash(request.password),
            # "" -> NULL: optional columns, and email is unique
            email=request.email or None,
            phone=request.phone or None,
            nickname=request.nickname or None,
            avatar=request.avatar or None,
            status=STATUS_ENABLED,
        )
        user = await self.repository.create(user)
        logger.info("user.create.success", extra={"user_id": user.id, "username": user.username})
        return user

    async def get_by_id(self, user_id: int) -> User:
        return await self.repository.get_by_id(user_id)

    async def get_by_username(self, username: str) -> User:
        return await self.repository.find_by_username(username)

    async def update(self, user_id: int, request: UserUpdateRequest) -> User:
        """
        Sparse patch: only non-empty strings and a non-None status are written.
        A request with nothing to change returns the stored user untouched.
        """
        user = await self.repository.get_by_id(user_id)

        updates: dict[str, Any] = {}
        for field in ("email", "phone", "nickname", "avatar"):
            value = getattr(request, field)
            if value != "":
                updates[field] = value
        if request.status is not None:
            updates["status"] = request.status

        if not updates:
            return user

        await self.repository.update(user, updates)
        return await self.repository.get_by_id(user_id)

    async def delete(self, user_id: int) -> None:
        await self.repository.delete(user_id)
        logger.info("user.delete.success", extra={"user_id": user_id})

    @staticmethod
    def _query_options(request: UserListRequest) -> UserQueryOptions:
        page, page_size = get_page_info(request.page, request.page_size)
        return UserQueryOptions(
            username=request.username,
            email=request.email,
            status=request.status,
            page=page,
            page_size=page_size,
        )

    async def list_users(self, request: UserListRequest) -> tuple[list[User], int]:
        """Return one page of users and the total number of matches."""
        options = self._query_options(request)
        total = await self.repository.count_by_options(options)
        users = await self.repository.list_by_options(options)
        return users, total

    async def count(self, request: UserListRequest) -> int:
        return await self.repository.count_by_options(self._query_options(request))

    async def login(self, request: LoginRequest) -> User:
        """
        Check credentials and return the user.

        Raises:
            UnauthorizedError: unknown username or wrong password (same message).
            ForbiddenError: correct password but the account is disabled.
        """
        try:
            user = await self.repository.find_by_username(request.username)
        except NotFoundError:
            logger.info("user.login.unknown_username", extra={"username": request.username})
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE) from None

        if not self.verify_password(user.hashed_password, request.password):
            logger.info("user.login.wrong_password", extra={"user_id": user.id})
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        # status is only revealed to someone who knows the password
        if user.status != STATUS_ENABLED:
            logger.info("user.login.disabled", extra={"user_id": user.id})
            raise ForbiddenError(ACCOUNT_DISABLED_MESSAGE)

        logger.info("user.login.success", extra={"user_id": user.id})
        return user

    def verify_password(self, hashed_password: str, password: str) -> bool:
        return self.password_hasher.verify(password, hashed_password)
