"""
User repository: the generic CRUD engine plus user lookups and list filters.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from psu_catalog.models.user import User
from psu_catalog.schemas.query_options import UserQueryOptions

from .base_repository import BaseRepository
from .query import Filter, equals, equals_if_present, like, order_by_desc, paginate

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for User entity operations.

    Inherits create / get_by_id / update / delete / count ... from
    `BaseRepository` and adds username lookup and option-based listing.
    """

    resource_name = "user"

    def __init__(self, db: AsyncSession, *, query_timeout: float | None = None):
        super().__init__(User, db, query_timeout=query_timeout)

    async def find_by_username(self, username: str) -> User:
        """
        Raises:
            NotFoundError: no user has this username.
        """
        return await self.find_one(equals("username", username))

    async def find_by_email(self, email: str) -> User:
        return await self.find_one(equals("email", email))

    @staticmethod
    def option_filters(options: UserQueryOptions) -> list[Filter]:
        """WHERE clauses only; shared by listing and counting."""
        return [
            like("username", options.username),
            like("email", options.email),
            equals_if_present("status", options.status),
        ]

    async def list_by_options(self, options: UserQueryOptions) -> list[User]:
        """One page of users matching `options`, newest id first."""
        users = await self.get_all(
            *self.option_filters(options),
            order_by_desc("id"),
            paginate(options.page, options.page_size),
        )
        logger.debug(
            "user_repo.list_by_options",
            extra={"page": options.page, "page_size": options.page_size, "count": len(users)},
        )
        return users

    async def count_by_options(self, options: UserQueryOptions) -> int:
        return await self.count(*self.option_filters(options))
