"""
Base repository class providing common database operations.

This class serves as a reusable foundation for repositories that interact with
the database using SQLAlchemy's async sessions. Model-specific repositories
inherit from it and only add their own lookups and filter sets.

Conventions shared by every method:
  - "no row" is never returned as `None`; it is raised as NotFoundError.
  - every statement runs inside `db_error_handler`, so callers only ever see
    AppError subclasses (AlreadyExistsError, DatabaseError, ...).
  - repositories flush but never commit; the unit of work (the request, or
    `transaction()`) decides when changes become permanent.
"""

import logging
import time
from typing import Any, Awaitable, Callable, Generic, Type, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from psu_catalog.database.base import Base
from psu_catalog.exceptions.base import InvalidParamError, NotFoundError
from psu_catalog.exceptions.mapper import db_error_handler
from psu_catalog.validators.model_validators import find_unknown_fields, primary_key_fields

from .query import Filter, apply_filters, strip_window

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)
T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    # Used in "<resource> not found" / "<resource> already exists" messages
    resource_name: str = "record"

    def __init__(
        self,
        model: Type[ModelType],
        db: AsyncSession,
        *,
        query_timeout: float | None = None,
    ):
        """
        Args:
            model: The SQLAlchemy model class itself (e.g. `User`, not `User()`),
                needed to build `select(self.model)`, `update(self.model)`...
            db: The async session, shared with the caller (usually injected
                per request by a FastAPI dependency).
            query_timeout: Deadline in seconds for each repository operation.
                An expired deadline surfaces as DatabaseError.
        """
        self.model = model
        self.db = db
        self.query_timeout = query_timeout

    def _guard(self):
        return db_error_handler(self.db, self.resource_name, self.query_timeout)

    def _validate_fields(self, fields: dict[str, Any], operation: str) -> None:
        unknown = find_unknown_fields(self.model, fields)
        protected = sorted(primary_key_fields(self.model) & fields.keys())
        invalid = unknown + protected
        if invalid:
            # INFO: caller error; expected input problem -> no stack trace
            logger.info(
                f"repo.{operation}.invalid_fields",
                extra={
                    "model": self.model.__name__,
                    "operation": operation,
                    "invalid_fields": invalid,
                },
            )
            raise InvalidParamError(
                f"unknown or read-only field(s) for {self.resource_name}: {', '.join(invalid)}",
                fields=invalid,
            )

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def create(self, entity: ModelType) -> ModelType:
        """
        Insert `entity` and return it with its generated id and server defaults
        (status, timestamps) loaded.

        Raises:
            AlreadyExistsError: a unique index rejected the row.
            DatabaseError: any other storage failure.
        """
        start = time.perf_counter()

        async with self._guard():
            self.db.add(entity)
            # INSERT inside the current transaction; committing is the caller's job
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.create.success",
            extra={
                "model": self.model.__name__,
                "operation": "create",
                "id": getattr(entity, "id", None),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    # =================================================================================================================
    # Read
    # =================================================================================================================

    async def get_by_id(self, entity_id: int) -> ModelType:
        """
        Get an entity by its primary key.

        Raises:
            NotFoundError: no row has this id.
        """
        async with self._guard():
            result = await self.db.execute(
                select(self.model)
                .where(self.model.id == entity_id)
                # overwrite stale identity-map state (e.g. after a bulk UPDATE)
                .execution_options(populate_existing=True)
            )
            entity = result.scalar_one_or_none()

        if entity is None:
            logger.debug(
                "repo.get_by_id.not_found",
                extra={"model": self.model.__name__, "id": entity_id},
            )
            raise NotFoundError(self.resource_name)
        return entity

    async def find_one(self, *filters: Filter) -> ModelType:
        """
        Return the first entity matching `filters`.

        Raises:
            NotFoundError: nothing matches.
        """
        stmt = apply_filters(select(self.model), self.model, filters).limit(1)

        async with self._guard():
            result = await self.db.execute(stmt.execution_options(populate_existing=True))
            entity = result.scalars().first()

        if entity is None:
            raise NotFoundError(self.resource_name)
        return entity

    async def get_all(self, *filters: Filter) -> list[ModelType]:
        """Return every entity matching `filters` (an empty list is a valid result)."""
        stmt = apply_filters(select(self.model), self.model, filters)

        async with self._guard():
            result = await self.db.execute(stmt)
            entities = list(result.scalars().all())

        logger.debug(
            "repo.get_all.success",
            extra={"model": self.model.__name__, "count": len(entities)},
        )
        return entities

    async def count(self, *filters: Filter) -> int:
        """
        Count rows matching `filters`.

        The filtered SELECT is wrapped in a subquery so ORDER BY is harmless;
        LIMIT/OFFSET are stripped so the total is not capped by a page window.
        """
        inner = apply_filters(select(self.model), self.model, strip_window(filters))
        stmt = select(func.count()).select_from(inner.subquery())

        async with self._guard():
            result = await self.db.execute(stmt)
            return result.scalar_one()

    async def exists(self, *filters: Filter) -> bool:
        return await self.count(*filters) > 0

    # =================================================================================================================
    # Update
    # =================================================================================================================

    def _update_values(self, fields: dict[str, Any]) -> dict[str, Any]:
        values = dict(fields)
        # database clock, not the app server's
        if hasattr(self.model, "updated_at") and "updated_at" not in values:
            values["updated_at"] = func.now()
        return values

    async def update(self, entity: ModelType, fields: dict[str, Any]) -> None:
        """
        Write only `fields` to the row identified by `entity`'s id, then refresh
        `entity` from the database. Columns not in `fields` are never touched.

        An empty map is a no-op. Whether the row still exists is not checked;
        use `update_by_id` when that matters.

        Raises:
            InvalidParamError: a key is not a writable column of the model.
            AlreadyExistsError: the new values collide with a unique index.
        """
        self._validate_fields(fields, "update")
        if not fields:
            logger.debug("repo.update.noop", extra={"model": self.model.__name__})
            return

        start = time.perf_counter()
        stmt = (
            update(self.model)
            .where(self.model.id == entity.id)
            .values(**self._update_values(fields))
            # `entity` is refreshed below, no need to synchronize the session
            .execution_options(synchronize_session=False)
        )

        async with self._guard():
            await self.db.execute(stmt)
            await self.db.refresh(entity)

        logger.info(
            "repo.update.success",
            extra={
                "model": self.model.__name__,
                "operation": "update",
                "id": entity.id,
                "updated_fields": sorted(fields),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )

    async def update_by_id(self, entity_id: int, fields: dict[str, Any]) -> None:
        """
        Like `update`, addressed by id.

        Raises:
            NotFoundError: no row has this id.
        """
        self._validate_fields(fields, "update_by_id")
        values = self._update_values(fields)
        if not values:
            # nothing to write; still honour the NotFound contract
            if not await self.exists_by_id(entity_id):
                raise NotFoundError(self.resource_name)
            return

        stmt = (
            update(self.model)
            .where(self.model.id == entity_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        async with self._guard():
            result = await self.db.execute(stmt)

        if result.rowcount == 0:
            logger.info(
                "repo.update_by_id.not_found",
                extra={"model": self.model.__name__, "id": entity_id},
            )
            raise NotFoundError(self.resource_name)

        logger.info(
            "repo.update_by_id.success",
            extra={"model": self.model.__name__, "id": entity_id, "updated_fields": sorted(fields)},
        )

    async def exists_by_id(self, entity_id: int) -> bool:
        async with self._guard():
            result = await self.db.execute(
                select(func.count()).select_from(self.model).where(self.model.id == entity_id)
            )
            return result.scalar_one() > 0

    # =================================================================================================================
    # Delete
    # =================================================================================================================

    async def delete(self, entity_id: int) -> None:
        """
        Hard-delete the row with this id.

        Raises:
            NotFoundError: no row was deleted (also on every repeated attempt).
        """
        stmt = delete(self.model).where(self.model.id == entity_id)

        async with self._guard():
            result = await self.db.execute(stmt)

        if result.rowcount == 0:
            logger.info(
                "repo.delete.not_found",
                extra={"model": self.model.__name__, "id": entity_id},
            )
            raise NotFoundError(self.resource_name)

        logger.info(
            "repo.delete.success",
            extra={"model": self.model.__name__, "operation": "delete", "id": entity_id},
        )

    # =================================================================================================================
    # Transactions
    # =================================================================================================================

    async def transaction(self, fn: Callable[[], Awaitable[T]]) -> T:
        """
        Run `await fn()` atomically and return its result.

        Uses a SAVEPOINT when the session already has a transaction open, so an
        exception only discards the work done inside `fn`. Any exception rolls
        the block back and propagates unchanged.
        """
        if self.db.in_transaction():
            async with self.db.begin_nested():
                return await fn()

        async with self.db.begin():
            return await fn()
