import asyncio
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .base import AlreadyExistsError, AppError, DatabaseError
from .integrity_classifier import ConstraintViolation, classify_integrity_error

logger = logging.getLogger(__name__)


# -----------------------
# Mapper
# -----------------------

def map_integrity_error(exc: IntegrityError, resource: str | None = None) -> AppError:
    """
    Map a SQLAlchemy IntegrityError to an app-level exception (not raised).

    Unique violations become AlreadyExistsError carrying the offending columns in
    `fields`; every other constraint failure is a DatabaseError. Raw driver text
    never reaches the message.
    """
    diagnosis = classify_integrity_error(exc)
    resource_part = resource or "record"

    if diagnosis.violation is ConstraintViolation.UNIQUE:
        # expected client-level scenario (409), not an operational problem
        logger.info(
            "mapper.duplicate_detected",
            extra={
                "resource": resource_part,
                "fields": diagnosis.columns,
                "constraint": diagnosis.constraint,
            },
        )
        return AlreadyExistsError(resource_part, fields=diagnosis.columns, cause=exc)

    logger.warning(
        "mapper.integrity_violation",
        extra={
            "resource": resource_part,
            "violation": diagnosis.violation.value,
            "fields": diagnosis.columns,
            "constraint": diagnosis.constraint,
        },
    )
    if diagnosis.violation is ConstraintViolation.NOT_NULL and diagnosis.columns:
        message = f"missing required field(s) for {resource_part}: {', '.join(diagnosis.columns)}"
    else:
        message = f"{resource_part} violates a database constraint"
    return DatabaseError(message, fields=diagnosis.columns, cause=exc)


async def _safe_rollback(db: AsyncSession, resource: str | None) -> None:
    if db.in_nested_transaction():
        # the enclosing begin_nested() block rolls back to its SAVEPOINT;
        # a full rollback here would also discard the work done before it
        return
    try:
        await db.rollback()
    except Exception:
        logger.exception("mapper.rollback_failed", extra={"resource": resource})


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def db_error_handler(
    db: AsyncSession,
    resource: str | None = None,
    timeout: float | None = None,
):
    """
    Usage:
        async with db_error_handler(self.db, self.resource_name, self.query_timeout):
            ... DB ops ...

    - AppError raised inside the block passes through untouched.
    - IntegrityError is rolled back and mapped (unique -> AlreadyExistsError).
    - Anything else, including an expired `timeout`, is rolled back and
      re-raised as DatabaseError with the original chained as the cause.
    Inside a SAVEPOINT only the savepoint is rolled back, by its own block.
    Task cancellation is not intercepted.
    """
    try:
        async with asyncio.timeout(timeout):
            yield
    except AppError:
        raise
    except IntegrityError as exc:
        await _safe_rollback(db, resource)
        raise map_integrity_error(exc, resource) from exc
    except TimeoutError as exc:
        await _safe_rollback(db, resource)
        logger.error("mapper.query_timeout", extra={"resource": resource, "timeout": timeout})
        raise DatabaseError(f"{resource or 'database'} query timed out", cause=exc) from exc
    except Exception as exc:
        await _safe_rollback(db, resource)
        logger.exception("mapper.unexpected_db_error", extra={"resource": resource})
        raise DatabaseError(f"failed to operate on {resource or 'database'}", cause=exc) from exc
