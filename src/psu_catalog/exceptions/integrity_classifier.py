"""
Classification of storage-level integrity failures.

SQLAlchemy raises a single `IntegrityError` for every constraint the database
rejects. Callers above the repository only care whether the failure was a
duplicate (client error, 409) or something else (server error), so this module
reduces the driver error to a `ConstraintViolation` tag plus, where the driver
tells us, the constraint name and the offending columns.

The tags never leave the exceptions package; `mapper.py` turns them into
`AppError` subclasses.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ConstraintViolation(Enum):
    UNIQUE = "unique"
    NOT_NULL = "not_null"
    FOREIGN_KEY = "foreign_key"
    CHECK = "check"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IntegrityDiagnosis:
    violation: ConstraintViolation
    constraint: str | None = None
    columns: list[str] | None = None


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"


PGCODE_VIOLATION_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION.value: ConstraintViolation.UNIQUE,
    PostgresErrorCodes.NOT_NULL_VIOLATION.value: ConstraintViolation.NOT_NULL,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION.value: ConstraintViolation.FOREIGN_KEY,
    PostgresErrorCodes.CHECK_VIOLATION.value: ConstraintViolation.CHECK,
}

# MySQL error numbers, first element of the driver exception's args
MYSQL_ERRNO_VIOLATION_MAP = {
    1062: ConstraintViolation.UNIQUE,
    1048: ConstraintViolation.NOT_NULL,
    1452: ConstraintViolation.FOREIGN_KEY,
    3819: ConstraintViolation.CHECK,
}


# =================================================================================================================
# Violation classifiers
# =================================================================================================================

def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _postgres_code(orig) -> str | None:
    # psycopg 3 exposes `sqlstate`, psycopg2 / asyncpg wrappers expose `pgcode`
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _classify_from_postgres_diag(orig) -> tuple[ConstraintViolation | None, str | None]:
    pgcode = _postgres_code(orig)
    if not pgcode:
        return None, None

    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None) if diag else None

    violation = PGCODE_VIOLATION_MAP.get(pgcode)
    if violation is not None:
        logger.debug(
            "integrity.postgres_diagnostic",
            extra={"pgcode": pgcode, "constraint_name": constraint_name},
        )
        return violation, constraint_name

    logger.warning(
        "integrity.unknown_pgcode",
        extra={"pgcode": pgcode, "constraint_name": constraint_name},
    )
    return ConstraintViolation.UNKNOWN, constraint_name


def _classify_from_mysql_errno(orig) -> ConstraintViolation | None:
    args = getattr(orig, "args", None) or ()
    if args and isinstance(args[0], int):
        return MYSQL_ERRNO_VIOLATION_MAP.get(args[0])
    return None


def _classify_from_generic_message(msg: str) -> ConstraintViolation:
    """Fallback for drivers that only give us text (SQLite)."""
    normalized = msg.lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return ConstraintViolation.UNIQUE

    if _match_any(normalized, ["not null constraint", "not null", "null value in column"]):
        return ConstraintViolation.NOT_NULL

    if _match_any(normalized, ["foreign key constraint", "foreign key", "is not present in table"]):
        return ConstraintViolation.FOREIGN_KEY

    if _match_any(normalized, ["check constraint", "check failed"]):
        return ConstraintViolation.CHECK

    logger.warning("integrity.unknown_message", extra={"message_snippet": (msg or "")[:200]})
    return ConstraintViolation.UNKNOWN


# =================================================================================================================
# Column extraction
# =================================================================================================================

def _extract_columns_postgres(msg: str) -> list[str] | None:
    # 'null value in column "username" ...'
    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    # 'DETAIL:  Key (email)=(a@b.com) already exists.'
    m = re.search(r"key \((?P<cols>[^)]+)\)=", msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # 'UNIQUE constraint failed: users.email' / 'NOT NULL constraint failed: users.username'
    m = re.search(r"(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$", msg, flags=re.IGNORECASE)
    if m:
        return [c.split(".")[-1].strip() for c in re.split(r",\s*", m.group("cols"))]
    return None


def _extract_columns_mysql(msg: str) -> list[str] | None:
    # "Duplicate entry 'foo' for key 'users.ix_users_email'"
    m = re.search(r"Duplicate entry .* for key '?(?P<key>[^']+)'?", msg, flags=re.IGNORECASE)
    if m:
        return [m.group("key").split(".")[-1]]
    return None


def extract_columns_from_integrity(exc: IntegrityError) -> list[str] | None:
    """Best-effort extraction of column names from the driver message."""
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    for extractor in (_extract_columns_postgres, _extract_columns_sqlite, _extract_columns_mysql):
        cols = extractor(msg)
        if cols:
            return cols
    return None


def classify_integrity_error(exc: IntegrityError) -> IntegrityDiagnosis:
    """
    Heuristically classify a SQLAlchemy IntegrityError.

    Postgres SQLSTATE codes win, then MySQL error numbers, then message
    keywords (SQLite and anything else).
    """
    orig = exc.orig
    columns = extract_columns_from_integrity(exc)

    violation, constraint_name = _classify_from_postgres_diag(orig)
    if violation is not None:
        return IntegrityDiagnosis(violation, constraint_name, columns)

    violation = _classify_from_mysql_errno(orig)
    if violation is not None:
        return IntegrityDiagnosis(violation, None, columns)

    return IntegrityDiagnosis(_classify_from_generic_message(str(orig)), None, columns)
