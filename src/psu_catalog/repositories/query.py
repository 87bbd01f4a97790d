"""
Composable query filters.

A filter is a small immutable value describing one modification of a SELECT
(a WHERE predicate, an ORDER BY, a LIMIT/OFFSET window, a loader option...).
Services build a tuple of filters; `apply_filters` folds them left-to-right
onto a SQLAlchemy `Select` for a given model.

Keeping filters as plain data (instead of closures over the statement) means
they can be compared and inspected in unit tests without a database:

    >>> like("name", "corsair")
    Predicate(field='name', op=<Operator.LIKE: 'like'>, value='%corsair%')
    >>> like("name", "")
    NOOP

Filters never validate field names; a typo surfaces as an AttributeError when
the statement is built, which integration tests catch.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence, Union

from sqlalchemy import Select
from sqlalchemy.orm import defer, load_only


class Operator(str, Enum):
    EQ = "eq"
    IN = "in"
    LIKE = "like"
    GE = "ge"
    LE = "le"
    GT = "gt"
    LT = "lt"
    BETWEEN = "between"
    IS_NULL = "is_null"
    NOT_NULL = "not_null"


@dataclass(frozen=True)
class Predicate:
    field: str
    op: Operator
    value: Any = None


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Window:
    """LIMIT / OFFSET. `None` leaves that half of the window untouched."""
    offset: int | None = None
    limit: int | None = None


@dataclass(frozen=True)
class Distinct:
    fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class Project:
    """Load only these columns (the primary key is always loaded)."""
    fields: tuple[str, ...]


@dataclass(frozen=True)
class Omit:
    """Defer loading of these columns."""
    fields: tuple[str, ...]


@dataclass(frozen=True)
class Combined:
    filters: tuple["Filter", ...]


class _Noop:
    """Filter that leaves the statement unchanged."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOOP"

    def __bool__(self) -> bool:
        return False


NOOP = _Noop()

Filter = Union[Predicate, OrderBy, Window, Distinct, Project, Omit, Combined, _Noop]


# =================================================================================================================
# Predicates
# =================================================================================================================

def equals(field: str, value: Any) -> Filter:
    return Predicate(field, Operator.EQ, value)


def in_(field: str, values: Iterable[Any]) -> Filter:
    return Predicate(field, Operator.IN, tuple(values))


LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Make `%`, `_` and the escape character match themselves in a LIKE pattern."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def like(field: str, value: str) -> Filter:
    """
    Substring match (`%value%`). An empty string means "no filter".

    `value` is literal text: wildcards typed by a user are escaped.
    """
    if value == "":
        return NOOP
    return Predicate(field, Operator.LIKE, f"%{escape_like(value)}%")


def gte(field: str, value: Any) -> Filter:
    return Predicate(field, Operator.GE, value)


def lte(field: str, value: Any) -> Filter:
    return Predicate(field, Operator.LE, value)


def gt(field: str, value: Any) -> Filter:
    return Predicate(field, Operator.GT, value)


def lt(field: str, value: Any) -> Filter:
    return Predicate(field, Operator.LT, value)


def between(field: str, low: Any, high: Any) -> Filter:
    return Predicate(field, Operator.BETWEEN, (low, high))


def is_null(field: str) -> Filter:
    return Predicate(field, Operator.IS_NULL)


def not_null(field: str) -> Filter:
    return Predicate(field, Operator.NOT_NULL)


# -----------------------
# Conditional predicates
# -----------------------

def equals_if(condition: bool, field: str, value: Any) -> Filter:
    return equals(field, value) if condition else NOOP


def like_if(condition: bool, field: str, value: str) -> Filter:
    return like(field, value) if condition else NOOP


# `None` means "filter absent"; 0 / False / "" are real filter values
def equals_if_present(field: str, value: Any | None) -> Filter:
    return NOOP if value is None else equals(field, value)


def gte_if_present(field: str, value: Any | None) -> Filter:
    return NOOP if value is None else gte(field, value)


def lte_if_present(field: str, value: Any | None) -> Filter:
    return NOOP if value is None else lte(field, value)


# =================================================================================================================
# Ordering, windowing and loading
# =================================================================================================================

def order_by(field: str) -> Filter:
    return OrderBy(field)


def order_by_desc(field: str) -> Filter:
    return OrderBy(field, descending=True)


def order_by_many(*fields: str) -> Filter:
    """`order_by_many("-price", "name")` -> ORDER BY price DESC, name ASC"""
    return combine(
        *(OrderBy(f[1:], descending=True) if f.startswith("-") else OrderBy(f) for f in fields)
    )


def paginate(page: int, page_size: int) -> Filter:
    """1-based page window. No-op unless both arguments are >= 1."""
    if page < 1 or page_size < 1:
        return NOOP
    return Window(offset=(page - 1) * page_size, limit=page_size)


def limit(n: int) -> Filter:
    return Window(limit=n)


def offset(n: int) -> Filter:
    return Window(offset=n)


def distinct(*fields: str) -> Filter:
    # column arguments to DISTINCT are PostgreSQL-only (DISTINCT ON)
    return Distinct(tuple(fields))


def project(*fields: str) -> Filter:
    return Project(tuple(fields))


def omit(*fields: str) -> Filter:
    return Omit(tuple(fields))


def combine(*filters: Filter) -> Filter:
    """Fold several filters into one; nested combinations are flattened and no-ops dropped."""
    flat: list[Filter] = []
    for f in filters:
        if isinstance(f, Combined):
            flat.extend(f.filters)
        elif f is not NOOP:
            flat.append(f)
    if not flat:
        return NOOP
    if len(flat) == 1:
        return flat[0]
    return Combined(tuple(flat))


# =================================================================================================================
# Interpreter
# =================================================================================================================

def _column(model, field: str):
    # AttributeError on unknown fields is intentional: it is a caller bug
    return getattr(model, field)


def _apply_predicate(stmt: Select, model, p: Predicate) -> Select:
    col = _column(model, p.field)
    if p.op is Operator.EQ:
        return stmt.where(col == p.value)
    if p.op is Operator.IN:
        return stmt.where(col.in_(p.value))
    if p.op is Operator.LIKE:
        return stmt.where(col.like(p.value, escape=LIKE_ESCAPE))
    if p.op is Operator.GE:
        return stmt.where(col >= p.value)
    if p.op is Operator.LE:
        return stmt.where(col <= p.value)
    if p.op is Operator.GT:
        return stmt.where(col > p.value)
    if p.op is Operator.LT:
        return stmt.where(col < p.value)
    if p.op is Operator.BETWEEN:
        low, high = p.value
        return stmt.where(col.between(low, high))
    if p.op is Operator.IS_NULL:
        return stmt.where(col.is_(None))
    if p.op is Operator.NOT_NULL:
        return stmt.where(col.is_not(None))
    raise ValueError(f"unsupported operator: {p.op!r}")


def apply_filter(stmt: Select, model, f: Filter) -> Select:
    if f is NOOP:
        return stmt
    if isinstance(f, Predicate):
        return _apply_predicate(stmt, model, f)
    if isinstance(f, OrderBy):
        col = _column(model, f.field)
        return stmt.order_by(col.desc() if f.descending else col.asc())
    if isinstance(f, Window):
        if f.offset is not None:
            stmt = stmt.offset(f.offset)
        if f.limit is not None:
            stmt = stmt.limit(f.limit)
        return stmt
    if isinstance(f, Distinct):
        return stmt.distinct(*(_column(model, name) for name in f.fields))
    if isinstance(f, Project):
        return stmt.options(load_only(*(_column(model, name) for name in f.fields)))
    if isinstance(f, Omit):
        return stmt.options(*(defer(_column(model, name)) for name in f.fields))
    if isinstance(f, Combined):
        return apply_filters(stmt, model, f.filters)
    raise TypeError(f"not a query filter: {f!r}")


def apply_filters(stmt: Select, model, filters: Sequence[Filter]) -> Select:
    """
    Fold `filters` onto `stmt` in order.

    SQLAlchemy renders WHERE before ORDER BY / LIMIT / OFFSET no matter when each
    clause was attached, so a window never limits rows before predicates apply.
    """
    for f in filters:
        stmt = apply_filter(stmt, model, f)
    return stmt


def strip_window(filters: Sequence[Filter]) -> list[Filter]:
    """Drop LIMIT/OFFSET (including inside combinations), e.g. before counting."""
    out: list[Filter] = []
    for f in filters:
        if isinstance(f, Window):
            continue
        if isinstance(f, Combined):
            inner = strip_window(f.filters)
            out.append(combine(*inner))
            continue
        out.append(f)
    return out


__all__ = [
    "Operator",
    "Predicate",
    "OrderBy",
    "Window",
    "Distinct",
    "Project",
    "Omit",
    "Combined",
    "NOOP",
    "Filter",
    "equals",
    "in_",
    "LIKE_ESCAPE",
    "escape_like",
    "like",
    "gte",
    "lte",
    "gt",
    "lt",
    "between",
    "is_null",
    "not_null",
    "equals_if",
    "like_if",
    "equals_if_present",
    "gte_if_present",
    "lte_if_present",
    "order_by",
    "order_by_desc",
    "order_by_many",
    "paginate",
    "limit",
    "offset",
    "distinct",
    "project",
    "omit",
    "combine",
    "apply_filter",
    "apply_filters",
    "strip_window",
]
