"""
Application error taxonomy.

Every failure that crosses a layer boundary (repository -> service -> HTTP) is an
`AppError`. The error *kind* is a closed enum; the HTTP layer only ever looks at
`exc.kind` to pick a status code, never at the concrete Python class.
"""

from enum import Enum
from typing import Any, Iterable


class ErrorKind(Enum):
    """
    Closed set of error kinds.

    The value is the stable numeric business code returned to clients in the
    `code` field of the response envelope (1xxx client errors, 5xxx server errors).
    """

    INVALID_PARAM = 1001
    UNAUTHORIZED = 1002
    FORBIDDEN = 1003
    NOT_FOUND = 1004
    ALREADY_EXISTS = 1005
    INVALID_TOKEN = 1006
    TOKEN_EXPIRED = 1007
    INVALID_REQUEST = 1008

    INTERNAL_ERROR = 5000
    DATABASE_ERROR = 5001
    CACHE_ERROR = 5002
    SERVICE_ERROR = 5003

    @property
    def code(self) -> int:
        return self.value

    @property
    def default_message(self) -> str:
        return _DEFAULT_MESSAGES[self]

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS.get(self, 500 if self.value >= 5000 else 400)


_DEFAULT_MESSAGES = {
    ErrorKind.INVALID_PARAM: "invalid parameter",
    ErrorKind.UNAUTHORIZED: "unauthorized, please log in",
    ErrorKind.FORBIDDEN: "forbidden",
    ErrorKind.NOT_FOUND: "resource not found",
    ErrorKind.ALREADY_EXISTS: "resource already exists",
    ErrorKind.INVALID_TOKEN: "invalid token",
    ErrorKind.TOKEN_EXPIRED: "token expired",
    ErrorKind.INVALID_REQUEST: "malformed request",
    ErrorKind.INTERNAL_ERROR: "internal server error",
    ErrorKind.DATABASE_ERROR: "database operation failed",
    ErrorKind.CACHE_ERROR: "cache operation failed",
    ErrorKind.SERVICE_ERROR: "service call failed",
}

# Kinds not listed fall back to 400 (1xxx) / 500 (5xxx)
_HTTP_STATUS = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.INVALID_TOKEN: 401,
    ErrorKind.TOKEN_EXPIRED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_EXISTS: 409,
}


class AppError(Exception):
    """
    Base exception for repository/service errors.

    - kind: closed error kind (drives the HTTP status and the business code)
    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field names related to the error (e.g., ['username'])
    - data: optional structured payload echoed to clients
    - cause: the lower-level exception, kept for logs only (also chained as __cause__)
    """

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(
        self,
        message: str | None = None,
        *,
        kind: ErrorKind | None = None,
        fields: Iterable[str] | None = None,
        data: Any = None,
        cause: BaseException | None = None,
    ):
        if kind is not None:
            self.kind = kind
        self.message = message or self.kind.default_message
        self.fields = list(fields) if fields else None
        self.data = data
        self.cause = cause
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        # keep the cause out of client payloads, but show it in logs / tests
        base = f"[{self.kind.code}] {self.message}"
        if self.fields:
            base = f"{base} (fields: {', '.join(self.fields)})"
        if self.cause is not None:
            base = f"{base}: {self.cause!r}"
        return base

    def to_payload(self) -> dict:
        """
        Return the JSON-serializable error envelope:
            {"code": 1004, "message": "user not found", "data": {...}}
        `data` is omitted when empty. The cause is never included.
        """
        payload: dict[str, Any] = {"code": self.kind.code, "message": self.message}
        data = self.data
        if data is None and self.fields:
            data = {"fields": list(self.fields)}
        if data is not None:
            payload["data"] = data
        return payload

    def http_status(self) -> int:
        return self.kind.http_status


class InvalidParamError(AppError):
    kind = ErrorKind.INVALID_PARAM


class InvalidRequestError(AppError):
    kind = ErrorKind.INVALID_REQUEST


class UnauthorizedError(AppError):
    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(AppError):
    kind = ErrorKind.FORBIDDEN


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str = "resource", **kwargs):
        super().__init__(f"{resource} not found", **kwargs)
        self.resource = resource


class AlreadyExistsError(AppError):
    kind = ErrorKind.ALREADY_EXISTS

    def __init__(self, resource: str = "resource", **kwargs):
        super().__init__(f"{resource} already exists", **kwargs)
        self.resource = resource


class InvalidTokenError(AppError):
    kind = ErrorKind.INVALID_TOKEN


class TokenExpiredError(AppError):
    kind = ErrorKind.TOKEN_EXPIRED


class InternalError(AppError):
    kind = ErrorKind.INTERNAL_ERROR


class DatabaseError(AppError):
    kind = ErrorKind.DATABASE_ERROR


class CacheError(AppError):
    kind = ErrorKind.CACHE_ERROR


class ServiceError(AppError):
    kind = ErrorKind.SERVICE_ERROR


def as_app_error(exc: BaseException) -> AppError:
    """
    Return `exc` unchanged when it is already an AppError; otherwise wrap it
    as an InternalError so nothing about the original failure leaks to callers.
    """
    if isinstance(exc, AppError):
        return exc
    return InternalError(cause=exc)


__all__ = [
    "ErrorKind",
    "AppError",
    "InvalidParamError",
    "InvalidRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "AlreadyExistsError",
    "InvalidTokenError",
    "TokenExpiredError",
    "InternalError",
    "DatabaseError",
    "CacheError",
    "ServiceError",
    "as_app_error",
]
