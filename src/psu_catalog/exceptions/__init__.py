from .base import (
    ErrorKind,
    AppError,
    InvalidParamError,
    InvalidRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    AlreadyExistsError,
    InvalidTokenError,
    TokenExpiredError,
    InternalError,
    DatabaseError,
    CacheError,
    ServiceError,
    as_app_error,
)

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
