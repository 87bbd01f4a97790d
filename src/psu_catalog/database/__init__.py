from .base import Base, TimestampMixin
from .session import (
    create_engine,
    create_engine_from_url,
    create_session_maker,
    get_async_session,
    init_models,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "create_engine",
    "create_engine_from_url",
    "create_session_maker",
    "get_async_session",
    "init_models",
]
