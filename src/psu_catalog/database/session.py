import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from psu_catalog.config import Settings
from .base import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    pysqlite issues its own BEGIN lazily, which breaks SAVEPOINT handling.
    Take over transaction control so `begin_nested()` works on SQLite.
    """
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_engine_from_url(
    url: str,
    *,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_recycle: int = 3600,
) -> AsyncEngine:
    """
    Build the AsyncEngine.

    Server databases get a bounded pool (pool_size idle, pool_size + max_overflow
    open, pool_recycle seconds lifetime, pre-ping health checks). SQLite in-memory
    databases share a single connection so every session sees the same data.
    """
    parsed = make_url(url)

    if parsed.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_async_engine(url, echo=echo, **kwargs)
        _enable_sqlite_savepoints(engine)
        return engine

    return create_async_engine(
        url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,     # Enables connection health checks
    )


def create_engine(settings: Settings) -> AsyncEngine:
    return create_engine_from_url(
        settings.DATABASE_URL,
        echo=settings.SQLALCHEMY_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # `async_sessionmaker` returns an async session factory.
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create missing tables (apply-on-startup table sync, no migrations)."""
    # registers every model on Base.metadata
    import psu_catalog.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("db.init_models.success", extra={"tables": sorted(Base.metadata.tables)})


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. One session per request, committed on success.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_async_session)):
            await db.execute(...)
    """
    session_maker: async_sessionmaker[AsyncSession] = request.app.state.session_maker
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
