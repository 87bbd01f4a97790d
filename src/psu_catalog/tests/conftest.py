"""
Core pytest configuration for the entire test suite.

This module provides only the database setup and logging installation that
every kind of test needs (repositories, services, API, auth...).

Domain-specific fixtures live in:
- tests/test_fixtures/repository_fixtures.py
- tests/test_fixtures/service_fixtures.py
- tests/test_fixtures/api_fixtures.py
"""

from __future__ import annotations

# -------------------------------
# Standard library imports
# -------------------------------
import logging
from urllib.parse import urlparse
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning (IMPORTANT)
# -------------------------------
# Silence noisy third-party loggers at import time, before the modules that
# create them are imported. Keep this block above the project imports.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
    "urllib3",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from pytest import FixtureRequest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from psu_catalog.core.logging.builder import setup_logging
from psu_catalog.database.base import Base
from psu_catalog.database.session import create_engine_from_url, create_session_maker
from .test_fixtures.config import get_test_database_url, make_test_settings
import psu_catalog.models  # noqa: F401 - registers every table on Base.metadata

logger = logging.getLogger(__name__)


# The `autouse=True` part means pytest applies this fixture without tests asking for it.
@pytest.fixture(scope="session", autouse=True)
def configure_logging(request: FixtureRequest):
    """
    Install application logging for the whole test session.

    - Calls `setup_logging(...)` so tests run with the same formatters, handlers
      and filters as the app.
    - Re-attaches pytest's capture handler, which dictConfig removes from the
      root logger, so `caplog.records` keeps working.
    """
    setup_logging(make_test_settings())

    caplog_plugin = request.config.pluginmanager.getplugin("logging-plugin")
    handler = getattr(caplog_plugin, "caplog_handler", None)
    if handler is not None:
        logging.getLogger().addHandler(handler)

    yield


# ------------------------------------------------------------------------------------------------
# Determining and Logging the Test Database URL for Tests
# ------------------------------------------------------------------------------------------------


def safe_log_db_url(db_url: str) -> str:
    """
    Return the database URL without credentials, for logging.

    Only the scheme, host, port and database name are kept.
    """
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


TEST_DATABASE_URL = get_test_database_url()
logger.info(f"Using test DB: {safe_log_db_url(TEST_DATABASE_URL)}")


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture()
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    A fresh schema per test.

    With the default in-memory SQLite URL every engine is its own database, so
    tests can commit freely without leaking rows into each other.
    """
    engine = create_engine_from_url(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture()
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    An AsyncSession on the per-test engine (expire_on_commit=False, same as the app).

    Whatever the test leaves uncommitted is rolled back on teardown.
    """
    maker = create_session_maker(async_engine)
    async with maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


# Fixtures shared by the whole suite
from .test_fixtures.repository_fixtures import (  # noqa: E402
    base_repo,
    user_repository,
    power_supply_repository,
    sample_user_data,
    create_user,
    created_user,
    multiple_users,
    create_power_supply,
    psu_catalog_entries,
)
from .test_fixtures.service_fixtures import (  # noqa: E402
    password_hasher,
    user_service,
    power_supply_service,
    registered_user,
)
from .test_fixtures.api_fixtures import (  # noqa: E402
    app_settings,
    app,
    client,
    auth_headers,
)
