"""
Core pytest configuration for the test suite.

Provides the database setup shared by every test that touches storage.
Domain-specific fixtures live in `tests/test_fixtures/` and are re-exported
at the bottom of this module so any test can request them by name.

Database selection:
  1. `TEST_DATABASE_URL` environment variable (e.g. a PostgreSQL instance in CI)
  2. otherwise a throwaway SQLite file per test (sqlite+aiosqlite)
"""

# -------------------------------
# Standard library imports
# -------------------------------
import os
import logging
from pathlib import Path
from urllib.parse import urlparse
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning
# -------------------------------
# Silence noisy third-party loggers before anything imports them.
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "aiosqlite",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from userstore.config.settings import Settings
from userstore.core.logging.builder import setup_logging
from userstore.database.schema import create_schema, drop_schema
from userstore.database.session import build_engine, build_session_factory

logger = logging.getLogger(__name__)


# Console-only logging for tests: never write files under LOG_DIR
TEST_SETTINGS = Settings(
    ENV="testing",
    TESTING=True,
    LOG_TO_STDOUT=True,
    LOG_FORMAT="text",
    LOG_LEVEL="DEBUG",
)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install the application's logging configuration once for the session, so
    formatters and filters run for every record the code under test emits.
    """
    setup_logging(TEST_SETTINGS)
    # dictConfig resets levels on existing loggers; re-apply the quiet list
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    yield


# ------------------------------------------------------------------------------------------------
# Test database URL
# ------------------------------------------------------------------------------------------------


def safe_log_db_url(db_url: str) -> str:
    """
    Return the database URL without credentials, for logging.
    """
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url(tmp_dir: Path) -> str:
    """
    Determine the test database URL.

    `TEST_DATABASE_URL` wins (CI/CD override). Otherwise each test gets its own
    SQLite file under `tmp_dir`, so tests never share rows.
    """
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url
    return f"sqlite+aiosqlite:///{tmp_dir / 'userstore_test.db'}"


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture()
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Engine with a freshly created schema, dropped and disposed after the test.
    """
    url = get_test_database_url(tmp_path)
    logger.debug("tests.database", extra={"url": safe_log_db_url(url)})

    engine = build_engine(TEST_SETTINGS, url=url)
    await create_schema(engine)

    yield engine

    await drop_schema(engine)
    await engine.dispose()


@pytest.fixture()
async def session_factory(async_engine: AsyncEngine):
    return build_session_factory(async_engine)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Session for one test. Nothing is committed unless the test does so itself;
    whatever is left pending is rolled back at the end.
    """
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# Repository test fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402
    make_user,
    user_repository,
    soft_user_repository,
    created_user,
)
