"""
Engine and session factories.

Nothing here is created at import time: callers build an engine from a
`Settings` instance and hand sessions to the repositories explicitly.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from userstore.config.settings import Settings

logger = logging.getLogger(__name__)


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    Let SQLite honour SAVEPOINT / nested transactions.

    The sqlite3 driver (and aiosqlite on top of it) emits its own BEGIN lazily,
    which breaks SAVEPOINT handling. Turn that off and emit BEGIN ourselves.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(settings: Settings, url: str | None = None) -> AsyncEngine:
    """
    Create the AsyncEngine (and its connection pool) for `settings`.

    Args:
        settings: application settings
        url: optional URL overriding `settings.DATABASE_URL` (tests use this)
    """
    database_url = url or settings.DATABASE_URL
    engine = create_async_engine(
        database_url,
        echo=settings.SQLALCHEMY_ECHO,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
    )

    if engine.dialect.name == "sqlite":
        _enable_sqlite_savepoints(engine)

    logger.debug("database.engine_created", extra={"dialect": engine.dialect.name})
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False keeps domain mapping possible after the caller commits
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_scope(factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """
    Unit of work owned by the caller: commit on success, rollback on error.

    Usage:
        async with session_scope(factory) as session:
            repo = UserRepository(session)
            await repo.create(user)
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except BaseException:
            await session.rollback()
            raise
