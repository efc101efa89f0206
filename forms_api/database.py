# forms_api/database.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from .config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless the pragma is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: Optional[str] = None, echo: bool = SQL_ECHO) -> AsyncEngine:
    """
    Creates the async engine for the given URL (default: DATABASE_URL).

    An in-memory SQLite URL gets a StaticPool so that every session shares the
    single connection that holds the database.
    """
    url = database_url or DATABASE_URL
    kwargs = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool

    engine = create_async_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    logger.debug("Engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
    )


async def create_db_and_tables(engine: AsyncEngine):
    """
    Creates all tables that do not exist yet. Production deployments manage
    the schema with Alembic; this covers local SQLite databases and tests.
    """
    from . import models  # noqa: F401  registers the mapped classes on Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


@asynccontextmanager
async def unit_of_work(session_factory: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    """
    One transaction per operation: commit when the block finishes, roll back
    when anything is raised inside it. The session is closed on every path.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except BaseException:
            await session.rollback()
            raise

