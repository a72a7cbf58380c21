from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable
import logging

from sqlalchemy import event, Engine, Result, CursorResult
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

import config
from models import Base

# SQL echo stays off, statements would drown the application log
sql_echo = False

url = config.DB_URL

# Relative sqlite paths ("sqlite+aiosqlite:///data/...") need the folder to exist
if url.startswith("sqlite") and "///data/" in url:
    data_folder = Path("data")
    if data_folder.exists() is False:
        data_folder.mkdir()

engine = create_async_engine(url, echo=sql_echo)
session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Any zero-arg callable returning an async context manager that yields an AsyncSession.
# Services take one of these so tests can hand them an in-memory database.
SessionFactory = Callable[[], Any]


@asynccontextmanager
async def get_db_session() -> AsyncIterator[AsyncSession]:
    session = None
    try:
        async with session_maker() as async_session:
            session = async_session
            yield session
    finally:
        if session is not None:
            await session.close()


def make_session_factory(custom_session_maker: async_sessionmaker) -> SessionFactory:
    """Build a session factory bound to a different sessionmaker (tests, scripts)."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[AsyncSession]:
        async with custom_session_maker() as async_session:
            yield async_session

    return factory


async def session_execute(stmt, session: AsyncSession) -> Result[Any] | CursorResult[Any]:
    query_result = await session.execute(stmt)
    return query_result


async def session_flush(session: AsyncSession) -> None:
    await session.flush()


async def session_commit(session: AsyncSession) -> None:
    await session.commit()


async def session_rollback(session: AsyncSession) -> None:
    await session.rollback()


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    # Only sqlite understands the pragma, other dialects would reject it
    if "sqlite" not in type(dbapi_connection).__module__:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logging.info(f"[DB] Tables ready: {', '.join(sorted(Base.metadata.tables))}")
