from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings


def _begin_immediate(engine: AsyncEngine) -> None:
    # pysqlite defers BEGIN until the first write, so two read-then-write units can both read a stale
    # snapshot. Take the write lock at transaction start instead.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=False,
            future=True,
            connect_args={"timeout": 30},
        )
        _begin_immediate(engine)
        return engine
    # pool_pre_ping: check connection is alive before use (avoids "connection is closed" errors
    # when DB or network closed idle connections).
    # pool_recycle: discard connections after this many seconds to avoid stale connections.
    return create_async_engine(
        database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_recycle=300,
        isolation_level=settings.db_isolation_level,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = build_engine(settings.database_url)

AsyncSessionLocal = build_session_factory(engine)

Base = declarative_base()


def get_session_factory() -> async_sessionmaker:
    """Dependency: session factory used for short-lived lookups and units of work."""
    return AsyncSessionLocal


async def get_db(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
