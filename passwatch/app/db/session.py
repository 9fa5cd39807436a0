# passwatch/app/db/session.py
"""
Async database session management for SQLAlchemy.

- asyncpg for PostgreSQL (production)
- aiosqlite for SQLite (local development and tests)

SQLite does not enforce foreign keys unless asked per connection, so a
connect hook turns them on; otherwise deleting a user would leave its
login IPs and audit entries behind.
"""
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool

from passwatch.app.core.config import settings


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Register a connect hook issuing PRAGMA foreign_keys=ON."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create and configure an async engine for the given URL.

    SQLite: NullPool plus check_same_thread=False.
    PostgreSQL: pooled, pre-ping enabled, connections recycled every
    5 minutes since hosted databases close idle connections.
    """
    if "sqlite" in url.lower():
        sqlite_engine = create_async_engine(
            url,
            echo=echo,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_foreign_keys(sqlite_engine)
        return sqlite_engine

    return create_async_engine(
        url,
        echo=echo,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: attributes stay readable after commit
    # autoflush=False: explicit control over DB writes
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine: AsyncEngine = create_engine_for(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

AsyncSessionLocal: async_sessionmaker[AsyncSession] = create_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Usage in FastAPI endpoints:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...

    Note: This does NOT auto-commit. Services commit explicitly.
    """
    async with AsyncSessionLocal() as session:
        yield session
