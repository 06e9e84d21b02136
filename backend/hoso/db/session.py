"""Database session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from hoso.core.config import settings


def get_database_url() -> str:
    """Get the database URL, ensuring the directory exists."""
    config_path = settings.config_path
    if not config_path.exists():
        try:
            config_path.mkdir(parents=True, exist_ok=True)
        except OSError:
            # Fall back to local directory for development
            config_path = Path("./config")
            config_path.mkdir(parents=True, exist_ok=True)

    db_path = config_path / "hoso.db"
    return f"sqlite+aiosqlite:///{db_path}"


def configure_sqlite_engine(async_engine: AsyncEngine) -> AsyncEngine:
    """Install connection pragmas and explicit transaction handling.

    The sqlite3 driver defers BEGIN until the first write, which breaks
    SAVEPOINT nesting; the driver's own transaction handling is disabled
    and BEGIN is emitted whenever SQLAlchemy starts a transaction.
    """

    @event.listens_for(async_engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=30000")
        cursor.close()

    @event.listens_for(async_engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return async_engine


engine = configure_sqlite_engine(
    create_async_engine(
        get_database_url(),
        echo=settings.debug,
        future=True,
        connect_args={
            "timeout": 30,  # Wait up to 30 seconds for locks
        },
        pool_pre_ping=True,
    )
)


async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Yields:
        An async database session.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
