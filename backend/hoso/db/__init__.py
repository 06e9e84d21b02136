"""Database package for Hoso."""

from hoso.db.base import Base
from hoso.db.session import async_session_maker, configure_sqlite_engine, engine, get_db

__all__ = [
    "Base",
    "async_session_maker",
    "configure_sqlite_engine",
    "engine",
    "get_db",
]
