"""Database package with engine and session management."""

from stationery.db.session import async_session_maker, build_engine, dispose_engine, engine, get_session

__all__ = [
    "async_session_maker",
    "build_engine",
    "dispose_engine",
    "engine",
    "get_session",
]
