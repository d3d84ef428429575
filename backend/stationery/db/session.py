"""Database engine and session configuration."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

# Table models must be imported before metadata or relationships are used
import stationery.models  # noqa: F401
from stationery.config import settings


def build_engine(url: str | None = None, **overrides: Any) -> AsyncEngine:
    """Async engine for ``url`` (default ``DATABASE_URL``).

    Server databases get a sized, pre-pinged pool; SQLite files keep the
    driver defaults. ``overrides`` are passed to ``create_async_engine``.
    """
    url = url or settings.database_url
    options: dict[str, Any] = {"echo": settings.debug}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(pool_size=5, max_overflow=10, pool_pre_ping=True, pool_recycle=300)
    options.update(overrides)
    return create_async_engine(url, **options)


engine = build_engine()

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession]:
    """Provide a session that is closed when the caller is done with it."""
    async with async_session_maker() as session:
        yield session


async def dispose_engine() -> None:
    """Release pooled connections; call before the event loop closes."""
    await engine.dispose()
