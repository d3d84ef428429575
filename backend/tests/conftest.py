"""
Smart Stationery - Test Configuration and Fixtures
"""
import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Set testing environment before settings are imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "warning"

from stationery.db import build_engine  # noqa: E402
from stationery.logging import setup_logging  # noqa: E402
from stationery.models import SQLModel, User  # noqa: E402
from stationery.services.catalog.catalog_service import CatalogService  # noqa: E402
from stationery.services.users.schemas import RegistrationRequest  # noqa: E402
from stationery.services.users.user_service import UserService  # noqa: E402

BASE_TIME = datetime(2025, 1, 1, 9, 0, tzinfo=UTC)


def at_minute(minute: int) -> datetime:
    """Deterministic creation timestamps for seeded legacy rows."""
    return BASE_TIME + timedelta(minutes=minute)


@pytest.fixture(scope="session", autouse=True)
def configured_logging() -> None:
    """Apply LOG_LEVEL and LOG_FORMAT once, as the CLI does on start"""
    setup_logging()


@pytest.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite database so concurrent sessions see each other's commits"""
    test_engine = build_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'stationery.db'}",
        connect_args={"timeout": 60},
        pool_timeout=120,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def catalog(db_session: AsyncSession) -> CatalogService:
    return CatalogService(db_session)


@pytest.fixture
def users(db_session: AsyncSession) -> UserService:
    return UserService(db_session)


@pytest.fixture
async def products(catalog: CatalogService):
    """Three products created in order; they receive ids 1, 2 and 3"""
    return [
        await catalog.create_product(name="A5 Notebook", category="Notebooks", price=120.0, stock_quantity=50),
        await catalog.create_product(name="Gel Pen Blue", category="Pens", price=25.5, stock_quantity=10),
        await catalog.create_product(
            name="Wings of Fire",
            category="Books",
            price=450.0,
            stock_quantity=3,
            author="A. P. J. Abdul Kalam",
            genre="Autobiography",
        ),
    ]


@pytest.fixture
async def customer(users: UserService) -> User:
    user, _ = await users.register(RegistrationRequest(name="Sita Sharma", email="sita@stationery.np"))
    return user


@pytest.fixture
async def institute(users: UserService) -> User:
    user, _ = await users.register(
        RegistrationRequest(name="Everest Public School", email="accounts@everest-school.edu.np", role="institute")
    )
    return user


@pytest.fixture
async def admin(users: UserService) -> User:
    return await users.create_admin("Store Admin", "admin@stationery.np")
