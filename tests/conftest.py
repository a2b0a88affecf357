"""Test config and shared fixtures."""
import pytest
from decimal import Decimal
from typing import AsyncGenerator, List
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from main import app
from framework.repository.unit_of_work import UnitOfWork
import apps.models  # noqa: F401  registers every table on SQLModel.metadata
from apps.products.models import Product
from apps.products.repository import ProductRepository


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Create async test database session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async_session_maker = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def uow(async_session: AsyncSession) -> UnitOfWork:
    """UnitOfWork bound to the test session."""
    return UnitOfWork(session=async_session)


@pytest.fixture
def products(uow: UnitOfWork) -> ProductRepository:
    """Product repository of the test unit of work."""
    return uow.get_repository(ProductRepository)


@pytest.fixture
async def client(
    async_session: AsyncSession
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    from apps.products.api.router import get_db

    async def _get_db():
        yield async_session

    app.dependency_overrides[get_db] = _get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def make_product(description: str = "Widget", price: str = "9.99") -> Product:
    """Build a valid transient product through the factory."""
    return Product.create(description, Decimal(price)).value


@pytest.fixture
def product_factory():
    """Factory for valid transient products."""
    return make_product


@pytest.fixture
async def sample_products(async_session: AsyncSession) -> List[Product]:
    """Persist three products (Widget 9.99, Gadget 19.50, Gizmo 5.00) through a separate unit of work."""
    items = [
        make_product("Widget", "9.99"),
        make_product("Gadget", "19.50"),
        make_product("Gizmo", "5.00"),
    ]
    seeding = UnitOfWork(session=async_session)
    seeding.get_repository(ProductRepository).add_range(items)
    await seeding.commit()
    return items
