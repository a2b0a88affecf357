"""
Simple test cases to verify test configuration.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession

@pytest.mark.asyncio
async def test_app_exists(client: AsyncClient):
    """Test that app exists."""
    assert client is not None

@pytest.mark.asyncio
async def test_database_session(async_session: AsyncSession):
    """Test that database session works."""
    result = await async_session.execute(text("SELECT 1"))
    assert result.scalar() == 1

@pytest.mark.asyncio
async def test_products_table_created(async_session: AsyncSession):
    """Products table exists and starts empty."""
    result = await async_session.execute(text("SELECT COUNT(*) FROM products"))
    assert result.scalar() == 0

@pytest.mark.asyncio
async def test_sql_driver_lifecycle():
    """Driver connects, hands out sessions and disposes its pool."""
    from framework.database.sql_driver import SQLDriver

    driver = SQLDriver("sqlite+aiosqlite:///:memory:")
    await driver.connect()

    async for session in driver.get_session():
        result = await session.execute(text("SELECT 2"))
        assert result.scalar() == 2

    await driver.disconnect()
