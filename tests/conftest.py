"""
Pytest configuration for the application
"""
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from nutritrack.core.config import settings
from nutritrack.core.db import get_db
from nutritrack.main import app
from nutritrack.models import Base


@pytest_asyncio.fixture
async def test_db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a file-backed SQLite database with the full schema.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'nutritrack_test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_db_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Session used by tests to seed and inspect data.
    """
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_app(session_factory, tmp_path, monkeypatch) -> AsyncGenerator[FastAPI, None]:
    """
    The application with every request bound to the test database.
    """
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'nutritrack_test.db'}")

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        async with LifespanManager(app):
            yield app
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Create an async HTTP client for testing.
    """
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client
