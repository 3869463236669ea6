"""Async test fixtures for dealboard tests using SQLite."""

from __future__ import annotations

import itertools
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dealboard.database import get_session_factory
from dealboard.models.base import Base
from dealboard.store import SQLRecordStore

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def store(session_factory) -> SQLRecordStore:
    return SQLRecordStore(session_factory)


@pytest.fixture
def fake_store():
    """Record store double with canned collections.

    Set ``fake_store.collections[name]`` to the records ``list`` returns.
    """
    mock = MagicMock()
    mock.collections = {"deals": [], "customers": []}
    ids = itertools.count(1)

    async def _list(collection: str) -> list[dict[str, Any]]:
        return [dict(r) for r in mock.collections.get(collection, [])]

    async def _create(collection: str, fields: dict[str, Any]) -> dict[str, Any]:
        return {**fields, "id": f"new-{next(ids)}"}

    mock.list = AsyncMock(side_effect=_list)
    mock.create = AsyncMock(side_effect=_create)
    mock.update = AsyncMock(return_value=None)
    mock.delete = AsyncMock(return_value=None)
    return mock


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTPX async test client against the dealboard app."""
    from dealboard.app import app

    async def override_session_factory():
        return session_factory

    app.dependency_overrides[get_session_factory] = override_session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers={"X-User-Id": USER_ID}
    ) as c:
        yield c

    app.dependency_overrides.clear()
