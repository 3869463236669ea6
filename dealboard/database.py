"""Async database engine and session factory for the record store."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import settings

engine = create_async_engine(settings.database_url, echo=settings.echo_sql)
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(bind=None) -> None:
    """Create the record table (SQLite/local dev only)."""
    from .models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency returning the session factory the store opens sessions from."""
    return async_session_factory
