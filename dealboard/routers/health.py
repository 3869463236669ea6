"""Health and readiness checks for the deal pipeline service."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database import get_session_factory

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "dealboard"}


@router.get("/ready")
async def readiness_check(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    async with session_factory() as session:
        await session.execute(text("SELECT 1"))
    return {"status": "ready", "service": "dealboard"}
