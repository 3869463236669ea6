"""FastAPI dependencies for the current user and the record store."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .config import settings
from .database import get_session_factory
from .services.pipeline_svc import PipelineController
from .store import RecordStore, SQLRecordStore


async def get_current_user_id(request: Request) -> str:
    """Resolve the caller from the user header. Raises 401 if absent."""
    user_id = (
        request.headers.get(settings.user_header, "").strip()
        or settings.default_user_id.strip()
    )
    if not user_id:
        raise HTTPException(status_code=401, detail=f"{settings.user_header} header required")
    return user_id


async def get_store(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> RecordStore:
    return SQLRecordStore(session_factory)


async def get_controller(
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
) -> PipelineController:
    """A controller loaded for the current user.

    Each request is one view session: the deals (and, when referenced, the
    customers) are read in full before the route runs.
    """
    controller = PipelineController(store)
    await controller.load(user_id)
    return controller
