"""FastAPI application factory for the deal pipeline service."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import configure_logging, settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Auto-create tables for SQLite (local dev)
    if settings.is_sqlite:
        from .database import create_tables
        await create_tables()
    yield


app = FastAPI(title=settings.app_title, lifespan=lifespan)

# Import and register routers
from .routers import customers, deals, health  # noqa: E402

app.include_router(deals.router)
app.include_router(customers.router)
app.include_router(health.router)
