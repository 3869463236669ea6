"""Record store - generic CRUD over named collections of flat records.

Every collection shares the ``record`` table. Field values are JSON-encoded
on the way in, so datetimes are written as ISO-8601 strings; the store adds
``id``, ``created_at`` and ``updated_at`` to what it hands back. There is no
schema or field validation: whatever mapping a caller passes is stored.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .errors import RecordNotFoundError, StoreError
from .models.record import Record

logger = logging.getLogger(__name__)

_RESERVED = ("id", "created_at", "updated_at")


class RecordStore(Protocol):
    async def create(self, collection: str, fields: dict[str, Any]) -> dict[str, Any]: ...

    async def list(self, collection: str) -> list[dict[str, Any]]: ...

    async def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> None: ...

    async def delete(self, collection: str, record_id: str) -> None: ...


def encode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop store-managed keys and make values JSON-safe."""
    encoded: dict[str, Any] = {}
    for key, value in fields.items():
        if key in _RESERVED:
            continue
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        encoded[key] = value
    return encoded


def record_to_dict(record: Record) -> dict[str, Any]:
    return {
        **(record.data or {}),
        "id": record.id,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


class SQLRecordStore:
    """RecordStore backed by SQLAlchemy async sessions.

    Each call opens its own session, so concurrent callers never share one.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, collection: str, fields: dict[str, Any]) -> dict[str, Any]:
        try:
            async with self._session_factory() as session:
                now = datetime.now(timezone.utc)
                record = Record(
                    collection=collection,
                    data=encode_fields(fields),
                    created_at=now,
                    updated_at=now,
                )
                session.add(record)
                await session.commit()
                await session.refresh(record)
                return record_to_dict(record)
        except SQLAlchemyError as exc:
            logger.exception("Create in %s failed", collection)
            raise StoreError(f"create failed: {exc}", collection=collection) from exc

    async def list(self, collection: str) -> list[dict[str, Any]]:
        stmt = (
            select(Record)
            .where(Record.collection == collection)
            .order_by(Record.created_at, Record.id)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [record_to_dict(r) for r in result.scalars().all()]
        except SQLAlchemyError as exc:
            logger.exception("List of %s failed", collection)
            raise StoreError(f"list failed: {exc}", collection=collection) from exc

    async def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> None:
        try:
            async with self._session_factory() as session:
                record = await self._get(session, collection, record_id)
                if record is None:
                    raise RecordNotFoundError(
                        f"{collection}/{record_id} does not exist",
                        collection=collection,
                        record_id=record_id,
                    )
                # Reassign so the JSON column registers the change
                record.data = {**(record.data or {}), **encode_fields(fields)}
                record.updated_at = datetime.now(timezone.utc)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Update of %s/%s failed", collection, record_id)
            raise StoreError(
                f"update failed: {exc}", collection=collection, record_id=record_id
            ) from exc

    async def delete(self, collection: str, record_id: str) -> None:
        try:
            async with self._session_factory() as session:
                record = await self._get(session, collection, record_id)
                if record is None:
                    return
                await session.delete(record)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Delete of %s/%s failed", collection, record_id)
            raise StoreError(
                f"delete failed: {exc}", collection=collection, record_id=record_id
            ) from exc

    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        async with self._session_factory() as session:
            record = await self._get(session, collection, record_id)
            return record_to_dict(record) if record else None

    @staticmethod
    async def _get(session: AsyncSession, collection: str, record_id: str) -> Record | None:
        stmt = select(Record).where(Record.collection == collection, Record.id == record_id)
        return (await session.execute(stmt)).scalar_one_or_none()
