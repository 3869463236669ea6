"""Base model classes and mixins for record-store models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_record_id() -> str:
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    pass


class StringIDMixin:
    """Adds an opaque string primary key assigned on insert."""

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_record_id,
    )


class TimestampMixin:
    """Adds created_at / updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
