"""Generic document record.

One table backs every collection; field values live in a JSON payload so the
store can hold whatever flat mapping a caller hands it.
"""

from __future__ import annotations

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, StringIDMixin, TimestampMixin


class Record(StringIDMixin, TimestampMixin, Base):
    __tablename__ = "record"
    __table_args__ = (
        Index("ix_record_collection_created", "collection", "created_at"),
    )

    collection: Mapped[str] = mapped_column(String(100), index=True)
    data: Mapped[dict] = mapped_column(JSON, default=dict)

    def __repr__(self) -> str:
        return f"<Record {self.collection}/{self.id}>"
