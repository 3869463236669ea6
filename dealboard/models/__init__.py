"""Record-store models - re-exports all models and Base.metadata."""

from .base import Base, StringIDMixin, TimestampMixin
from .record import Record

__all__ = [
    "Base",
    "StringIDMixin",
    "TimestampMixin",
    "Record",
]
