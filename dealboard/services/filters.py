"""Pure grouping and search over in-memory records."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, TypeVar

from ..errors import UnknownStageError
from ..schemas.deal import CLOSED_STAGES, Deal, DealStage, StageSummary

T = TypeVar("T")

DEFAULT_SEARCH_FIELDS: tuple[str, ...] = ("name", "title", "email", "company", "customer_name")


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def bucket_by_stage(deals: Iterable[Deal]) -> dict[DealStage, list[Deal]]:
    """Partition deals into the four stage buckets, keeping input order.

    Every key is present even when empty. A status outside the enum raises
    UnknownStageError rather than being dropped.
    """
    buckets: dict[DealStage, list[Deal]] = {stage: [] for stage in DealStage}
    for deal in deals:
        status = _field(deal, "status")
        if not isinstance(status, DealStage):
            raise UnknownStageError(status, deal_id=_field(deal, "id"))
        buckets[status].append(deal)
    return buckets


def stage_totals(deals: Iterable[Deal]) -> dict[DealStage, StageSummary]:
    """Count and summed value per stage."""
    totals = {stage: StageSummary() for stage in DealStage}
    for stage, bucket in bucket_by_stage(deals).items():
        totals[stage] = StageSummary(
            count=len(bucket),
            value=sum(float(_field(d, "value") or 0) for d in bucket),
        )
    return totals


def closed_this_month(deals: Iterable[Deal], now: datetime | None = None) -> int:
    """Count WON or LOST deals last updated in the current calendar month (UTC).

    Naive timestamps are read as UTC; deals without ``updated_at`` never count.
    """
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    count = 0
    for deal in deals:
        updated = _field(deal, "updated_at")
        if _field(deal, "status") not in CLOSED_STAGES or updated is None:
            continue
        if updated.tzinfo is not None:
            updated = updated.astimezone(timezone.utc)
        if (updated.year, updated.month) == (now.year, now.month):
            count += 1
    return count


def matches_query(
    record: Any, query: str | None, fields: Sequence[str] = DEFAULT_SEARCH_FIELDS
) -> bool:
    """Case-insensitive substring match against any text-bearing field."""
    q = (query or "").strip().lower()
    if not q:
        return True
    for name in fields:
        value = _field(record, name)
        if isinstance(value, str) and q in value.lower():
            return True
    return False


def search(
    records: Iterable[T], query: str | None, fields: Sequence[str] = DEFAULT_SEARCH_FIELDS
) -> list[T]:
    return [r for r in records if matches_query(r, query, fields)]
