"""Pipeline controller - per-session deal arena with optimistic stage moves.

The controller loads one user's deals from the record store into an
id-keyed arena and mutates it through ``create``/``update``/``delete``/
``transition``. Every operation resolves to a ``PipelineResult``; failures
are returned as ``PipelineError`` instances and logged, never raised.

Writes are optimistic and roll forward: the local arena takes the change
whether or not the store accepted it. This leaves the local view out of step
with the store after a rejected write and is a known correctness gap.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from ..config import settings
from ..errors import (
    LoadFailure,
    NotFound,
    PipelineError,
    RemoteFailure,
    UnknownStageError,
    ValidationFailure,
)
from ..schemas.deal import Deal, DealCreate, DealStage, DealUpdate, StageSummary
from ..store import RecordStore
from . import filters

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PipelineResult(Generic[T]):
    """Outcome of a controller operation.

    ``value`` may be set alongside ``error`` when the local arena was changed
    even though the store rejected the write.
    """

    value: T | None = None
    error: PipelineError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PipelineController:
    """Owns the in-memory deal set for one user session."""

    def __init__(
        self,
        store: RecordStore,
        *,
        deals_collection: str | None = None,
        customers_collection: str | None = None,
    ):
        self._store = store
        self.deals_collection = deals_collection or settings.deals_collection
        self.customers_collection = customers_collection or settings.customers_collection
        self._deals: dict[str, Deal] = {}
        self.user_id: str | None = None
        self.rejected: list[str] = []
        self.load_error: PipelineError | None = None

    # ── Read-only views ────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._deals)

    def __contains__(self, deal_id: object) -> bool:
        return deal_id in self._deals

    def get(self, deal_id: str) -> Deal | None:
        return self._deals.get(deal_id)

    def deals(self) -> list[Deal]:
        return list(self._deals.values())

    def buckets_by_stage(self) -> dict[DealStage, list[Deal]]:
        return filters.bucket_by_stage(self._deals.values())

    def stage_totals(self) -> dict[DealStage, StageSummary]:
        return filters.stage_totals(self._deals.values())

    # ── Load ───────────────────────────────────────────────────────────────

    async def load(self, user_id: str) -> PipelineResult[list[Deal]]:
        """Fetch the user's deals and fill in customer display names."""
        self._deals = {}
        self.rejected = []
        self.user_id = user_id
        self.load_error = None
        if not user_id:
            self.load_error = ValidationFailure("user id is required")
            return PipelineResult(value=[], error=self.load_error)

        try:
            records = await self._store.list(self.deals_collection)
        except Exception as exc:
            logger.exception("Loading deals for user %s failed", user_id)
            self.load_error = LoadFailure(f"could not load deals: {exc}")
            return PipelineResult(value=[], error=self.load_error)

        for record in records:
            if record.get("user_id") != user_id:
                continue
            try:
                deal = Deal.model_validate(record)
            except ValidationError as exc:
                record_id = str(record.get("id"))
                logger.warning("Skipping deal %s: %s", record_id, exc.errors()[0]["msg"])
                self.rejected.append(record_id)
                continue
            self._deals[deal.id] = deal

        if any(deal.customer_id for deal in self._deals.values()):
            await self._resolve_customer_names()
        return PipelineResult(value=self.deals())

    async def _resolve_customer_names(self) -> None:
        try:
            customers = await self._store.list(self.customers_collection)
        except Exception:
            # Names stay as stored; the renderer falls back to Deal.customer_label
            logger.warning("Customer lookup failed", exc_info=True)
            return

        names = {c.get("id"): c.get("name") for c in customers if c.get("name")}
        for deal_id, deal in self._deals.items():
            name = names.get(deal.customer_id) if deal.customer_id else None
            if name:
                self._deals[deal_id] = deal.model_copy(update={"customer_name": name})

    # ── Mutations ──────────────────────────────────────────────────────────

    async def create(
        self, fields: DealCreate | Mapping[str, Any], *, user_id: str | None = None
    ) -> PipelineResult[Deal]:
        """Persist a new deal and append it to the arena.

        Invalid input declines quietly: no store call, no arena change.
        """
        owner = user_id or self.user_id
        try:
            data = fields if isinstance(fields, DealCreate) else DealCreate.model_validate(fields)
        except ValidationError as exc:
            logger.debug("Deal create declined: %s", exc)
            return PipelineResult(error=ValidationFailure("invalid deal fields"))

        if not data.title.strip() or not (data.customer_name or "").strip() or not owner:
            logger.debug("Deal create declined: title, customer name and owner are required")
            return PipelineResult(
                error=ValidationFailure("title, customer name and owner are required")
            )

        customer_id = data.customer_id or f"{settings.temp_customer_prefix}{int(time.time() * 1000)}"
        payload = data.model_dump(mode="json", exclude_none=True)
        payload.update(customer_id=customer_id, user_id=owner)

        try:
            saved = await self._store.create(self.deals_collection, payload)
        except Exception as exc:
            logger.exception("Creating deal %r failed", data.title)
            return PipelineResult(error=RemoteFailure(f"could not create deal: {exc}", exc))

        deal = Deal.model_validate({**saved, "customer_name": data.customer_name})
        self._deals[deal.id] = deal
        return PipelineResult(value=deal)

    async def update(
        self, deal_id: str, changes: DealUpdate | Mapping[str, Any]
    ) -> PipelineResult[Deal]:
        """Edit deal fields other than stage and owner."""
        if deal_id not in self._deals:
            return PipelineResult(error=NotFound(deal_id))
        try:
            data = changes if isinstance(changes, DealUpdate) else DealUpdate.model_validate(changes)
        except ValidationError as exc:
            logger.debug("Deal update declined: %s", exc)
            return PipelineResult(error=ValidationFailure("invalid deal fields"))

        fields = data.model_dump(exclude_unset=True)
        if not fields:
            return PipelineResult(value=self._deals[deal_id])

        error: PipelineError | None = None
        try:
            await self._store.update(
                self.deals_collection, deal_id, data.model_dump(mode="json", exclude_unset=True)
            )
        except Exception as exc:
            logger.warning("Updating deal %s failed: %s", deal_id, exc)
            error = RemoteFailure(f"could not update deal: {exc}", exc)

        # Applied regardless of the store outcome; no rollback.
        fields["updated_at"] = datetime.now(timezone.utc)
        return PipelineResult(value=self._apply(deal_id, fields), error=error)

    async def delete(self, deal_id: str) -> PipelineResult[str]:
        """Delete remotely, then drop locally even if the store refused.

        A rejected delete leaves the deal gone from this view while it still
        exists in the store until the next load.
        """
        if deal_id not in self._deals:
            return PipelineResult(error=NotFound(deal_id))

        error: PipelineError | None = None
        try:
            await self._store.delete(self.deals_collection, deal_id)
        except Exception as exc:
            logger.warning("Deleting deal %s failed: %s", deal_id, exc)
            error = RemoteFailure(f"could not delete deal: {exc}", exc)

        self._deals.pop(deal_id, None)
        return PipelineResult(value=deal_id, error=error)

    async def transition(self, deal_id: str, new_stage: DealStage | str) -> PipelineResult[Deal]:
        """Move a deal to another stage.

        Any stage may follow any other. Moving to the current stage is a
        no-op that never reaches the store. Otherwise the status write is
        issued and the arena takes the new stage whatever the outcome.
        """
        deal = self._deals.get(deal_id)
        if deal is None:
            logger.info("Move of unknown deal %s ignored", deal_id)
            return PipelineResult(error=NotFound(deal_id))
        try:
            stage = DealStage.parse(new_stage)
        except UnknownStageError as exc:
            return PipelineResult(value=deal, error=ValidationFailure(exc.message))

        if deal.status is stage:
            return PipelineResult(value=deal)

        error: PipelineError | None = None
        try:
            await self._store.update(self.deals_collection, deal_id, {"status": stage.value})
        except Exception as exc:
            logger.warning("Moving deal %s to %s failed: %s", deal_id, stage.value, exc)
            error = RemoteFailure(f"could not move deal: {exc}", exc)

        # Known gap: kept even when the store rejected the write.
        applied = {"status": stage, "updated_at": datetime.now(timezone.utc)}
        return PipelineResult(value=self._apply(deal_id, applied), error=error)

    def _apply(self, deal_id: str, fields: dict[str, Any]) -> Deal | None:
        # A delete that landed while the write was in flight wins.
        current = self._deals.get(deal_id)
        if current is None:
            return None
        updated = Deal.model_validate({**current.model_dump(), **fields})
        self._deals[deal_id] = updated
        return updated
