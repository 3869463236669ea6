"""Deal pipeline routes - board, deal CRUD, stage moves and drops."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from ..deps import get_controller
from ..errors import NotFound, RemoteFailure, ValidationFailure
from ..schemas.deal import ACTIVE_STAGES, Deal, DropRequest, MoveRequest
from ..services.drag import MoveIntent, dispatch_intent, drop_zone
from ..services.filters import closed_this_month
from ..services.pipeline_svc import PipelineController, PipelineResult

router = APIRouter(prefix="/deals", tags=["deals"])


def deal_json(deal: Deal) -> dict[str, Any]:
    return {**deal.model_dump(mode="json"), "customer_label": deal.customer_label}


def _result_json(result: PipelineResult) -> dict[str, Any]:
    """Map a controller result onto a response body, raising for 404/422."""
    error = result.error
    if isinstance(error, NotFound):
        raise HTTPException(status_code=404, detail=error.message)
    if isinstance(error, ValidationFailure):
        raise HTTPException(status_code=422, detail=error.message)

    body: dict[str, Any] = {"ok": result.ok}
    if isinstance(result.value, Deal):
        body["deal"] = deal_json(result.value)
    if isinstance(error, RemoteFailure):
        # Local state was applied anyway; report the store failure alongside it.
        body["remote_error"] = error.message
    return body


@router.get("/board")
async def deal_board(controller: PipelineController = Depends(get_controller)):
    buckets = controller.buckets_by_stage()
    totals = controller.stage_totals()
    return {
        "user_id": controller.user_id,
        "error": controller.load_error.code if controller.load_error else None,
        "buckets": {
            stage.value: [deal_json(d) for d in deals] for stage, deals in buckets.items()
        },
        "totals": {stage.value: summary.model_dump() for stage, summary in totals.items()},
        "active_deals": sum(totals[stage].count for stage in ACTIVE_STAGES),
        "closed_this_month": closed_this_month(controller.deals()),
        "rejected": controller.rejected,
    }


@router.post("/")
async def deal_create(
    fields: dict[str, Any] = Body(...),
    controller: PipelineController = Depends(get_controller),
):
    result = await controller.create(fields)
    if isinstance(result.error, ValidationFailure):
        # Invalid input is declined quietly
        return {"ok": False}
    if result.error:
        return {"ok": False, "remote_error": result.error.message}
    return JSONResponse(status_code=201, content={"ok": True, "deal": deal_json(result.value)})


@router.patch("/{deal_id}")
async def deal_update(
    deal_id: str,
    changes: dict[str, Any] = Body(...),
    controller: PipelineController = Depends(get_controller),
):
    return _result_json(await controller.update(deal_id, changes))


@router.post("/{deal_id}/move")
async def deal_move(
    deal_id: str,
    body: MoveRequest,
    controller: PipelineController = Depends(get_controller),
):
    """Move a deal to a stage chosen from the card menu."""
    return _result_json(await controller.transition(deal_id, body.status))


@router.post("/{deal_id}/drop")
async def deal_drop(
    deal_id: str,
    body: DropRequest,
    controller: PipelineController = Depends(get_controller),
):
    """Apply a completed drag released over a drop zone."""
    stage = drop_zone(body.zone)
    if stage is None:
        return {"ok": False, "moved": False}
    result = await dispatch_intent(controller, MoveIntent(deal_id=deal_id, stage=stage))
    return {**_result_json(result), "moved": True}


@router.delete("/{deal_id}")
async def deal_delete(
    deal_id: str,
    controller: PipelineController = Depends(get_controller),
):
    result = await controller.delete(deal_id)
    body = _result_json(result)
    body["deleted"] = deal_id
    return body
