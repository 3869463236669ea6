"""Customer routes - searchable list, create, edit and delete."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..deps import get_current_user_id, get_store
from ..errors import StoreError
from ..schemas.deal import CustomerCreate, CustomerUpdate
from ..services import customer_svc
from ..store import RecordStore

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/")
async def customer_list(
    q: str | None = None,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
):
    try:
        customers = await customer_svc.list_customers(store, user_id, query=q)
    except StoreError as exc:
        return {"customers": [], "error": exc.message}
    return {"customers": [c.model_dump(mode="json") for c in customers], "error": None}


@router.post("/")
async def customer_create(
    fields: dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
):
    try:
        data = CustomerCreate.model_validate(fields)
    except ValidationError:
        return {"ok": False}
    try:
        customer = await customer_svc.create_customer(store, user_id, data)
    except (StoreError, ValidationError):
        return {"ok": False}
    return JSONResponse(
        status_code=201, content={"ok": True, "customer": customer.model_dump(mode="json")}
    )


@router.patch("/{customer_id}")
async def customer_update(
    customer_id: str,
    fields: dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
):
    try:
        data = CustomerUpdate.model_validate(fields)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors()[0]["msg"]) from exc
    try:
        customer = await customer_svc.update_customer(store, user_id, customer_id, data)
    except StoreError as exc:
        return {"ok": False, "remote_error": exc.message}
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"ok": True, "customer": customer.model_dump(mode="json")}


@router.delete("/{customer_id}")
async def customer_delete(
    customer_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_store),
):
    try:
        deleted = await customer_svc.delete_customer(store, user_id, customer_id)
    except StoreError as exc:
        return {"ok": False, "remote_error": exc.message}
    if not deleted:
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"ok": True, "deleted": customer_id}
