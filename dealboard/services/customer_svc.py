"""Customer service - list, search, create, update and delete a user's customers."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..config import settings
from ..schemas.deal import Customer, CustomerCreate, CustomerUpdate
from ..store import RecordStore
from .filters import search

log = logging.getLogger(__name__)

CUSTOMER_SEARCH_FIELDS = ("name", "email", "company")


async def list_customers(
    store: RecordStore,
    user_id: str,
    *,
    query: str | None = None,
    collection: str | None = None,
) -> list[Customer]:
    """Customers owned by user_id, optionally filtered by free-text query."""
    records = await store.list(collection or settings.customers_collection)
    customers: list[Customer] = []
    for record in records:
        if record.get("user_id") != user_id:
            continue
        try:
            customers.append(Customer.model_validate(record))
        except ValidationError:
            log.warning("Skipping malformed customer %s", record.get("id"))
    return search(customers, query, CUSTOMER_SEARCH_FIELDS)


async def _owned_record(
    store: RecordStore, collection: str, user_id: str, customer_id: str
) -> dict[str, Any] | None:
    for record in await store.list(collection):
        if record.get("id") == customer_id and record.get("user_id") == user_id:
            return record
    return None


async def create_customer(
    store: RecordStore,
    user_id: str,
    data: CustomerCreate,
    *,
    collection: str | None = None,
) -> Customer:
    payload = {**data.model_dump(mode="json"), "user_id": user_id}
    saved = await store.create(collection or settings.customers_collection, payload)
    return Customer.model_validate(saved)


async def update_customer(
    store: RecordStore,
    user_id: str,
    customer_id: str,
    data: CustomerUpdate,
    *,
    collection: str | None = None,
) -> Customer | None:
    """Apply a partial edit. Returns None if user_id owns no such customer."""
    collection = collection or settings.customers_collection
    record = await _owned_record(store, collection, user_id, customer_id)
    if record is None:
        return None
    changes = data.model_dump(mode="json", exclude_unset=True)
    if changes:
        await store.update(collection, customer_id, changes)
    return Customer.model_validate({**record, **changes})


async def delete_customer(
    store: RecordStore,
    user_id: str,
    customer_id: str,
    *,
    collection: str | None = None,
) -> bool:
    """Delete a customer. Returns True if found and deleted."""
    collection = collection or settings.customers_collection
    if await _owned_record(store, collection, user_id, customer_id) is None:
        return False
    await store.delete(collection, customer_id)
    return True
