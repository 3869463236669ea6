"""Test customer API routes."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from dealboard.schemas.deal import CustomerCreate
from dealboard.services import customer_svc
from dealboard.store import SQLRecordStore
from dealboard.tests.conftest import OTHER_USER_ID, USER_ID


async def _add(store: SQLRecordStore, user_id: str, **fields):
    return await customer_svc.create_customer(store, user_id, CustomerCreate(**fields))


@pytest.mark.asyncio
async def test_customer_search(client: AsyncClient, store: SQLRecordStore):
    await _add(store, USER_ID, name="Jane", company="Acme Inc.")
    await _add(store, USER_ID, name="Bob", email="bob@globex.com")
    await _add(store, OTHER_USER_ID, name="Acme Shadow")

    resp = await client.get("/customers/", params={"q": "acme"})

    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()["customers"]] == ["Jane"]


@pytest.mark.asyncio
async def test_customer_list_without_query(client: AsyncClient, store: SQLRecordStore):
    await _add(store, USER_ID, name="Jane")
    await _add(store, USER_ID, name="Bob")

    resp = await client.get("/customers/")

    assert [c["name"] for c in resp.json()["customers"]] == ["Jane", "Bob"]


@pytest.mark.asyncio
async def test_create_customer(client: AsyncClient, store: SQLRecordStore):
    resp = await client.post("/customers/", json={"name": " Initech ", "status": "PROSPECT"})

    assert resp.status_code == 201
    customer = resp.json()["customer"]
    assert customer["name"] == "Initech"
    assert customer["user_id"] == USER_ID
    assert len(await store.list("customers")) == 1


@pytest.mark.asyncio
async def test_create_customer_requires_name(client: AsyncClient, store: SQLRecordStore):
    resp = await client.post("/customers/", json={"email": "x@example.com"})
    assert resp.json() == {"ok": False}
    assert await store.list("customers") == []


@pytest.mark.asyncio
async def test_created_customer_names_deals(client: AsyncClient):
    created = await client.post("/customers/", json={"name": "Umbrella"})
    customer_id = created.json()["customer"]["id"]
    await client.post("/deals/", json={
        "title": "Vaccine supply", "customer_id": customer_id, "customer_name": "Umbrella",
    })

    board = (await client.get("/deals/board")).json()

    [deal] = board["buckets"]["OPEN"]
    assert deal["customer_id"] == customer_id
    assert deal["customer_label"] == "Umbrella"


@pytest.mark.asyncio
async def test_create_customer_ignores_unknown_keys(client: AsyncClient, store: SQLRecordStore):
    resp = await client.post("/customers/", json={"name": "Acme", "collection": "deals"})

    assert resp.status_code == 201
    assert len(await store.list("customers")) == 1
    assert await store.list("deals") == []
    board = (await client.get("/deals/board")).json()
    assert all(bucket == [] for bucket in board["buckets"].values())


@pytest.mark.asyncio
async def test_create_customer_with_reserved_key(client: AsyncClient, store: SQLRecordStore):
    resp = await client.post("/customers/", json={"name": "Acme", "store": "x", "user_id": "evil"})

    assert resp.status_code == 201
    assert resp.json()["customer"]["user_id"] == USER_ID


@pytest.mark.asyncio
async def test_update_customer(client: AsyncClient, store: SQLRecordStore):
    customer = await _add(store, USER_ID, name="Jane", email="jane@old.com")

    resp = await client.patch(f"/customers/{customer.id}", json={"email": "jane@new.com"})

    assert resp.status_code == 200
    assert resp.json()["customer"]["email"] == "jane@new.com"
    assert resp.json()["customer"]["name"] == "Jane"
    stored = await store.get("customers", customer.id)
    assert stored["email"] == "jane@new.com"


@pytest.mark.asyncio
async def test_update_customer_rejects_blank_name(client: AsyncClient, store: SQLRecordStore):
    customer = await _add(store, USER_ID, name="Jane")

    resp = await client.patch(f"/customers/{customer.id}", json={"name": None})

    assert resp.status_code == 422
    assert (await store.get("customers", customer.id))["name"] == "Jane"


@pytest.mark.asyncio
async def test_update_other_users_customer(client: AsyncClient, store: SQLRecordStore):
    customer = await _add(store, OTHER_USER_ID, name="Theirs")

    resp = await client.patch(f"/customers/{customer.id}", json={"name": "Mine now"})

    assert resp.status_code == 404
    assert (await store.get("customers", customer.id))["name"] == "Theirs"


@pytest.mark.asyncio
async def test_delete_customer(client: AsyncClient, store: SQLRecordStore):
    customer = await _add(store, USER_ID, name="Jane")
    await _add(store, USER_ID, name="Bob")

    resp = await client.delete(f"/customers/{customer.id}")

    assert resp.json() == {"ok": True, "deleted": customer.id}
    listed = (await client.get("/customers/")).json()["customers"]
    assert [c["name"] for c in listed] == ["Bob"]


@pytest.mark.asyncio
async def test_delete_other_users_customer(client: AsyncClient, store: SQLRecordStore):
    customer = await _add(store, OTHER_USER_ID, name="Theirs")

    resp = await client.delete(f"/customers/{customer.id}")

    assert resp.status_code == 404
    assert await store.get("customers", customer.id) is not None
