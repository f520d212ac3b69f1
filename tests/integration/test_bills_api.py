"""Integration tests: bill list view, bill editing and item suggestions."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.services.data_store import Snapshot
from tests.conftest import BASE_TIME, make_bill, make_shop


@pytest.mark.asyncio
async def test_shop_bills_default_view(async_client: AsyncClient):
    resp = await async_client.get("/shops/s1/bills")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    # pending first, then newest first
    assert [b["id"] for b in body["data"]] == ["b1", "b3", "b2"]
    assert body["data"][0]["shopId"] == "s1"
    assert body["data"][0]["items"][0]["name"] == "Rice (1kg)"
    assert body["meta"] == {
        "total": 3, "visible": 3, "batch_size": 15, "has_more": False, "active_filters": 0,
    }


@pytest.mark.asyncio
async def test_shop_bills_filtered_and_sorted(async_client: AsyncClient):
    resp = await async_client.get(
        "/shops/s1/bills",
        params={"status": "ALL", "min_amount": "60", "sort": "amount-asc"},
    )
    assert [b["id"] for b in resp.json()["data"]] == ["b1", "b3"]
    assert resp.json()["meta"]["active_filters"] == 2


@pytest.mark.asyncio
async def test_malformed_bounds_are_ignored(async_client: AsyncClient):
    resp = await async_client.get(
        "/shops/s1/bills",
        params={"min_amount": "lots", "date_from": "yesterday-ish", "date_window": "??", "sort": "??"},
    )
    assert resp.status_code == 200
    assert resp.json()["meta"]["total"] == 3


@pytest.mark.asyncio
async def test_explicit_date_range(async_client: AsyncClient):
    day = (BASE_TIME - timedelta(days=2)).date().isoformat()
    resp = await async_client.get("/shops/s1/bills", params={"date_from": day, "date_to": day})
    assert [b["id"] for b in resp.json()["data"]] == ["b2"]


@pytest.mark.asyncio
async def test_reveal_more_batches(async_client: AsyncClient, data_store):
    bills = tuple(
        make_bill(f"b{n}", "s1", amount=n, created_at=BASE_TIME + timedelta(minutes=n))
        for n in range(40)
    )
    data_store.replace_snapshot(Snapshot(shops=(make_shop("s1"),), bills=bills))

    pages = []
    for reveals in range(4):
        resp = await async_client.get("/shops/s1/bills", params={"sort": "date-asc", "reveals": reveals})
        pages.append(resp.json())

    assert [p["meta"]["visible"] for p in pages] == [15, 30, 40, 40]
    assert [p["meta"]["has_more"] for p in pages] == [True, True, False, False]
    assert [b["id"] for b in pages[-1]["data"]] == [f"b{n}" for n in range(40)]


@pytest.mark.asyncio
async def test_unknown_shop_bills(async_client: AsyncClient):
    resp = await async_client.get("/shops/nope/bills")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_create_bill(async_client: AsyncClient, data_store):
    draft = {"items": [{"name": "Soap", "quantity": 2, "price": 25}, {"name": "Tea", "quantity": 1, "price": 40}]}
    resp = await async_client.post("/shops/s3/bills", json=draft)
    assert resp.status_code == 201, resp.text
    bill = resp.json()["data"]
    assert bill["amount"] == 90
    assert bill["status"] == "NOT_PAID"
    assert data_store.get_shop_stat("s3").total_pending == 90


@pytest.mark.asyncio
async def test_create_bill_validation(async_client: AsyncClient):
    resp = await async_client.post("/shops/s3/bills", json={"items": [{"name": "", "quantity": 1, "price": 5}]})
    assert resp.status_code == 400
    assert resp.json()["error"] == {"code": "BILL_INVALID", "message": "Please enter names for all items"}

    resp = await async_client.post("/shops/s3/bills", json={"items": []})
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Total amount must be greater than 0"


@pytest.mark.asyncio
async def test_legacy_bill_draft_and_update(async_client: AsyncClient, data_store):
    resp = await async_client.get("/bills/b3/draft")
    assert resp.status_code == 200
    [line] = resp.json()["data"]
    assert line["name"] == "Legacy Bill Amount"
    assert line["price"] == 999

    resp = await async_client.put("/bills/b3", json={"items": [line], "status": "PAID"})
    assert resp.status_code == 200, resp.text
    updated = data_store.get_bill("b3")
    assert updated.status.value == "PAID"
    assert updated.amount == 999
    assert not updated.is_legacy
    assert data_store.get_shop_stat("s1").total_received == 50 + 999


@pytest.mark.asyncio
async def test_get_and_delete_bill(async_client: AsyncClient, data_store):
    resp = await async_client.get("/bills/b2")
    assert resp.json()["data"]["status"] == "PAID"

    resp = await async_client.delete("/bills/b2")
    assert resp.status_code == 200
    assert data_store.get_bill("b2") is None

    resp = await async_client.get("/bills/b2")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_item_suggestions(async_client: AsyncClient):
    resp = await async_client.get("/items/suggest", params={"q": "RI"})
    assert resp.json()["data"] == ["Rice (1kg)"]

    resp = await async_client.get("/items/suggest", params={"q": "t", "shop_id": "s2"})
    assert resp.json()["data"] == ["Tea"]

    resp = await async_client.get("/items/suggest", params={"q": ""})
    assert resp.json()["data"] == []

    # a shop with no bills suggests the default vocabulary
    resp = await async_client.get("/items/suggest", params={"q": "r", "shop_id": "s3", "limit": 1})
    assert resp.json()["data"] == ["Rice (1kg)"]
