"""Unit tests for ledger schemas: wire format and ingestion normalization."""

import json
from datetime import datetime

import pytest
from pydantic import ValidationError

from app.models.enums import BillStatus
from app.schemas.ledger import Bill, BillItem, Shop, ShopCreate
from app.utils.numbers import coerce_amount, to_number


def _raw_bill(**overrides):
    raw = {
        "id": "1709290000000",
        "shopId": "s1",
        "amount": 120,
        "status": "NOT_PAID",
        "createdAt": "2024-03-01T10:00:00.000Z",
        "updatedAt": "2024-03-01T10:00:00.000Z",
    }
    raw.update(overrides)
    return raw


def test_bill_parses_camel_case_payload():
    bill = Bill.model_validate(_raw_bill())
    assert bill.shop_id == "s1"
    assert bill.status == BillStatus.NOT_PAID
    assert bill.created_at == datetime(2024, 3, 1, 10, 0, 0)
    assert bill.items is None
    assert bill.is_legacy


def test_items_as_json_string_are_decoded():
    items = [{"id": "i1", "name": "Rice (1kg)", "quantity": 2, "price": 60}]
    bill = Bill.model_validate(_raw_bill(items=json.dumps(items)))
    assert bill.items == [BillItem(id="i1", name="Rice (1kg)", quantity=2, price=60)]
    assert not bill.is_legacy


def test_items_as_structured_list():
    items = [{"id": 7, "name": "Tea", "quantity": 1, "price": 120}]
    bill = Bill.model_validate(_raw_bill(items=items))
    assert bill.items[0].id == "7"
    assert bill.items[0].line_total == 120


@pytest.mark.parametrize("raw_items", ["", "   ", "null", "{not json", None, 5])
def test_unusable_items_mean_legacy_bill(raw_items):
    bill = Bill.model_validate(_raw_bill(items=raw_items))
    assert bill.items is None


def test_empty_item_list_is_legacy():
    bill = Bill.model_validate(_raw_bill(items="[]"))
    assert bill.items == []
    assert bill.is_legacy


@pytest.mark.parametrize(
    "bad_item",
    [
        {"id": "2", "name": "Tea", "quantity": 0, "price": 0},
        {"id": "2", "name": "Tea", "quantity": 1, "price": -5},
        {"id": "2", "quantity": 1, "price": 5},
        "Tea",
    ],
)
def test_invalid_item_keeps_bill_as_legacy(bad_item):
    items = [{"id": "1", "name": "Rice", "quantity": 1, "price": 120}, bad_item]
    bill = Bill.model_validate(_raw_bill(items=json.dumps(items)))
    assert bill.is_legacy
    assert bill.items is None
    assert bill.amount == 120


def test_amount_is_coerced_leniently():
    assert Bill.model_validate(_raw_bill(amount="250.5")).amount == 250.5
    assert Bill.model_validate(_raw_bill(amount="n/a")).amount == 0.0
    assert Bill.model_validate(_raw_bill(amount=None)).amount == 0.0
    raw = _raw_bill()
    del raw["amount"]
    assert Bill.model_validate(raw).amount == 0.0


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        Bill.model_validate(_raw_bill(status="REFUNDED"))


def test_numeric_ids_become_strings():
    bill = Bill.model_validate(_raw_bill(id=17, shopId=3))
    assert bill.id == "17"
    assert bill.shop_id == "3"


def test_aware_timestamps_are_stored_as_naive_utc():
    bill = Bill.model_validate(_raw_bill(createdAt="2024-03-01T15:30:00+05:30"))
    assert bill.created_at == datetime(2024, 3, 1, 10, 0, 0)


def test_to_wire_uses_camel_case_and_z_timestamps():
    bill = Bill.model_validate(_raw_bill())
    wire = bill.to_wire()
    assert wire["shopId"] == "s1"
    assert wire["createdAt"] == "2024-03-01T10:00:00.000Z"
    assert wire["status"] == "NOT_PAID"
    assert "items" not in wire
    assert Bill.model_validate(wire) == bill


def test_shop_requires_name():
    with pytest.raises(ValidationError):
        Shop(id="s1", name="", created_at=datetime(2024, 1, 1))


def test_shop_create_strips_name():
    assert ShopCreate(name="  Kumar Stores ").name == "Kumar Stores"
    with pytest.raises(ValidationError):
        ShopCreate(name="   ")


def test_bill_item_constraints():
    with pytest.raises(ValidationError):
        BillItem(id="1", name="Rice", quantity=0, price=10)
    with pytest.raises(ValidationError):
        BillItem(id="1", name="Rice", quantity=1, price=-1)


@pytest.mark.parametrize(
    "value,expected",
    [
        (10, 10.0),
        ("12.5", 12.5),
        (" 7 ", 7.0),
        ("", None),
        ("abc", None),
        ("nan", None),
        (float("inf"), None),
        (True, None),
        (None, None),
        ([1], None),
    ],
)
def test_to_number(value, expected):
    assert to_number(value) == expected


def test_coerce_amount_defaults_to_zero():
    assert coerce_amount("junk") == 0.0
    assert coerce_amount(3) == 3.0
