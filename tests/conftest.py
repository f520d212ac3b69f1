"""Shared pytest fixtures: record factories, a fake remote ledger and an API client."""

from datetime import datetime, timedelta
from typing import List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.core.exceptions import LedgerApiError
from app.main import app
from app.models.enums import BillStatus
from app.schemas.ledger import Bill, BillItem, Shop
from app.services.cache import MemoryCache
from app.services.data_store import DataStore, Snapshot

BASE_TIME = datetime(2024, 3, 1, 12, 0, 0)


def make_shop(shop_id: str = "s1", name: str = "Kumar Stores", days_ago: int = 0) -> Shop:
    return Shop(id=shop_id, name=name, created_at=BASE_TIME - timedelta(days=days_ago))


def make_bill(
    bill_id: str,
    shop_id: str = "s1",
    amount: float = 100.0,
    status: BillStatus = BillStatus.NOT_PAID,
    created_at: Optional[datetime] = None,
    items: Optional[List[BillItem]] = None,
) -> Bill:
    created_at = created_at or BASE_TIME
    return Bill(
        id=bill_id,
        shop_id=shop_id,
        amount=amount,
        items=items,
        status=status,
        created_at=created_at,
        updated_at=created_at,
    )


def make_item(name: str, quantity: float = 1, price: float = 10.0, item_id: str = None) -> BillItem:
    return BillItem(id=item_id or name, name=name, quantity=quantity, price=price)


class FakeLedgerClient:
    """In-memory stand-in for LedgerApiClient with the same async surface."""

    def __init__(self, shops=(), bills=()):
        self.shops: List[Shop] = list(shops)
        self.bills: List[Bill] = list(bills)
        self.calls: List[str] = []
        self.fail_writes = False

    async def get_shops(self, user_id: str) -> List[Shop]:
        self.calls.append("getShops")
        return list(self.shops)

    async def get_bills(self, user_id: str) -> List[Bill]:
        self.calls.append("getBills")
        return list(self.bills)

    def _check_write(self, action: str) -> None:
        self.calls.append(action)
        if self.fail_writes:
            raise LedgerApiError("Server Error: 500", action=action)

    async def save_shop(self, user_id: str, shop: Shop) -> None:
        self._check_write("saveShop")
        self.shops = [s for s in self.shops if s.id != shop.id] + [shop]

    async def delete_shop(self, user_id: str, shop_id: str) -> None:
        self._check_write("deleteShop")
        self.shops = [s for s in self.shops if s.id != shop_id]

    async def save_bill(self, user_id: str, bill: Bill) -> None:
        self._check_write("saveBill")
        self.bills = [b for b in self.bills if b.id != bill.id] + [bill]

    async def delete_bill(self, user_id: str, bill_id: str) -> None:
        self._check_write("deleteBill")
        self.bills = [b for b in self.bills if b.id != bill_id]

    async def aclose(self) -> None:
        pass


@pytest.fixture
def sample_shops() -> List[Shop]:
    return [
        make_shop("s1", "Kumar Stores", days_ago=10),
        make_shop("s2", "anand traders", days_ago=5),
        make_shop("s3", "Bala Mart", days_ago=1),
    ]


@pytest.fixture
def sample_bills() -> List[Bill]:
    return [
        make_bill("b1", "s1", 100, BillStatus.NOT_PAID, BASE_TIME - timedelta(days=3),
                  items=[make_item("Rice (1kg)", 2, 50)]),
        make_bill("b2", "s1", 50, BillStatus.PAID, BASE_TIME - timedelta(days=2),
                  items=[make_item("Sugar (1kg)", 1, 50)]),
        make_bill("b3", "s1", 999, BillStatus.CANCELED, BASE_TIME - timedelta(days=1)),
        make_bill("b4", "s2", 40, BillStatus.PAID, BASE_TIME,
                  items=[make_item("Tea", 4, 10)]),
        make_bill("b5", "gone", 70, BillStatus.NOT_PAID, BASE_TIME),
    ]


@pytest.fixture
def fake_client(sample_shops, sample_bills) -> FakeLedgerClient:
    return FakeLedgerClient(sample_shops, sample_bills)


@pytest.fixture
def data_store(fake_client, sample_shops, sample_bills) -> DataStore:
    store = DataStore(fake_client, MemoryCache(), user_id="u1")
    store.replace_snapshot(Snapshot(shops=tuple(sample_shops), bills=tuple(sample_bills)))
    return store


@pytest.fixture
def api_base() -> str:
    """Base URL for API requests."""
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
async def async_client(data_store: DataStore, api_base: str):
    """Async HTTP client against the app, wired to the fixture data store."""
    app.state.data_store = data_store
    transport = ASGITransport(app=app)
    client = AsyncClient(transport=transport, base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()
    app.state.data_store = None
