"""Authoritative shop/bill snapshot for one user.

The snapshot is replaced as a whole: shops and bills from one refresh are
never mixed with those of another. Derived data (shop statistics, dashboard
totals, item autocomplete index) is computed lazily and memoized per
snapshot, so replacing the snapshot is what invalidates it.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from app.core.logging import get_logger
from app.engine.aggregation import compute_dashboard, compute_shop_stats
from app.engine.prefix_index import PrefixIndex, build_item_index
from app.schemas.ledger import Bill, DashboardStats, Shop, ShopStat
from app.services.cache import BILLS_CACHE_KEY, SHOPS_CACHE_KEY, Cache
from app.services.ledger_api import LedgerApiClient

logger = get_logger(__name__)


@dataclass(frozen=True)
class Snapshot:
    shops: Tuple[Shop, ...] = ()
    bills: Tuple[Bill, ...] = ()

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls()


@dataclass
class _Derived:
    """Memoized views of a single snapshot"""
    shop_stats: Optional[List[ShopStat]] = None
    dashboard: Optional[DashboardStats] = None
    item_indexes: Dict[Optional[str], PrefixIndex] = field(default_factory=dict)


def _load_cached(cache: Cache, key: str, model) -> list:
    raw = cache.get(key)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring unreadable cache entry %s", key)
        return []
    if not isinstance(data, list):
        return []
    records = []
    for item in data:
        try:
            records.append(model.model_validate(item))
        except ValidationError:
            logger.warning("Skipping invalid cached %s record", model.__name__)
    return records


class DataStore:
    """
    Owns the current snapshot and keeps it in sync with the remote API.

    A refresh does not cancel one already in flight; whichever response
    completes last replaces the snapshot.
    """

    def __init__(self, client: LedgerApiClient, cache: Cache, user_id: str):
        self.client = client
        self.cache = cache
        self.user_id = user_id
        self._snapshot = Snapshot.empty()
        self._derived = _Derived()
        self._inflight = 0

    # Snapshot

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def shops(self) -> Tuple[Shop, ...]:
        return self._snapshot.shops

    @property
    def bills(self) -> Tuple[Bill, ...]:
        return self._snapshot.bills

    @property
    def is_loading(self) -> bool:
        return self._inflight > 0

    def replace_snapshot(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._derived = _Derived()

    def load_cached(self) -> Snapshot:
        """Seed the snapshot from the local cache before the first refresh."""
        snapshot = Snapshot(
            shops=tuple(_load_cached(self.cache, SHOPS_CACHE_KEY, Shop)),
            bills=tuple(_load_cached(self.cache, BILLS_CACHE_KEY, Bill)),
        )
        self.replace_snapshot(snapshot)
        logger.info(
            "Loaded cached snapshot: %d shops, %d bills",
            len(snapshot.shops),
            len(snapshot.bills),
            extra={"user_id": self.user_id},
        )
        return snapshot

    async def refresh(self) -> Snapshot:
        self._inflight += 1
        try:
            shops, bills = await asyncio.gather(
                self.client.get_shops(self.user_id),
                self.client.get_bills(self.user_id),
            )
        finally:
            self._inflight -= 1

        # TODO: tag refreshes with a sequence number and drop responses older than the current snapshot
        snapshot = Snapshot(shops=tuple(shops), bills=tuple(bills))
        self.replace_snapshot(snapshot)

        self.cache.set(SHOPS_CACHE_KEY, json.dumps([s.to_wire() for s in snapshot.shops]))
        self.cache.set(BILLS_CACHE_KEY, json.dumps([b.to_wire() for b in snapshot.bills]))
        logger.info(
            "Snapshot refreshed: %d shops, %d bills",
            len(snapshot.shops),
            len(snapshot.bills),
            extra={"user_id": self.user_id},
        )
        return snapshot

    # Lookups

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        return next((s for s in self._snapshot.shops if s.id == shop_id), None)

    def get_bill(self, bill_id: str) -> Optional[Bill]:
        return next((b for b in self._snapshot.bills if b.id == bill_id), None)

    def bills_for_shop(self, shop_id: str) -> List[Bill]:
        return [b for b in self._snapshot.bills if b.shop_id == shop_id]

    # Derived

    def shop_stats(self) -> List[ShopStat]:
        derived = self._derived
        if derived.shop_stats is None:
            derived.shop_stats = compute_shop_stats(self._snapshot.shops, self._snapshot.bills)
        return derived.shop_stats

    def get_shop_stat(self, shop_id: str) -> Optional[ShopStat]:
        return next((s for s in self.shop_stats() if s.shop.id == shop_id), None)

    def dashboard(self) -> DashboardStats:
        derived = self._derived
        if derived.dashboard is None:
            derived.dashboard = compute_dashboard(self._snapshot.shops, self._snapshot.bills)
        return derived.dashboard

    def item_index(self, shop_id: Optional[str] = None) -> PrefixIndex:
        """Autocomplete index over all item names, or only one shop's."""
        indexes = self._derived.item_indexes
        if shop_id not in indexes:
            indexes[shop_id] = build_item_index(self._snapshot.bills, shop_id=shop_id)
        return indexes[shop_id]

    # Writes: each round-trips to the API, then reloads the snapshot

    async def save_shop(self, shop: Shop) -> Snapshot:
        await self.client.save_shop(self.user_id, shop)
        return await self.refresh()

    async def delete_shop(self, shop_id: str) -> Snapshot:
        await self.client.delete_shop(self.user_id, shop_id)
        return await self.refresh()

    async def save_bill(self, bill: Bill) -> Snapshot:
        await self.client.save_bill(self.user_id, bill)
        return await self.refresh()

    async def delete_bill(self, bill_id: str) -> Snapshot:
        await self.client.delete_bill(self.user_id, bill_id)
        return await self.refresh()
