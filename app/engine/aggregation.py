"""Per-shop and dashboard statistics derived from a shop/bill snapshot

Everything here is a pure function of its inputs. Callers decide when to
recompute; the data store memoizes per snapshot.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from app.models.enums import BillStatus, ShopBalanceFilter, ShopSortOption
from app.schemas.filters import ShopListQuery
from app.schemas.ledger import Bill, DashboardStats, Shop, ShopStat
from app.utils.numbers import coerce_amount


def compute_shop_stats(shops: Iterable[Shop], bills: Iterable[Bill]) -> List[ShopStat]:
    """
    One ShopStat per shop, in shop order.

    NOT_PAID bills count toward pending totals, PAID bills toward received;
    CANCELED bills and bills of unknown shops are ignored.
    """
    pending_count: Dict[str, int] = defaultdict(int)
    total_pending: Dict[str, float] = defaultdict(float)
    total_received: Dict[str, float] = defaultdict(float)

    for bill in bills:
        if bill.status == BillStatus.NOT_PAID:
            pending_count[bill.shop_id] += 1
            total_pending[bill.shop_id] += coerce_amount(bill.amount)
        elif bill.status == BillStatus.PAID:
            total_received[bill.shop_id] += coerce_amount(bill.amount)

    return [
        ShopStat(
            shop=shop,
            pending_count=pending_count.get(shop.id, 0),
            total_pending=total_pending.get(shop.id, 0.0),
            total_received=total_received.get(shop.id, 0.0),
        )
        for shop in shops
    ]


def compute_dashboard(shops: Sequence[Shop], bills: Iterable[Bill]) -> DashboardStats:
    """Shop count plus every pending bill, orphans included"""
    pending = [bill for bill in bills if bill.status == BillStatus.NOT_PAID]
    return DashboardStats(
        total_shops=len(shops),
        total_pending_bills=len(pending),
        total_amount_to_collect=sum(coerce_amount(bill.amount) for bill in pending),
    )


def top_pending_shops(stats: Iterable[ShopStat], limit: int = 5) -> List[ShopStat]:
    """Shops owing the most, highest first"""
    if limit <= 0:
        return []
    return sorted(stats, key=lambda s: -s.total_pending)[:limit]


_SHOP_SORT_KEYS = {
    ShopSortOption.NAME_ASC: (lambda s: s.shop.name.casefold(), False),
    ShopSortOption.NAME_DESC: (lambda s: s.shop.name.casefold(), True),
    ShopSortOption.AMOUNT_DESC: (lambda s: s.total_pending, True),
    ShopSortOption.AMOUNT_ASC: (lambda s: s.total_pending, False),
    ShopSortOption.RECEIVED_DESC: (lambda s: s.total_received, True),
    ShopSortOption.DATE_DESC: (lambda s: s.shop.created_at, True),
}


def list_shop_stats(stats: Iterable[ShopStat], query: ShopListQuery) -> List[ShopStat]:
    """Shop list as shown to the user: name search, balance filter, then a stable sort"""
    result = list(stats)

    if query.search:
        needle = query.search.casefold()
        result = [s for s in result if needle in s.shop.name.casefold()]

    if query.balance == ShopBalanceFilter.PENDING:
        result = [s for s in result if s.total_pending > 0]
    elif query.balance == ShopBalanceFilter.CLEARED:
        result = [s for s in result if s.total_pending == 0]

    key, descending = _SHOP_SORT_KEYS[query.sort]
    # sorted(reverse=True) keeps equal elements in input order
    return sorted(result, key=key, reverse=descending)
