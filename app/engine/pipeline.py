"""Filter -> sort -> paginate pipeline for one shop's bill list

Each stage is a pure function of the previous stage's output. Malformed
criteria never reach this module as errors: BillFilter has already turned
them into "no constraint".
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from app.models.enums import BillStatus, DateWindow, SortOption, StatusFilter
from app.schemas.filters import BillFilter
from app.schemas.ledger import Bill
from app.utils.time import end_of_day, get_utc_now, start_of_day, to_naive_utc

BATCH_SIZE = 15


def filter_bills(bills: Iterable[Bill], bill_filter: BillFilter, *, now: Optional[datetime] = None) -> List[Bill]:
    result = list(bills)

    if bill_filter.status != StatusFilter.ALL:
        result = [b for b in result if b.status.value == bill_filter.status.value]

    if bill_filter.min_amount is not None:
        result = [b for b in result if b.amount >= bill_filter.min_amount]
    if bill_filter.max_amount is not None:
        result = [b for b in result if b.amount <= bill_filter.max_amount]

    window = bill_filter.date_window
    if window.days is not None:
        since = (to_naive_utc(now) if now is not None else get_utc_now()) - timedelta(days=window.days)
        result = [b for b in result if b.created_at >= since]
    elif window == DateWindow.CUSTOM:
        if bill_filter.date_from is not None:
            lower = start_of_day(bill_filter.date_from)
            result = [b for b in result if b.created_at >= lower]
        if bill_filter.date_to is not None:
            upper = end_of_day(bill_filter.date_to)
            result = [b for b in result if b.created_at <= upper]

    return result


def _created(bill: Bill) -> datetime:
    return bill.created_at


def _amount(bill: Bill) -> float:
    return bill.amount


def sort_bills(bills: Iterable[Bill], option: SortOption) -> List[Bill]:
    """
    Stable sort under one policy.

    status-first puts NOT_PAID bills ahead of everything else, newest
    first within each group.
    """
    if option == SortOption.STATUS_FIRST:
        newest_first = sorted(bills, key=_created, reverse=True)
        return sorted(newest_first, key=lambda b: b.status != BillStatus.NOT_PAID)
    if option == SortOption.DATE_DESC:
        return sorted(bills, key=_created, reverse=True)
    if option == SortOption.DATE_ASC:
        return sorted(bills, key=_created)
    if option == SortOption.AMOUNT_DESC:
        return sorted(bills, key=_amount, reverse=True)
    if option == SortOption.AMOUNT_ASC:
        return sorted(bills, key=_amount)
    return list(bills)


def paginate(bills: Sequence[Bill], visible: int) -> List[Bill]:
    return list(bills[:max(visible, 0)])


def run_pipeline(
    bills: Iterable[Bill],
    bill_filter: BillFilter,
    option: SortOption,
    visible: int,
    *,
    now: Optional[datetime] = None,
) -> List[Bill]:
    return paginate(sort_bills(filter_bills(bills, bill_filter, now=now), option), visible)


def active_filter_count(bill_filter: BillFilter, option: SortOption) -> int:
    """How many criteria differ from the defaults (badge on the filter button)"""
    count = 0
    if bill_filter.status != StatusFilter.ALL:
        count += 1
    if option != SortOption.STATUS_FIRST:
        count += 1
    if bill_filter.has_amount_bounds:
        count += 1
    if bill_filter.has_explicit_dates:
        count += 1
    return count


class BillListView:
    """
    The bill list of one shop as the user currently sees it.

    Holds the criteria and how many rows are revealed. Changing a criterion
    resets the reveal count to one batch; a new snapshot of bills keeps it.
    """

    def __init__(
        self,
        bills: Iterable[Bill] = (),
        bill_filter: Optional[BillFilter] = None,
        sort: SortOption = SortOption.STATUS_FIRST,
        *,
        batch_size: int = BATCH_SIZE,
        now: Optional[datetime] = None,
    ):
        self.batch_size = batch_size
        self._bills = list(bills)
        self._filter = bill_filter or BillFilter()
        self._sort = sort
        self._now = now
        self._visible_count = batch_size
        self._rows = self._compute()

    def _compute(self) -> List[Bill]:
        return sort_bills(filter_bills(self._bills, self._filter, now=self._now), self._sort)

    @property
    def bill_filter(self) -> BillFilter:
        return self._filter

    @property
    def sort(self) -> SortOption:
        return self._sort

    @property
    def visible_count(self) -> int:
        return self._visible_count

    @property
    def rows(self) -> List[Bill]:
        """Every filtered and sorted bill, revealed or not"""
        return list(self._rows)

    @property
    def visible(self) -> List[Bill]:
        return paginate(self._rows, self._visible_count)

    @property
    def total(self) -> int:
        return len(self._rows)

    @property
    def has_more(self) -> bool:
        return self._visible_count < len(self._rows)

    @property
    def active_filter_count(self) -> int:
        return active_filter_count(self._filter, self._sort)

    def apply(self, bill_filter: Optional[BillFilter] = None, sort: Optional[SortOption] = None) -> None:
        """Change criteria; always starts again from the first batch"""
        if bill_filter is not None:
            self._filter = bill_filter
        if sort is not None:
            self._sort = sort
        self._visible_count = self.batch_size
        self._rows = self._compute()

    def reveal_more(self) -> bool:
        """Show one more batch. Returns False once everything is already shown."""
        if not self.has_more:
            return False
        self._visible_count += self.batch_size
        return True

    def replace_bills(self, bills: Iterable[Bill]) -> None:
        self._bills = list(bills)
        self._rows = self._compute()
