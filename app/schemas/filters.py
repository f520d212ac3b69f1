"""Bill and shop list criteria

Every criterion is parsed leniently: a value that cannot be understood
becomes "no constraint" instead of a validation error.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, field_validator

from app.models.enums import DateWindow, ShopBalanceFilter, ShopSortOption, SortOption, StatusFilter
from app.utils.numbers import to_number
from app.utils.time import parse_timestamp


def _enum_or_default(enum_cls, value: Any, default):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        return default


class BillFilter(BaseModel):
    """Conjunctive criteria applied to one shop's bills"""
    status: StatusFilter = StatusFilter.ALL
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    date_window: DateWindow = DateWindow.CUSTOM
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def lenient_status(cls, v: Any) -> StatusFilter:
        return _enum_or_default(StatusFilter, v, StatusFilter.ALL)

    @field_validator("date_window", mode="before")
    @classmethod
    def lenient_window(cls, v: Any) -> DateWindow:
        return _enum_or_default(DateWindow, v, DateWindow.CUSTOM)

    @field_validator("min_amount", "max_amount", mode="before")
    @classmethod
    def lenient_amount(cls, v: Any) -> Optional[float]:
        return to_number(v)

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def lenient_date(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @property
    def has_amount_bounds(self) -> bool:
        return self.min_amount is not None or self.max_amount is not None

    @property
    def has_explicit_dates(self) -> bool:
        return self.date_from is not None or self.date_to is not None


class ShopListQuery(BaseModel):
    """Search, balance filter and ordering for the shop list"""
    search: str = ""
    balance: ShopBalanceFilter = ShopBalanceFilter.ALL
    sort: ShopSortOption = ShopSortOption.AMOUNT_DESC

    @field_validator("search", mode="before")
    @classmethod
    def blank_search(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else ""

    @field_validator("balance", mode="before")
    @classmethod
    def lenient_balance(cls, v: Any) -> ShopBalanceFilter:
        return _enum_or_default(ShopBalanceFilter, v, ShopBalanceFilter.ALL)

    @field_validator("sort", mode="before")
    @classmethod
    def lenient_sort(cls, v: Any) -> ShopSortOption:
        return _enum_or_default(ShopSortOption, v, ShopSortOption.AMOUNT_DESC)


def parse_sort(value: Any) -> SortOption:
    return _enum_or_default(SortOption, value, SortOption.STATUS_FIRST)
