"""Centralized Enum Definitions"""

import enum


# Domain 1: Bills
class BillStatus(str, enum.Enum):
    """Payment state of a bill"""
    NOT_PAID = "NOT_PAID"
    PAID = "PAID"
    CANCELED = "CANCELED"


# Domain 2: Bill list view
class StatusFilter(str, enum.Enum):
    """Status criterion of the bill list; ALL disables it"""
    ALL = "ALL"
    NOT_PAID = "NOT_PAID"
    PAID = "PAID"
    CANCELED = "CANCELED"


class DateWindow(str, enum.Enum):
    """Date criterion of the bill list"""
    ALL = "ALL"
    LAST_7_DAYS = "7DAYS"
    LAST_30_DAYS = "30DAYS"
    CUSTOM = "CUSTOM"

    @property
    def days(self):
        return {"7DAYS": 7, "30DAYS": 30}.get(self.value)


class SortOption(str, enum.Enum):
    """Ordering policy of the bill list"""
    STATUS_FIRST = "status-first"
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    AMOUNT_DESC = "amount-desc"
    AMOUNT_ASC = "amount-asc"


# Domain 3: Shop list view
class ShopBalanceFilter(str, enum.Enum):
    """Shop list filter on outstanding balance"""
    ALL = "ALL"
    PENDING = "PENDING"
    CLEARED = "CLEARED"


class ShopSortOption(str, enum.Enum):
    """Ordering policy of the shop list"""
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    AMOUNT_DESC = "amount-desc"
    AMOUNT_ASC = "amount-asc"
    RECEIVED_DESC = "received-desc"
    DATE_DESC = "date-desc"
