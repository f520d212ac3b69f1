"""Bill form helpers: totals, validation and turning a draft into a Bill."""

from datetime import datetime
from typing import Iterable, List, Optional

from app.core.exceptions import BillValidationError
from app.schemas.ledger import Bill, BillDraft, BillItem, BillItemDraft
from app.utils.time import get_utc_now

LEGACY_ITEM_NAME = "Legacy Bill Amount"


def calculate_total(items: Iterable) -> float:
    return sum(item.quantity * item.price for item in items)


def new_record_id(now: Optional[datetime] = None) -> str:
    """Millisecond timestamp, the id scheme the ledger API already uses"""
    now = now or get_utc_now()
    return str(int((now - datetime(1970, 1, 1)).total_seconds() * 1000))


def items_for_editing(bill: Bill) -> List[BillItemDraft]:
    """
    Draft lines for editing an existing bill.
    A legacy bill is presented as one line carrying its whole amount.
    """
    if bill.is_legacy:
        return [BillItemDraft(id="1", name=LEGACY_ITEM_NAME, quantity=1, price=bill.amount)]
    return [
        BillItemDraft(id=item.id, name=item.name, quantity=item.quantity, price=item.price)
        for item in bill.items
    ]


def validate_draft(draft: BillDraft) -> None:
    """
    Raises:
        BillValidationError: total is not positive, a line has no name, or
            a line has a non-positive quantity
    """
    if calculate_total(draft.items) <= 0:
        raise BillValidationError("Total amount must be greater than 0")
    if any(not item.name.strip() for item in draft.items):
        raise BillValidationError("Please enter names for all items")
    if any(item.quantity <= 0 for item in draft.items):
        raise BillValidationError("Quantity must be greater than 0")


def build_bill(
    draft: BillDraft,
    shop_id: str,
    *,
    existing: Optional[Bill] = None,
    now: Optional[datetime] = None,
) -> Bill:
    """Validated Bill whose amount matches its items."""
    validate_draft(draft)
    now = now or get_utc_now()

    items = [
        BillItem(
            id=line.id or f"{new_record_id(now)}-{position}",
            name=line.name.strip(),
            quantity=line.quantity,
            price=line.price,
        )
        for position, line in enumerate(draft.items)
    ]
    return Bill(
        id=existing.id if existing else new_record_id(now),
        shop_id=existing.shop_id if existing else shop_id,
        amount=calculate_total(items),
        items=items,
        status=draft.status,
        created_at=existing.created_at if existing else now,
        updated_at=now,
    )
