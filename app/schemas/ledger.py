"""Ledger Pydantic Schemas

Field names are snake_case in Python and camelCase on the wire
(the remote ledger API and the local cache both use the camelCase form).
"""

import json
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

from app.core.logging import get_logger
from app.models.enums import BillStatus
from app.utils.numbers import coerce_amount
from app.utils.time import to_naive_utc

logger = get_logger(__name__)


def _format_timestamp(value: datetime) -> str:
    # ISO-8601, millisecond precision, UTC 'Z' suffix
    return to_naive_utc(value).isoformat(timespec="milliseconds") + "Z"


class LedgerModel(BaseModel):
    """Base for ledger records: accepts both camelCase and snake_case input"""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump in the camelCase JSON form used by the remote API and the cache"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Shop(LedgerModel):
    """A shop the user keeps bills for"""
    id: str
    name: str = Field(..., min_length=1)
    created_at: datetime = Field(..., alias="createdAt")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("created_at")
    @classmethod
    def naive_utc(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @field_serializer("created_at", when_used="json")
    def serialize_created_at(self, v: datetime) -> str:
        return _format_timestamp(v)


class BillItem(LedgerModel):
    """One line of a bill"""
    id: str
    name: str
    quantity: float = Field(..., gt=0)
    price: float = Field(..., ge=0)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @property
    def line_total(self) -> float:
        return self.quantity * self.price


def normalize_items(value: Any) -> Optional[list]:
    """
    Bring a bill's `items` field to one shape before validation.

    The remote API may deliver items as a JSON-encoded string. Empty and
    missing values mean a legacy bill (None). Malformed JSON is logged and
    treated as a legacy bill as well.
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = json.loads(text)
        except ValueError:
            logger.warning("Discarding unparseable bill items", extra={"items": text[:100]})
            return None
        if value is None:
            return None
    if not isinstance(value, (list, tuple)):
        logger.warning("Discarding bill items of unexpected type", extra={"type": type(value).__name__})
        return None
    return list(value)


class Bill(LedgerModel):
    """
    A bill raised against a shop.

    `amount` must equal the sum of quantity * price over `items` whenever
    items are present; it is never re-derived on read. Bills without items
    are legacy bills whose amount is authoritative.
    """
    id: str
    shop_id: str = Field(..., alias="shopId")
    amount: float = 0.0
    items: Optional[List[BillItem]] = None
    status: BillStatus
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @field_validator("id", "shop_id", mode="before")
    @classmethod
    def stringify_ids(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("amount", mode="before")
    @classmethod
    def lenient_amount(cls, v: Any) -> float:
        return coerce_amount(v)

    @field_validator("items", mode="before")
    @classmethod
    def decode_items(cls, v: Any) -> Optional[list]:
        items = normalize_items(v)
        if items is None:
            return None
        try:
            return [BillItem.model_validate(item) for item in items]
        except ValidationError as e:
            # treated as a legacy bill
            logger.warning("Discarding invalid bill items", extra={"errors": e.error_count()})
            return None

    @field_validator("created_at", "updated_at")
    @classmethod
    def naive_utc(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @field_serializer("created_at", "updated_at", when_used="json")
    def serialize_timestamps(self, v: datetime) -> str:
        return _format_timestamp(v)

    @property
    def is_legacy(self) -> bool:
        return not self.items


class ShopStat(LedgerModel):
    """Per-shop summary derived from the current snapshot; never persisted"""
    shop: Shop
    pending_count: int = Field(0, alias="pendingCount")
    total_pending: float = Field(0.0, alias="totalPending")
    total_received: float = Field(0.0, alias="totalReceived")


class DashboardStats(LedgerModel):
    """Totals across every shop"""
    total_shops: int = Field(0, alias="totalShops")
    total_pending_bills: int = Field(0, alias="totalPendingBills")
    total_amount_to_collect: float = Field(0.0, alias="totalAmountToCollect")


class AuthUser(LedgerModel):
    """Account returned by the remote login/register actions"""
    id: str
    email: str
    name: str
    status: str = "ACTIVE"

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class BillItemDraft(BaseModel):
    """A bill line as typed in the bill form"""
    id: Optional[str] = None
    name: str = ""
    quantity: float = 1
    price: float = Field(0, ge=0)


class BillDraft(BaseModel):
    """Bill form contents; the amount is always derived from the items"""
    items: List[BillItemDraft] = Field(default_factory=list)
    status: BillStatus = BillStatus.NOT_PAID


class ShopCreate(BaseModel):
    """Shop form contents"""
    name: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Shop name must not be blank")
        return v


class DashboardView(LedgerModel):
    """Dashboard payload: overall totals and the shops owing the most"""
    stats: DashboardStats
    top_shops: List[ShopStat] = Field(default_factory=list, alias="topShops")
