from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query, status

from app.api import deps
from app.engine.aggregation import list_shop_stats
from app.engine.pipeline import BillListView
from app.config import settings
from app.schemas.filters import BillFilter, ShopListQuery, parse_sort
from app.schemas.ledger import Bill, BillDraft, Shop, ShopCreate, ShopStat
from app.schemas.responses import RevealedResponse, RevealMeta, SuccessResponse
from app.services.bill_drafts import build_bill, new_record_id
from app.services.data_store import DataStore
from app.utils.time import get_utc_now

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[ShopStat]])
async def list_shops(
    search: str = "",
    balance: Optional[str] = None,
    sort: Optional[str] = None,
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    """
    Shops with their pending and received totals.
    Unknown balance or sort values fall back to the defaults.
    """
    query = ShopListQuery(search=search, balance=balance, sort=sort)
    return SuccessResponse(data=list_shop_stats(store.shop_stats(), query))


@router.post("", response_model=SuccessResponse[Shop], status_code=status.HTTP_201_CREATED)
async def create_shop(
    shop_in: ShopCreate,
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    now = get_utc_now()
    shop = Shop(id=new_record_id(now), name=shop_in.name, created_at=now)
    await store.save_shop(shop)
    return SuccessResponse(data=shop, message="Shop created")


@router.get("/{shop_id}", response_model=SuccessResponse[ShopStat])
async def get_shop(
    shop_id: str,
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    deps.require_shop(store, shop_id)
    return SuccessResponse(data=store.get_shop_stat(shop_id))


@router.delete("/{shop_id}", response_model=SuccessResponse[None])
async def delete_shop(
    shop_id: str,
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    """
    Delete a shop. Its bills are left in place on the remote ledger.
    """
    deps.require_shop(store, shop_id)
    await store.delete_shop(shop_id)
    return SuccessResponse(data=None, message="Shop deleted")


@router.get("/{shop_id}/bills", response_model=RevealedResponse[Bill])
async def list_shop_bills(
    shop_id: str,
    status: Optional[str] = None,
    min_amount: Optional[str] = None,
    max_amount: Optional[str] = None,
    date_window: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    sort: Optional[str] = None,
    reveals: int = Query(0, ge=0, description="Times 'reveal more' has fired"),
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    """
    One shop's bills, filtered, sorted and revealed in batches.
    Malformed amount or date bounds are ignored rather than rejected.
    """
    deps.require_shop(store, shop_id)
    bill_filter = BillFilter(
        status=status,
        min_amount=min_amount,
        max_amount=max_amount,
        date_window=date_window,
        date_from=date_from,
        date_to=date_to,
    )
    view = BillListView(
        store.bills_for_shop(shop_id),
        bill_filter,
        parse_sort(sort),
        batch_size=settings.BILL_BATCH_SIZE,
    )
    for _ in range(reveals):
        if not view.reveal_more():
            break

    rows = view.visible
    return RevealedResponse(
        data=rows,
        meta=RevealMeta(
            total=view.total,
            visible=len(rows),
            batch_size=view.batch_size,
            has_more=view.has_more,
            active_filters=view.active_filter_count,
        ),
    )


@router.post("/{shop_id}/bills", response_model=SuccessResponse[Bill], status_code=status.HTTP_201_CREATED)
async def create_bill(
    shop_id: str,
    draft: BillDraft,
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    deps.require_shop(store, shop_id)
    bill = build_bill(draft, shop_id)
    await store.save_bill(bill)
    return SuccessResponse(data=bill, message="Bill created")
