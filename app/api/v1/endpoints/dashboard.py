from typing import Any
from fastapi import APIRouter, Depends, Query

from app.api import deps
from app.engine.aggregation import top_pending_shops
from app.schemas.ledger import DashboardView
from app.schemas.responses import SuccessResponse
from app.services.data_store import DataStore

router = APIRouter()


@router.get("", response_model=SuccessResponse[DashboardView])
async def get_dashboard(
    top: int = Query(5, ge=0, le=50),
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    """
    Totals across all shops plus the shops with the highest pending amount.
    """
    view = DashboardView(
        stats=store.dashboard(),
        top_shops=top_pending_shops(store.shop_stats(), top),
    )
    return SuccessResponse(data=view)


@router.post("/refresh", response_model=SuccessResponse[DashboardView])
async def refresh_data(
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    """
    Reload shops and bills from the remote ledger.
    """
    await store.refresh()
    view = DashboardView(
        stats=store.dashboard(),
        top_shops=top_pending_shops(store.shop_stats()),
    )
    return SuccessResponse(data=view, message="Data refreshed")
