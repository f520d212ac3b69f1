from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query

from app.api import deps
from app.config import settings
from app.schemas.responses import SuccessResponse
from app.services.data_store import DataStore

router = APIRouter()


@router.get("/suggest", response_model=SuccessResponse[List[str]])
async def suggest_items(
    q: str = "",
    shop_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=50),
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    """
    Item names starting with `q` (case-insensitive), learned from past bills.
    With `shop_id`, only that shop's bills are used.
    """
    index = store.item_index(shop_id)
    return SuccessResponse(data=index.search(q, limit or settings.SUGGESTION_LIMIT))
