from typing import Any, List
from fastapi import APIRouter, Depends, HTTPException, status

from app.api import deps
from app.schemas.ledger import Bill, BillDraft, BillItemDraft
from app.schemas.responses import SuccessResponse
from app.services.bill_drafts import build_bill, items_for_editing
from app.services.data_store import DataStore

router = APIRouter()


def _require_bill(store: DataStore, bill_id: str) -> Bill:
    bill = store.get_bill(bill_id)
    if not bill:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bill not found"
        )
    return bill


@router.get("/{bill_id}", response_model=SuccessResponse[Bill])
async def get_bill(
    bill_id: str,
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    return SuccessResponse(data=_require_bill(store, bill_id))


@router.get("/{bill_id}/draft", response_model=SuccessResponse[List[BillItemDraft]])
async def get_bill_draft(
    bill_id: str,
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    """
    Editable lines for a bill. Legacy bills come back as a single line.
    """
    return SuccessResponse(data=items_for_editing(_require_bill(store, bill_id)))


@router.put("/{bill_id}", response_model=SuccessResponse[Bill])
async def update_bill(
    bill_id: str,
    draft: BillDraft,
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    existing = _require_bill(store, bill_id)
    bill = build_bill(draft, existing.shop_id, existing=existing)
    await store.save_bill(bill)
    return SuccessResponse(data=bill, message="Bill updated")


@router.delete("/{bill_id}", response_model=SuccessResponse[None])
async def delete_bill(
    bill_id: str,
    store: DataStore = Depends(deps.get_data_store),
) -> Any:
    _require_bill(store, bill_id)
    await store.delete_bill(bill_id)
    return SuccessResponse(data=None, message="Bill deleted")
