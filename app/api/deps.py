"""API Dependencies"""

from fastapi import HTTPException, Request, status

from app.schemas.ledger import Shop
from app.services.data_store import DataStore


def get_data_store(request: Request) -> DataStore:
    """
    Data store created by the application lifespan.

    Raises:
        HTTPException: If the application has not finished starting
    """
    store = getattr(request.app.state, "data_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Data store not initialized"
        )
    return store


def require_shop(store: DataStore, shop_id: str) -> Shop:
    shop = store.get_shop(shop_id)
    if not shop:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Shop not found"
        )
    return shop
