"""Client for the remote ledger API.

The API is a single endpoint that takes a JSON POST body of the form
``{"action": "<name>", ...payload}`` and answers with
``{"success": bool, "data": ..., "error": "..."}``.
Reads degrade to empty collections on failure; writes raise LedgerApiError.
"""

import json
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import ValidationError

from app.core.exceptions import LedgerApiError
from app.core.logging import get_logger
from app.schemas.ledger import AuthUser, Bill, LedgerModel, Shop

logger = get_logger(__name__)

M = TypeVar("M", bound=LedgerModel)


def _parse_records(model: Type[M], data: Any, action: str) -> List[M]:
    """Validate each record on its own so one bad row does not empty the list."""
    if not isinstance(data, list):
        logger.warning("Expected a list from %s, got %s", action, type(data).__name__)
        return []
    records: List[M] = []
    for raw in data:
        try:
            records.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning(
                "Skipping invalid %s record",
                model.__name__,
                extra={"action": action, "errors": e.errors(include_url=False, include_context=False, include_input=False)},
            )
    return records


class LedgerApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "LedgerApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def call(self, action: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """
        Run one action and return its `data`.

        Raises:
            LedgerApiError: transport failure, non-2xx status, an HTML page
                instead of JSON, unparseable JSON, or success=false
        """
        body = dict(payload or {})
        if isinstance(body.get("email"), str):
            body["email"] = body["email"].strip().lower()

        try:
            try:
                response = await self._client.post(self.base_url, content=json.dumps({"action": action, **body}))
            except httpx.HTTPError as e:
                raise LedgerApiError(f"Network error: {e}", action=action) from e

            if not response.is_success:
                raise LedgerApiError(f"Server Error: {response.status_code}", action=action)

            text = response.text.strip()
            if text.startswith("<!DOCTYPE") or text.startswith("<html"):
                raise LedgerApiError(
                    "API Configuration Error: the endpoint returned HTML. Check deployment settings.",
                    action=action,
                )

            try:
                result = json.loads(text)
            except ValueError as e:
                raise LedgerApiError("Failed to parse server response.", action=action) from e

            if not isinstance(result, dict) or not result.get("success"):
                error = result.get("error") if isinstance(result, dict) else None
                raise LedgerApiError(error or "Request failed", action=action)
        except LedgerApiError as e:
            logger.error("Ledger API error [%s]: %s", action, e)
            raise

        return result.get("data")

    # Auth

    async def register(self, email: str, password: str, name: str) -> AuthUser:
        data = await self.call("register", {"email": email, "password": password, "name": name})
        return AuthUser.model_validate(data)

    async def login(self, email: str, password: str) -> AuthUser:
        data = await self.call("login", {"email": email, "password": password})
        return AuthUser.model_validate(data)

    # Shops

    async def get_shops(self, user_id: str) -> List[Shop]:
        try:
            data = await self.call("getShops", {"userId": user_id})
        except LedgerApiError as e:
            logger.warning("Returning empty shops due to API error: %s", e, extra={"user_id": user_id})
            return []
        return _parse_records(Shop, data, "getShops")

    async def save_shop(self, user_id: str, shop: Shop) -> None:
        await self.call("saveShop", {"userId": user_id, "shop": shop.to_wire()})

    async def delete_shop(self, user_id: str, shop_id: str) -> None:
        await self.call("deleteShop", {"userId": user_id, "shopId": shop_id})

    # Bills

    async def get_bills(self, user_id: str) -> List[Bill]:
        try:
            data = await self.call("getBills", {"userId": user_id})
        except LedgerApiError as e:
            logger.warning("Returning empty bills due to API error: %s", e, extra={"user_id": user_id})
            return []
        return _parse_records(Bill, data, "getBills")

    async def save_bill(self, user_id: str, bill: Bill) -> None:
        await self.call("saveBill", {"userId": user_id, "bill": bill.to_wire()})

    async def delete_bill(self, user_id: str, bill_id: str) -> None:
        await self.call("deleteBill", {"userId": user_id, "billId": bill_id})
