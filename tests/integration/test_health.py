"""Integration tests: Health and root endpoints."""

import asyncio
import logging

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.exceptions import LedgerApiError
from app.main import _log_refresh_failure, app


@pytest.mark.asyncio
async def test_health():
    """Health endpoint at /health."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["loading"] is False
    assert "X-Request-ID" in resp.headers


@pytest.mark.asyncio
async def test_request_id_is_propagated():
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        resp = await client.get("/", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_api_without_store_is_unavailable():
    app.state.data_store = None
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        resp = await client.get("/api/v1/shops")
    assert resp.status_code == 503


@pytest.mark.asyncio
async def test_failed_startup_refresh_is_logged(caplog):
    async def failing_refresh():
        raise LedgerApiError("Server Error: 500", action="getShops")

    task = asyncio.create_task(failing_refresh())
    task.add_done_callback(_log_refresh_failure)
    with caplog.at_level(logging.ERROR, logger="app.main"):
        await asyncio.gather(task, return_exceptions=True)
        await asyncio.sleep(0)

    [record] = [r for r in caplog.records if r.name == "app.main"]
    assert record.message == "Initial refresh failed"
    assert isinstance(record.exc_info[1], LedgerApiError)
