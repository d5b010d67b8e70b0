"""HTTP read endpoints and SSE stream for live quotes and snapshots."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from .cache import PriceCache
from .snapshots import SnapshotScheduler

logger = logging.getLogger(__name__)


def create_prices_router(price_cache: PriceCache) -> APIRouter:
    """Create the /api/prices router bound to a price cache."""
    router = APIRouter(prefix="/api/prices", tags=["prices"])

    @router.get("")
    async def get_prices(symbols: str | None = None) -> dict:
        """All quotes, or only the comma-separated `symbols` that are known."""
        if symbols:
            entries = price_cache.get_many(s for s in symbols.split(",") if s.strip())
        else:
            entries = price_cache.get_all()
        return {symbol: entry.to_dict() for symbol, entry in entries.items()}

    @router.get("/{symbol}")
    async def get_price(symbol: str) -> dict:
        entry = price_cache.get(symbol)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Unknown symbol {symbol}")
        return entry.to_dict()

    return router


def create_snapshots_router(scheduler: SnapshotScheduler) -> APIRouter:
    """Create the /api/snapshots router bound to a scheduler."""
    router = APIRouter(prefix="/api/snapshots", tags=["snapshots"])

    @router.get("")
    async def get_snapshots() -> list[dict]:
        return [snapshot.to_dict() for snapshot in scheduler.get_history()]

    @router.get("/latest")
    async def get_latest_snapshot() -> dict:
        latest = scheduler.get_latest()
        if latest is None:
            raise HTTPException(status_code=404, detail="No snapshot captured yet")
        return latest.to_dict()

    @router.get("/{symbol}")
    async def get_symbol_history(symbol: str) -> list[dict]:
        return [
            {"timestamp": captured_at.isoformat(), "price": entry.to_dict()}
            for captured_at, entry in scheduler.get_symbol_history(symbol)
        ]

    return router


def create_stream_router(price_cache: PriceCache) -> APIRouter:
    """Create the SSE streaming router with a reference to the price cache.

    This factory pattern lets us inject the PriceCache without globals.
    """
    router = APIRouter(prefix="/api/stream", tags=["streaming"])

    @router.get("/prices")
    async def stream_prices(request: Request) -> StreamingResponse:
        """SSE endpoint for live quotes.

        Pushes the full cache whenever it changes, at most every ~500ms:

            data: {"BTCUSDT": {"ask": ["50001.00", "2.0"], "bid": [...]}, ...}
        """
        return StreamingResponse(
            _generate_events(price_cache, request),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
            },
        )

    return router


async def _generate_events(
    price_cache: PriceCache,
    request: Request,
    interval: float = 0.5,
) -> AsyncGenerator[str, None]:
    """Async generator that yields SSE-formatted quote events.

    Stops when the client disconnects (detected via request.is_disconnected()).
    """
    # Tell the client to retry after 1 second if the connection drops
    yield "retry: 1000\n\n"

    last_version = -1
    client_ip = request.client.host if request.client else "unknown"
    logger.info("SSE client connected: %s", client_ip)

    try:
        while True:
            if await request.is_disconnected():
                logger.info("SSE client disconnected: %s", client_ip)
                break

            current_version = price_cache.version
            if current_version != last_version:
                last_version = current_version
                prices = price_cache.get_all()

                if prices:
                    data = {symbol: entry.to_dict() for symbol, entry in prices.items()}
                    yield f"data: {json.dumps(data)}\n\n"

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        logger.info("SSE stream cancelled for: %s", client_ip)
        raise
