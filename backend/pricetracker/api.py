"""FastAPI application exposing the price tracker."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, HTTPException

from .config import Settings
from .market.stream import create_prices_router, create_snapshots_router, create_stream_router
from .service import PriceTrackerService

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, service: PriceTrackerService | None = None) -> FastAPI:
    """Build the app. The lifespan runs the service startup and shutdown sequences."""
    service = service or PriceTrackerService(settings or Settings.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await service.start()
        try:
            yield
        finally:
            await service.shutdown()

    app = FastAPI(title="Price Tracker", version="0.1.0", lifespan=lifespan)
    app.state.service = service

    admin = APIRouter(prefix="/api", tags=["admin"])

    @admin.get("/health")
    async def health() -> dict:
        return service.status()

    @admin.post("/snapshots/save")
    async def save_snapshots() -> dict:
        """Persist the retained snapshots now."""
        if not await service.save_snapshots():
            raise HTTPException(status_code=500, detail="Saving snapshots failed")
        return {"saved": len(service.scheduler.get_history()), "path": str(service.store.path)}

    app.include_router(admin)
    app.include_router(create_prices_router(service.cache))
    app.include_router(create_snapshots_router(service.scheduler))
    app.include_router(create_stream_router(service.cache))
    return app
