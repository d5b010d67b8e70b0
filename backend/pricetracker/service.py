"""Composition root: wires the cache, feed, scheduler and store together."""

from __future__ import annotations

import asyncio
import logging

from .config import Settings
from .market.cache import PriceCache
from .market.factory import create_market_data_source
from .market.interface import MarketDataSource
from .market.persistence import SnapshotStore
from .market.snapshots import SnapshotScheduler
from .market.symbols import load_symbols

logger = logging.getLogger(__name__)


class PriceTrackerService:
    """Owns one instance of each component and runs the startup and
    shutdown sequences.

    Startup:  initialize cache → (restore snapshots) → connect feed →
              warm-up → start scheduler.
    Shutdown: stop scheduler → disconnect feed → save snapshots.
    """

    def __init__(
        self,
        settings: Settings,
        source: MarketDataSource | None = None,
        store: SnapshotStore | None = None,
    ) -> None:
        self.settings = settings
        self.symbols = load_symbols(settings.symbols_file)
        self.cache = PriceCache()
        self.source = source or create_market_data_source(self.cache, self.symbols, settings)
        self.scheduler = SnapshotScheduler(self.cache, max_snapshots=settings.snapshot_retention)
        self.store = store or SnapshotStore(settings.snapshot_file)
        self._started = False
        self._shutdown_done = False

    async def start(self) -> None:
        """Bring the service up. FeedConnectionError propagates to the caller."""
        if self._started:
            logger.warning("Service already started")
            return
        self.cache.initialize(self.symbols)

        if self.settings.restore_snapshots:
            snapshots = await asyncio.to_thread(self.store.load)
            self.scheduler.restore(snapshots)

        await self.source.connect()
        self._started = True
        self._shutdown_done = False

        if self.settings.warmup_seconds:
            # Let the first quotes arrive before the first capture
            await asyncio.sleep(self.settings.warmup_seconds)
        await self.scheduler.start(self.settings.snapshot_interval)

    async def shutdown(self) -> bool:
        """Stop capturing, close the feed, then persist. Safe to call twice.

        Returns whether the final save succeeded.
        """
        if self._shutdown_done:
            return True
        logger.info("Shutting down")
        await self.scheduler.stop()
        await self.source.disconnect()
        saved = await self.save_snapshots()
        self._shutdown_done = True
        self._started = False
        return saved

    async def save_snapshots(self) -> bool:
        """Write the retained snapshots without blocking the event loop."""
        return await asyncio.to_thread(self.store.save, self.scheduler.get_history())

    def status(self) -> dict:
        latest = self.scheduler.get_latest()
        return {
            "feed": self.source.state.value,
            "symbols": len(self.cache),
            "snapshots": len(self.scheduler.get_history()),
            "retention_policy": self.scheduler.retention_policy.value,
            "max_snapshots": self.scheduler.max_snapshots,
            "latest_snapshot": latest.timestamp if latest else None,
        }
