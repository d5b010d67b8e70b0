"""Periodic snapshots of the price cache."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from enum import Enum
from threading import Lock

from .cache import PriceCache
from .models import PriceEntry, Snapshot
from .symbols import normalize_symbol

logger = logging.getLogger(__name__)


class RetentionPolicy(str, Enum):
    SINGLE_SLOT = "single-slot"  # Only the latest snapshot is kept
    FIFO = "fifo"  # Up to N snapshots, oldest evicted first


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotScheduler:
    """Captures the whole PriceCache on a fixed interval and retains the
    most recent captures in memory.

    With max_snapshots=1 the buffer behaves as a single slot that every
    capture overwrites; larger values give a bounded FIFO.
    """

    def __init__(
        self,
        price_cache: PriceCache,
        max_snapshots: int = 1,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")
        self._cache = price_cache
        self._clock = clock
        self._snapshots: deque[Snapshot] = deque(maxlen=max_snapshots)
        self._lock = Lock()
        self._task: asyncio.Task | None = None
        self._interval: float | None = None

    @property
    def max_snapshots(self) -> int:
        return self._snapshots.maxlen

    @property
    def retention_policy(self) -> RetentionPolicy:
        return RetentionPolicy.SINGLE_SLOT if self.max_snapshots == 1 else RetentionPolicy.FIFO

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, interval_seconds: float) -> None:
        """Capture every `interval_seconds`, first capture one interval from now.

        Calling start() while already running logs a warning and does nothing.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if self.is_running:
            logger.warning("Snapshot scheduler already running every %ss; ignoring start()", self._interval)
            return
        self._interval = interval_seconds
        self._task = asyncio.create_task(self._run_loop(interval_seconds), name="snapshot-scheduler")
        logger.info(
            "Snapshot scheduler started: every %ss, %s retention (max %d)",
            interval_seconds,
            self.retention_policy.value,
            self.max_snapshots,
        )

    async def stop(self) -> None:
        """Stop future captures. Safe to call when not running."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Snapshot scheduler stopped")
        self._task = None

    def capture(self) -> Snapshot:
        """Copy the cache, timestamp it and retain it. Never raises.

        If the cache cannot be read the failure is logged and an empty
        snapshot is retained so the cycle is still visible.
        """
        try:
            prices = self._cache.get_all()
        except Exception:
            logger.exception("Failed to read price cache; recording empty snapshot")
            prices = {}

        snapshot = Snapshot(captured_at=self._clock(), prices=prices)
        with self._lock:
            self._snapshots.append(snapshot)

        if not prices:
            logger.warning("Snapshot at %s captured an empty cache", snapshot.timestamp)
        else:
            logger.info("Snapshot at %s - %d symbols", snapshot.timestamp, len(prices))
        return snapshot

    def get_latest(self) -> Snapshot | None:
        with self._lock:
            return self._snapshots[-1] if self._snapshots else None

    def get_history(self) -> list[Snapshot]:
        """All retained snapshots, oldest first."""
        with self._lock:
            return list(self._snapshots)

    def get_symbol_history(self, symbol: str) -> list[tuple[datetime, PriceEntry]]:
        """(captured_at, entry) for each retained snapshot containing the symbol."""
        symbol = normalize_symbol(symbol)
        return [
            (snapshot.captured_at, snapshot.prices[symbol])
            for snapshot in self.get_history()
            if symbol in snapshot.prices
        ]

    def restore(self, snapshots: Iterable[Snapshot]) -> None:
        """Replace the buffer with previously persisted snapshots (newest N kept)."""
        with self._lock:
            self._snapshots.clear()
            self._snapshots.extend(snapshots)
            count = len(self._snapshots)
        logger.info("Restored %d snapshots", count)

    def clear(self) -> None:
        with self._lock:
            self._snapshots.clear()
        logger.info("Snapshots cleared")

    async def _run_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.capture()
