"""Thread-safe in-memory best-bid/best-ask cache."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from threading import Lock

from .models import PriceEntry
from .symbols import normalize_symbol

logger = logging.getLogger(__name__)


class PriceCache:
    """Thread-safe in-memory cache of the latest quote for each symbol.

    Writers: BinanceBookTickerFeed or SimulatorDataSource (one at a time).
    Readers: SnapshotScheduler, HTTP/SSE endpoints.

    Entries are frozen, so copies returned by get_all()/get_many() are
    isolated from the live cache even though they are shallow.
    """

    def __init__(self) -> None:
        self._prices: dict[str, PriceEntry] = {}
        self._lock = Lock()
        self._version: int = 0  # Monotonically increasing; bumped on every write

    def initialize(self, symbols: Iterable[str]) -> None:
        """Reset every given symbol to the placeholder entry.

        Must run before the feed starts writing; running it again wipes any
        live quotes for those symbols.
        """
        placeholder = PriceEntry.placeholder()
        normalized = {normalize_symbol(s) for s in symbols}
        with self._lock:
            for symbol in normalized:
                self._prices[symbol] = placeholder
            self._version += 1
        logger.info("Price cache initialized for %d symbols", len(normalized))

    def upsert(self, symbol: str, entry: PriceEntry) -> None:
        """Replace the entry for a symbol.

        Symbols outside the registry are admitted as-is so the cache keeps
        up if the exchange lists something we were not told about.
        """
        symbol = normalize_symbol(symbol)
        with self._lock:
            self._prices[symbol] = entry
            self._version += 1

    def get(self, symbol: str) -> PriceEntry | None:
        """Latest entry for a symbol, or None if never initialized or updated."""
        with self._lock:
            return self._prices.get(normalize_symbol(symbol))

    def get_all(self) -> dict[str, PriceEntry]:
        """Copy of every entry."""
        with self._lock:
            return dict(self._prices)

    def get_many(self, symbols: Iterable[str]) -> dict[str, PriceEntry]:
        """Copy of the entries for the given symbols. Unknown symbols are skipped."""
        wanted = [normalize_symbol(s) for s in symbols]
        with self._lock:
            return {s: self._prices[s] for s in wanted if s in self._prices}

    def symbols(self) -> list[str]:
        with self._lock:
            return sorted(self._prices)

    @property
    def version(self) -> int:
        """Current version counter. Useful for SSE change detection."""
        return self._version

    def __len__(self) -> int:
        with self._lock:
            return len(self._prices)

    def __contains__(self, symbol: str) -> bool:
        with self._lock:
            return normalize_symbol(symbol) in self._prices
