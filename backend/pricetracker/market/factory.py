"""Factory for creating market data sources."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .cache import PriceCache
from .interface import MarketDataSource

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)


def create_market_data_source(
    price_cache: PriceCache,
    symbols: list[str],
    settings: Settings,
) -> MarketDataSource:
    """Create the data source selected by settings.feed.

    - "binance"   → BinanceBookTickerFeed (live bookTicker streams)
    - "simulator" → SimulatorDataSource (offline GBM quotes)

    Returns an unconnected source. Caller must await source.connect().
    """
    if settings.feed == "binance":
        from .binance_client import BinanceBookTickerFeed

        logger.info("Market data source: Binance bookTicker (%s)", settings.ws_url)
        return BinanceBookTickerFeed(
            price_cache=price_cache,
            symbols=symbols,
            url=settings.ws_url,
            open_timeout=settings.connect_timeout,
        )
    if settings.feed == "simulator":
        from .simulator import SimulatorDataSource

        logger.info("Market data source: GBM Simulator")
        return SimulatorDataSource(price_cache=price_cache, symbols=symbols)

    raise ValueError(f"Unknown market data source: {settings.feed!r}")
