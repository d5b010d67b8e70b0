"""Abstract interface for market data sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum


class FeedState(str, Enum):
    """Connection state. There is no reconnecting state: a dropped feed
    stays DISCONNECTED until connect() is called again."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class MarketDataSource(ABC):
    """Contract for market data providers.

    Implementations push quote updates into a shared PriceCache as they
    arrive. Downstream code never calls the data source directly for prices;
    it reads from the cache.

    Lifecycle:
        source = create_market_data_source(cache, symbols, settings)
        await source.connect()
        # ... app runs ...
        await source.disconnect()
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the feed, subscribe to every symbol and start receiving.

        Raises FeedConnectionError if the feed cannot be opened. Does not retry.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Stop receiving and release the connection.

        Safe to call multiple times. After disconnect(), the source will not
        write to the cache again.
        """

    @property
    @abstractmethod
    def state(self) -> FeedState:
        """Current connection state."""

    def is_connected(self) -> bool:
        """Best-effort; may lag a transport failure briefly."""
        return self.state is FeedState.CONNECTED

    @abstractmethod
    def get_symbols(self) -> list[str]:
        """Return the symbols this source subscribes to."""
