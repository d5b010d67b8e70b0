"""Market data subsystem.

Public API:
    QuoteSide, PriceEntry, Snapshot - Immutable quote/snapshot dataclasses
    PriceCache          - Thread-safe in-memory best bid/ask store
    MarketDataSource    - Abstract interface for feeds
    FeedState           - Feed connection state
    BinanceBookTickerFeed - Live Binance WebSocket feed
    SnapshotScheduler   - Periodic cache snapshots with bounded retention
    SnapshotStore       - JSON persistence for retained snapshots
    create_market_data_source - Factory that selects Binance or the simulator
"""

from .binance_client import BinanceBookTickerFeed
from .cache import PriceCache
from .decoder import decode_message
from .errors import DecodeError, FeedConnectionError, PersistenceError, PriceTrackerError
from .factory import create_market_data_source
from .interface import FeedState, MarketDataSource
from .models import PriceEntry, QuoteSide, QuoteUpdate, Snapshot, SubscriptionAck
from .persistence import SnapshotStore
from .snapshots import RetentionPolicy, SnapshotScheduler

__all__ = [
    "QuoteSide",
    "PriceEntry",
    "Snapshot",
    "QuoteUpdate",
    "SubscriptionAck",
    "PriceCache",
    "MarketDataSource",
    "FeedState",
    "BinanceBookTickerFeed",
    "SnapshotScheduler",
    "RetentionPolicy",
    "SnapshotStore",
    "decode_message",
    "create_market_data_source",
    "PriceTrackerError",
    "FeedConnectionError",
    "DecodeError",
    "PersistenceError",
]
