"""Error types for the market data subsystem."""

from __future__ import annotations


class PriceTrackerError(Exception):
    """Base class for all price tracker errors."""


class FeedConnectionError(PriceTrackerError, ConnectionError):
    """The feed connection could not be opened or was lost.

    Fatal to the connect attempt that raised it. Nothing retries it.
    """


class DecodeError(PriceTrackerError, ValueError):
    """An inbound feed message was malformed or of an unknown shape."""


class PersistenceError(PriceTrackerError, OSError):
    """Reading or writing the snapshot file failed."""
