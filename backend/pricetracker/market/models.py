"""Data models for market data."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType

PLACEHOLDER_VALUE = "0"


@dataclass(frozen=True, slots=True)
class QuoteSide:
    """One side of the book: (price, quantity) as exact decimal strings.

    Values come straight from the feed and are never parsed to float.
    """

    price: str
    quantity: str

    def __post_init__(self) -> None:
        if not self.price or not self.quantity:
            raise ValueError("QuoteSide price and quantity must be non-empty")

    @classmethod
    def placeholder(cls) -> QuoteSide:
        return cls(PLACEHOLDER_VALUE, PLACEHOLDER_VALUE)

    @property
    def price_decimal(self) -> Decimal:
        return Decimal(self.price)

    @property
    def quantity_decimal(self) -> Decimal:
        return Decimal(self.quantity)

    @property
    def is_placeholder(self) -> bool:
        return self.price == PLACEHOLDER_VALUE and self.quantity == PLACEHOLDER_VALUE

    def to_list(self) -> list[str]:
        return [self.price, self.quantity]

    @classmethod
    def from_list(cls, value: object) -> QuoteSide:
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ValueError(f"Expected [price, quantity], got {value!r}")
        price, quantity = value
        if not isinstance(price, str) or not isinstance(quantity, str):
            raise ValueError(f"Price and quantity must be strings, got {value!r}")
        return cls(price, quantity)


@dataclass(frozen=True, slots=True)
class PriceEntry:
    """Best ask and best bid for a single symbol."""

    ask: QuoteSide
    bid: QuoteSide

    @classmethod
    def placeholder(cls) -> PriceEntry:
        """Entry used for every symbol before its first update arrives."""
        return cls(ask=QuoteSide.placeholder(), bid=QuoteSide.placeholder())

    @property
    def is_placeholder(self) -> bool:
        return self.ask.is_placeholder and self.bid.is_placeholder

    @property
    def spread(self) -> Decimal | None:
        """Ask minus bid, or None while either side is still the placeholder."""
        if self.ask.is_placeholder or self.bid.is_placeholder:
            return None
        return self.ask.price_decimal - self.bid.price_decimal

    def to_dict(self) -> dict[str, list[str]]:
        """Serialize as {"ask": [price, qty], "bid": [price, qty]}."""
        return {"ask": self.ask.to_list(), "bid": self.bid.to_list()}

    @classmethod
    def from_dict(cls, data: object) -> PriceEntry:
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected a mapping for PriceEntry, got {type(data).__name__}")
        try:
            ask, bid = data["ask"], data["bid"]
        except KeyError as e:
            raise ValueError(f"PriceEntry missing field {e}") from e
        return cls(ask=QuoteSide.from_list(ask), bid=QuoteSide.from_list(bid))


def _freeze(prices: Mapping[str, PriceEntry]) -> Mapping[str, PriceEntry]:
    return MappingProxyType(dict(prices))


@dataclass(frozen=True, slots=True, eq=False)
class Snapshot:
    """Immutable point-in-time copy of the whole price cache.

    Compared by value but unhashable, since the prices mapping is not hashable.
    """

    captured_at: datetime
    prices: Mapping[str, PriceEntry] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Frozen dataclass: bypass __setattr__ to store a read-only copy
        object.__setattr__(self, "prices", _freeze(self.prices))

    @property
    def timestamp(self) -> str:
        """ISO-8601 capture time."""
        return self.captured_at.isoformat()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self.captured_at == other.captured_at and dict(self.prices) == dict(other.prices)

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> dict:
        """Serialize for JSON persistence / HTTP responses."""
        return {
            "timestamp": self.timestamp,
            "prices": {symbol: entry.to_dict() for symbol, entry in self.prices.items()},
        }

    @classmethod
    def from_dict(cls, data: object) -> Snapshot:
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected a mapping for Snapshot, got {type(data).__name__}")
        try:
            captured_at = datetime.fromisoformat(data["timestamp"])
            raw_prices = data["prices"]
        except KeyError as e:
            raise ValueError(f"Snapshot missing field {e}") from e
        except TypeError as e:
            raise ValueError(f"Invalid snapshot timestamp: {e}") from e
        if not isinstance(raw_prices, Mapping):
            raise ValueError("Snapshot prices must be a mapping")
        prices = {str(symbol): PriceEntry.from_dict(entry) for symbol, entry in raw_prices.items()}
        return cls(captured_at=captured_at, prices=prices)


@dataclass(frozen=True, slots=True)
class QuoteUpdate:
    """A decoded bookTicker message."""

    symbol: str
    entry: PriceEntry
    update_id: int | None = None  # Binance "u"; carried but not checked for gaps


@dataclass(frozen=True, slots=True)
class SubscriptionAck:
    """Acknowledgment of a SUBSCRIBE request."""

    request_id: int
