"""Fixtures for market data tests.

Provides an in-memory stand-in for a websockets client connection so the
Binance feed can be exercised without touching the network.
"""

import asyncio
import json

import pytest
from websockets.exceptions import ConnectionClosedError

from pricetracker.market.cache import PriceCache


class FakeWebSocket:
    """Replays queued messages, then idles until closed.

    With drop=True it raises ConnectionClosedError once the queue is empty,
    like a server that went away.
    """

    def __init__(self, messages=(), drop=False):
        self.sent: list[str] = []
        self.closed = False
        self._messages = list(messages)
        self._drop = drop

    async def send(self, data):
        self.sent.append(data)

    async def close(self):
        self.closed = True

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for message in self._messages:
            await asyncio.sleep(0)
            yield message
        if self._drop:
            raise ConnectionClosedError(None, None)
        while not self.closed:
            await asyncio.sleep(0.01)

    def sent_json(self) -> list[dict]:
        return [json.loads(s) for s in self.sent]


def _book_ticker(symbol="BTCUSDT", bid="50000.00", bid_qty="1.5", ask="50001.00", ask_qty="2.0", update_id=400900217):
    """A raw bookTicker message as Binance sends it."""
    return json.dumps({"u": update_id, "s": symbol, "b": bid, "B": bid_qty, "a": ask, "A": ask_qty})


@pytest.fixture
def fake_ws_factory():
    return FakeWebSocket


@pytest.fixture
def cache():
    price_cache = PriceCache()
    price_cache.initialize(["BTCUSDT", "ETHUSDT"])
    return price_cache


@pytest.fixture
def book_ticker():
    return _book_ticker
