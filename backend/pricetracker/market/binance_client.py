"""Binance bookTicker WebSocket client for live best bid/ask quotes."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from .cache import PriceCache
from .decoder import decode_message
from .errors import DecodeError, FeedConnectionError
from .interface import FeedState, MarketDataSource
from .models import SubscriptionAck
from .symbols import normalize_symbols

logger = logging.getLogger(__name__)

DEFAULT_WS_URL = "wss://data-stream.binance.vision/ws"
STREAM_TYPE = "bookTicker"


class BinanceBookTickerFeed(MarketDataSource):
    """MarketDataSource backed by Binance's public market-data WebSocket.

    Opens one connection, sends a single SUBSCRIBE request for
    ``<symbol>@bookTicker`` on every symbol, then applies each inbound update
    to the PriceCache in arrival order.

    Malformed messages are logged and counted, never fatal. A transport
    failure leaves the feed DISCONNECTED; reconnecting is up to the caller.
    """

    def __init__(
        self,
        price_cache: PriceCache,
        symbols: list[str],
        url: str = DEFAULT_WS_URL,
        open_timeout: float = 10.0,
    ) -> None:
        self._cache = price_cache
        self._symbols = normalize_symbols(symbols)
        self._url = url
        self._open_timeout = open_timeout
        self._state = FeedState.DISCONNECTED
        self._ws: Any = None
        self._task: asyncio.Task | None = None
        self._next_request_id = 1
        self._decode_errors = 0
        self._updates_applied = 0

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def decode_errors(self) -> int:
        return self._decode_errors

    @property
    def updates_applied(self) -> int:
        return self._updates_applied

    def get_symbols(self) -> list[str]:
        return list(self._symbols)

    async def connect(self) -> None:
        if self._state is not FeedState.DISCONNECTED:
            logger.warning("Binance feed already %s; ignoring connect()", self._state.value)
            return
        if self._ws is not None:
            # Left over from a connection that dropped
            await self._close_socket()

        self._state = FeedState.CONNECTING
        logger.info("Connecting to Binance WebSocket at %s", self._url)
        try:
            self._ws = await websockets.connect(self._url, open_timeout=self._open_timeout)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            self._state = FeedState.DISCONNECTED
            self._ws = None
            raise FeedConnectionError(f"Failed to connect to {self._url}: {e}") from e

        self._state = FeedState.CONNECTED
        logger.info("Connected to Binance WebSocket")

        try:
            await self._subscribe()
        except (OSError, WebSocketException) as e:
            await self._close_socket()
            raise FeedConnectionError(f"Failed to send subscription: {e}") from e

        self._task = asyncio.create_task(self._receive_loop(), name="binance-receiver")

    async def disconnect(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

        if self._ws is None:
            return
        await self._close_socket()
        logger.info("Disconnected from Binance WebSocket")

    def subscription_message(self, request_id: int) -> dict[str, Any]:
        """Build the SUBSCRIBE request for every tracked symbol."""
        return {
            "method": "SUBSCRIBE",
            "params": [f"{symbol.lower()}@{STREAM_TYPE}" for symbol in self._symbols],
            "id": request_id,
        }

    def handle_message(self, raw: str | bytes) -> None:
        """Decode one inbound message and apply it. Never raises DecodeError."""
        try:
            message = decode_message(raw)
        except DecodeError as e:
            self._decode_errors += 1
            logger.warning("Dropping undecodable message: %s", e)
            return

        if isinstance(message, SubscriptionAck):
            logger.info("Subscription confirmed (id=%d)", message.request_id)
            return

        self._cache.upsert(message.symbol, message.entry)
        self._updates_applied += 1

    # --- Internal ---

    async def _subscribe(self) -> None:
        request_id = self._next_request_id
        self._next_request_id += 1
        request = self.subscription_message(request_id)
        logger.info("Subscribing to %d %s streams (id=%d)", len(request["params"]), STREAM_TYPE, request_id)
        await self._ws.send(json.dumps(request))

    async def _receive_loop(self) -> None:
        """Apply messages one at a time, in arrival order, until the socket closes."""
        try:
            async for raw in self._ws:
                self.handle_message(raw)
            logger.info("Binance WebSocket closed")
        except ConnectionClosed as e:
            logger.error("Binance WebSocket connection lost: %s", e)
        except Exception:
            logger.exception("Binance receive loop failed")
        finally:
            self._state = FeedState.DISCONNECTED

    async def _close_socket(self) -> None:
        ws, self._ws = self._ws, None
        self._state = FeedState.DISCONNECTED
        try:
            await ws.close()
        except (OSError, WebSocketException) as e:
            logger.warning("Error while closing Binance WebSocket: %s", e)
