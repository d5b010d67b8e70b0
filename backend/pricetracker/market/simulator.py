"""GBM-based offline quote simulator."""

from __future__ import annotations

import asyncio
import logging
import math
import random

import numpy as np

from .cache import PriceCache
from .interface import FeedState, MarketDataSource
from .models import PriceEntry, QuoteSide
from .seed_prices import (
    CORRELATION_GROUPS,
    CROSS_GROUP_CORR,
    DEFAULT_PARAMS,
    HALF_SPREAD,
    INTRA_MAJORS_CORR,
    INTRA_MEMES_CORR,
    SEED_PRICES,
    SYMBOL_PARAMS,
)
from .symbols import normalize_symbols

logger = logging.getLogger(__name__)


class GBMSimulator:
    """Geometric Brownian Motion simulator for correlated mid prices.

    Math:
        S(t+dt) = S(t) * exp((mu - sigma^2/2) * dt + sigma * sqrt(dt) * Z)

    Where:
        S(t)   = current mid price
        mu     = annualized drift
        sigma  = annualized volatility
        dt     = time step as a fraction of a (24/7) year
        Z      = correlated standard normal random variable
    """

    SECONDS_PER_YEAR = 365 * 24 * 3600  # Crypto trades around the clock
    DEFAULT_DT = 0.5 / SECONDS_PER_YEAR

    def __init__(self, symbols: list[str], dt: float = DEFAULT_DT) -> None:
        self._dt = dt
        self._symbols: list[str] = []
        self._prices: dict[str, float] = {}
        self._params: dict[str, dict[str, float]] = {}
        self._cholesky: np.ndarray | None = None

        for symbol in symbols:
            self._add_symbol_internal(symbol)
        self._rebuild_cholesky()

    def step(self) -> dict[str, float]:
        """Advance all symbols by one time step. Returns {symbol: new_mid}."""
        n = len(self._symbols)
        if n == 0:
            return {}

        z_independent = np.random.standard_normal(n)
        if self._cholesky is not None:
            z_correlated = self._cholesky @ z_independent
        else:
            z_correlated = z_independent

        result: dict[str, float] = {}
        for i, symbol in enumerate(self._symbols):
            params = self._params[symbol]
            mu = params["mu"]
            sigma = params["sigma"]

            drift = (mu - 0.5 * sigma**2) * self._dt
            diffusion = sigma * math.sqrt(self._dt) * z_correlated[i]
            self._prices[symbol] *= math.exp(drift + diffusion)
            result[symbol] = self._prices[symbol]

        return result

    def get_price(self, symbol: str) -> float | None:
        return self._prices.get(symbol)

    @property
    def symbols(self) -> list[str]:
        return list(self._symbols)

    # --- Internals ---

    def _add_symbol_internal(self, symbol: str) -> None:
        if symbol in self._prices:
            return
        self._symbols.append(symbol)
        self._prices[symbol] = SEED_PRICES.get(symbol, random.uniform(1.0, 100.0))
        self._params[symbol] = SYMBOL_PARAMS.get(symbol, dict(DEFAULT_PARAMS))

    def _rebuild_cholesky(self) -> None:
        n = len(self._symbols)
        if n <= 1:
            self._cholesky = None
            return

        corr = np.eye(n)
        for i in range(n):
            for j in range(i + 1, n):
                rho = self._pairwise_correlation(self._symbols[i], self._symbols[j])
                corr[i, j] = rho
                corr[j, i] = rho

        self._cholesky = np.linalg.cholesky(corr)

    @staticmethod
    def _pairwise_correlation(s1: str, s2: str) -> float:
        """Correlation by group: majors 0.8, memes 0.6, anything else 0.5."""
        majors = CORRELATION_GROUPS["majors"]
        memes = CORRELATION_GROUPS["memes"]

        if s1 in majors and s2 in majors:
            return INTRA_MAJORS_CORR
        if s1 in memes and s2 in memes:
            return INTRA_MEMES_CORR
        return CROSS_GROUP_CORR


def format_price(price: float) -> str:
    """Render a price as a decimal string with exchange-like precision."""
    if price >= 1000:
        decimals = 2
    elif price >= 1:
        decimals = 4
    else:
        decimals = 8
    return f"{price:.{decimals}f}"


def quote_from_mid(mid: float, half_spread: float = HALF_SPREAD) -> PriceEntry:
    """Build a bid/ask entry around a mid price with random top-of-book size."""
    return PriceEntry(
        ask=QuoteSide(format_price(mid * (1 + half_spread)), f"{random.uniform(0.01, 25.0):.4f}"),
        bid=QuoteSide(format_price(mid * (1 - half_spread)), f"{random.uniform(0.01, 25.0):.4f}"),
    )


class SimulatorDataSource(MarketDataSource):
    """MarketDataSource backed by the GBM simulator.

    Runs a background asyncio task that steps the simulator every
    `update_interval` seconds and writes bid/ask quotes to the PriceCache.
    Used for offline development when the exchange is unreachable.
    """

    def __init__(
        self,
        price_cache: PriceCache,
        symbols: list[str],
        update_interval: float = 0.5,
    ) -> None:
        self._cache = price_cache
        self._symbols = normalize_symbols(symbols)
        self._interval = update_interval
        self._sim: GBMSimulator | None = None
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> FeedState:
        if self._task is not None and not self._task.done():
            return FeedState.CONNECTED
        return FeedState.DISCONNECTED

    def get_symbols(self) -> list[str]:
        return list(self._symbols)

    async def connect(self) -> None:
        if self.is_connected():
            logger.warning("Simulator already running; ignoring connect()")
            return
        self._sim = GBMSimulator(symbols=self._symbols)
        self._task = asyncio.create_task(self._run_loop(), name="simulator-loop")
        logger.info("Simulator started with %d symbols", len(self._symbols))

    async def disconnect(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Simulator stopped")
        self._task = None

    async def _run_loop(self) -> None:
        """Core loop: step the simulation, write to cache, sleep."""
        while True:
            try:
                if self._sim:
                    for symbol, mid in self._sim.step().items():
                        self._cache.upsert(symbol, quote_from_mid(mid))
            except Exception:
                logger.exception("Simulator step failed")
            await asyncio.sleep(self._interval)
