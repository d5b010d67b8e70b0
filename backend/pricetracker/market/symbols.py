"""Symbol registry: the fixed universe of pairs the cache tracks."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

# Pairs listed on both Binance and the downstream exchange
DEFAULT_SYMBOLS: tuple[str, ...] = (
    "BTCUSDT",
    "ETHUSDT",
    "BNBUSDT",
    "XRPUSDT",
    "ADAUSDT",
    "SOLUSDT",
    "DOGEUSDT",
    "TRXUSDT",
    "DOTUSDT",
    "LTCUSDT",
    "LINKUSDT",
    "AVAXUSDT",
    "ATOMUSDT",
    "XLMUSDT",
    "ETCUSDT",
    "BCHUSDT",
    "UNIUSDT",
    "FILUSDT",
    "NEARUSDT",
    "SHIBUSDT",
)


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


def normalize_symbols(symbols: Iterable[str]) -> list[str]:
    """Normalize and de-duplicate, keeping first-seen order."""
    seen: dict[str, None] = {}
    for symbol in symbols:
        normalized = normalize_symbol(symbol)
        if normalized:
            seen.setdefault(normalized, None)
    return list(seen)


def load_symbols(path: str | Path | None = None) -> list[str]:
    """Load the symbol registry.

    Without a path, returns DEFAULT_SYMBOLS. A file may hold a plain JSON
    list, ``{"symbols": [...]}``, or ``{"symbols": {"binance_symbol": [...]}}``.
    Raises ValueError if the file has none of those shapes.
    """
    if path is None:
        return normalize_symbols(DEFAULT_SYMBOLS)

    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("symbols")
        if isinstance(data, dict):
            data = data.get("binance_symbol")

    if not isinstance(data, list) or not all(isinstance(s, str) for s in data):
        raise ValueError(f"No symbol list found in {path}")

    symbols = normalize_symbols(data)
    logger.info("Loaded %d symbols from %s", len(symbols), path)
    return symbols
