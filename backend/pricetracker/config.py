"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .market.binance_client import DEFAULT_WS_URL
from .market.persistence import DEFAULT_SNAPSHOT_FILE

FEED_BINANCE = "binance"
FEED_SIMULATOR = "simulator"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class Settings:
    feed: str = FEED_BINANCE
    ws_url: str = DEFAULT_WS_URL
    symbols_file: str | None = None
    snapshot_interval: float = 5.0
    snapshot_retention: int = 1
    snapshot_file: str = DEFAULT_SNAPSHOT_FILE
    restore_snapshots: bool = False
    warmup_seconds: float = 2.0
    connect_timeout: float = 10.0
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from PRICETRACKER_* variables, falling back to defaults.

        Raises ValueError naming the variable when a value cannot be parsed.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> str | None:
            value = env.get(f"PRICETRACKER_{name}", "").strip()
            return value or None

        def number(name: str, default: float, kind: type = float) -> float:
            raw = get(name)
            if raw is None:
                return default
            try:
                return kind(raw)
            except ValueError:
                raise ValueError(f"PRICETRACKER_{name} must be a {kind.__name__}, got {raw!r}") from None

        feed = (get("FEED") or defaults.feed).lower()
        if feed not in (FEED_BINANCE, FEED_SIMULATOR):
            raise ValueError(f"PRICETRACKER_FEED must be '{FEED_BINANCE}' or '{FEED_SIMULATOR}', got {feed!r}")

        settings = cls(
            feed=feed,
            ws_url=get("WS_URL") or defaults.ws_url,
            symbols_file=get("SYMBOLS_FILE"),
            snapshot_interval=number("SNAPSHOT_INTERVAL", defaults.snapshot_interval),
            snapshot_retention=int(number("SNAPSHOT_RETENTION", defaults.snapshot_retention, int)),
            snapshot_file=get("SNAPSHOT_FILE") or defaults.snapshot_file,
            restore_snapshots=(get("RESTORE_SNAPSHOTS") or "").lower() in _TRUE_VALUES,
            warmup_seconds=number("WARMUP_SECONDS", defaults.warmup_seconds),
            connect_timeout=number("CONNECT_TIMEOUT", defaults.connect_timeout),
            log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
            host=get("HOST") or defaults.host,
            port=int(number("PORT", defaults.port, int)),
        )

        if settings.snapshot_interval <= 0:
            raise ValueError("PRICETRACKER_SNAPSHOT_INTERVAL must be positive")
        if settings.snapshot_retention < 1:
            raise ValueError("PRICETRACKER_SNAPSHOT_RETENTION must be at least 1")
        if settings.warmup_seconds < 0:
            raise ValueError("PRICETRACKER_WARMUP_SECONDS must not be negative")
        if settings.log_level not in _LOG_LEVELS:
            levels = ", ".join(_LOG_LEVELS)
            raise ValueError(f"PRICETRACKER_LOG_LEVEL must be one of {levels}, got {settings.log_level!r}")
        return settings
