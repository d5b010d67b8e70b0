"""Tests for the HTTP read API."""

import pytest
from fastapi.testclient import TestClient

from pricetracker.api import create_app
from pricetracker.config import Settings
from pricetracker.market.interface import FeedState, MarketDataSource
from pricetracker.market.models import PriceEntry, QuoteSide
from pricetracker.service import PriceTrackerService


class IdleSource(MarketDataSource):
    """Feed that connects but never sends anything."""

    def __init__(self):
        self._state = FeedState.DISCONNECTED

    @property
    def state(self):
        return self._state

    def get_symbols(self):
        return []

    async def connect(self):
        self._state = FeedState.CONNECTED

    async def disconnect(self):
        self._state = FeedState.DISCONNECTED


@pytest.fixture
def service(tmp_path):
    settings = Settings(
        warmup_seconds=0,
        snapshot_interval=60,
        snapshot_retention=3,
        snapshot_file=str(tmp_path / "snapshots.json"),
    )
    return PriceTrackerService(settings, source=IdleSource())


@pytest.fixture
def client(service):
    with TestClient(create_app(service=service)) as test_client:
        yield test_client


def _btc_entry() -> PriceEntry:
    return PriceEntry(ask=QuoteSide("50001.00", "2.0"), bid=QuoteSide("50000.00", "1.5"))


class TestPricesApi:
    """/api/prices endpoints."""

    def test_all_prices(self, client, service):
        service.cache.upsert("BTCUSDT", _btc_entry())
        response = client.get("/api/prices")
        assert response.status_code == 200
        body = response.json()
        assert body["BTCUSDT"] == {"ask": ["50001.00", "2.0"], "bid": ["50000.00", "1.5"]}
        assert body["ETHUSDT"] == {"ask": ["0", "0"], "bid": ["0", "0"]}

    def test_filtered_prices(self, client):
        response = client.get("/api/prices", params={"symbols": "btcusdt,NOPE"})
        assert set(response.json()) == {"BTCUSDT"}

    def test_single_price(self, client, service):
        service.cache.upsert("BTCUSDT", _btc_entry())
        response = client.get("/api/prices/btcusdt")
        assert response.json()["bid"] == ["50000.00", "1.5"]

    def test_unknown_symbol_404(self, client):
        assert client.get("/api/prices/NOPE").status_code == 404


class TestSnapshotsApi:
    """/api/snapshots endpoints."""

    def test_latest_404_before_capture(self, client):
        assert client.get("/api/snapshots/latest").status_code == 404

    def test_history_and_latest(self, client, service):
        service.scheduler.capture()
        service.cache.upsert("BTCUSDT", _btc_entry())
        latest = service.scheduler.capture()

        history = client.get("/api/snapshots").json()
        assert len(history) == 2
        assert client.get("/api/snapshots/latest").json()["timestamp"] == latest.timestamp

    def test_symbol_history(self, client, service):
        service.cache.upsert("BTCUSDT", _btc_entry())
        snapshot = service.scheduler.capture()

        history = client.get("/api/snapshots/BTCUSDT").json()
        assert history == [
            {"timestamp": snapshot.timestamp, "price": {"ask": ["50001.00", "2.0"], "bid": ["50000.00", "1.5"]}}
        ]

    def test_save_trigger(self, client, service, tmp_path):
        service.scheduler.capture()
        response = client.post("/api/snapshots/save")
        assert response.status_code == 200
        assert response.json()["saved"] == 1
        assert (tmp_path / "snapshots.json").exists()


class TestHealth:
    def test_health(self, client):
        body = client.get("/api/health").json()
        assert body["feed"] == "connected"
        assert body["retention_policy"] == "fifo"
        assert body["symbols"] > 0
