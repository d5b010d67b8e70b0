"""Shared fixtures for service-level tests."""

import pytest

from pricetracker.config import Settings
from pricetracker.market.errors import FeedConnectionError
from pricetracker.market.interface import FeedState, MarketDataSource


class RecordingSource(MarketDataSource):
    """Feed stand-in that records lifecycle calls into a shared list."""

    def __init__(self, calls, fail=False):
        self.calls = calls
        self.fail = fail
        self._state = FeedState.DISCONNECTED

    @property
    def state(self):
        return self._state

    def get_symbols(self):
        return []

    async def connect(self):
        self.calls.append("connect")
        if self.fail:
            raise FeedConnectionError("unreachable")
        self._state = FeedState.CONNECTED

    async def disconnect(self):
        self.calls.append("disconnect")
        self._state = FeedState.DISCONNECTED


@pytest.fixture
def recording_source():
    return RecordingSource


@pytest.fixture
def make_settings(tmp_path):
    """Settings with no warm-up, a long interval and a snapshot file under tmp_path."""

    def _make(**overrides):
        values = {
            "warmup_seconds": 0,
            "snapshot_interval": 60,
            "snapshot_file": str(tmp_path / "snapshots.json"),
        }
        values.update(overrides)
        return Settings(**values)

    return _make


def record_shutdown_steps(service, calls):
    """Wrap scheduler.stop and store.save so they append to calls."""
    original_stop = service.scheduler.stop
    original_save = service.store.save

    async def stop():
        calls.append("stop")
        await original_stop()

    def save(snapshots):
        calls.append("save")
        return original_save(snapshots)

    service.scheduler.stop = stop
    service.store.save = save


@pytest.fixture
def shutdown_recorder():
    return record_shutdown_steps
