"""Tests for SnapshotStore."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from pricetracker.market.models import PriceEntry, QuoteSide, Snapshot
from pricetracker.market.persistence import SnapshotStore

START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _snapshots() -> list[Snapshot]:
    return [
        Snapshot(
            captured_at=START + timedelta(seconds=5 * i),
            prices={
                "BTCUSDT": PriceEntry(ask=QuoteSide(f"5000{i}.00", "2.0"), bid=QuoteSide(f"5000{i}.00", "1.5")),
                "ETHUSDT": PriceEntry.placeholder(),
            },
        )
        for i in range(3)
    ]


class TestSnapshotStore:
    """Unit tests for JSON snapshot persistence."""

    def test_save_then_load(self, tmp_path):
        """Loading reproduces the saved sequence."""
        store = SnapshotStore(tmp_path / "snapshots.json")
        snapshots = _snapshots()

        assert store.save(snapshots) is True
        assert store.load() == snapshots

    def test_file_format(self, tmp_path):
        """The file is a readable JSON list of {timestamp, prices}."""
        path = tmp_path / "snapshots.json"
        SnapshotStore(path).save(_snapshots()[:1])

        data = json.loads(path.read_text())
        assert data == [
            {
                "timestamp": "2024-01-01T12:00:00+00:00",
                "prices": {
                    "BTCUSDT": {"ask": ["50000.00", "2.0"], "bid": ["50000.00", "1.5"]},
                    "ETHUSDT": {"ask": ["0", "0"], "bid": ["0", "0"]},
                },
            }
        ]

    def test_missing_file_loads_empty(self, tmp_path):
        assert SnapshotStore(tmp_path / "nope.json").load() == []

    def test_malformed_json_loads_empty(self, tmp_path):
        """A corrupt file is logged and yields an empty buffer."""
        path = tmp_path / "snapshots.json"
        path.write_text("[{not json")
        assert SnapshotStore(path).load() == []

    def test_wrong_shape_loads_empty(self, tmp_path):
        path = tmp_path / "snapshots.json"
        path.write_text(json.dumps({"timestamp": "x"}))
        assert SnapshotStore(path).load() == []

    def test_bad_record_loads_empty(self, tmp_path):
        path = tmp_path / "snapshots.json"
        path.write_text(json.dumps([{"timestamp": "2024-01-01T00:00:00+00:00", "prices": {"BTCUSDT": {"ask": []}}}]))
        assert SnapshotStore(path).load() == []

    def test_failed_write_keeps_previous_file(self, tmp_path):
        """An interrupted save leaves the last good file untouched."""
        path = tmp_path / "snapshots.json"
        store = SnapshotStore(path)
        store.save(_snapshots()[:1])
        before = path.read_text()

        with patch("pricetracker.market.persistence.os.replace", side_effect=OSError("disk full")):
            assert store.save(_snapshots()) is False

        assert path.read_text() == before
        assert [p.name for p in tmp_path.iterdir()] == ["snapshots.json"]

    def test_save_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "snapshots.json"
        assert SnapshotStore(path).save([]) is True
        assert json.loads(path.read_text()) == []

    def test_deeply_nested_file_loads_empty(self, tmp_path):
        path = tmp_path / "snapshots.json"
        path.write_text("[" * 200_000 + "]" * 200_000)
        assert SnapshotStore(path).load() == []
