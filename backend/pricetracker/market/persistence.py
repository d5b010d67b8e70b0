"""JSON file persistence for retained snapshots."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from .errors import PersistenceError
from .models import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_FILE = "price_snapshots.json"


class SnapshotStore:
    """Persist and load the snapshot buffer to/from a JSON file.

    The file holds a list of ``{"timestamp": ..., "prices": {...}}`` records,
    oldest first. Writes go to a temporary file that replaces the target in
    one step, so an interrupted save leaves the previous file intact.

    Neither save() nor load() raises: failures are logged and reported
    through the return value.
    """

    def __init__(self, path: str | Path = DEFAULT_SNAPSHOT_FILE) -> None:
        self.path = Path(path)

    def save(self, snapshots: Iterable[Snapshot]) -> bool:
        """Write snapshots to disk. Returns False if the write failed."""
        records = [snapshot.to_dict() for snapshot in snapshots]
        try:
            self._write(records)
        except PersistenceError as e:
            logger.error("Error saving snapshots: %s", e)
            return False
        logger.info("Saved %d snapshots to %s", len(records), self.path)
        return True

    def load(self) -> list[Snapshot]:
        """Read snapshots from disk. Missing or malformed files give []."""
        if not self.path.exists():
            logger.info("No snapshot file at %s", self.path)
            return []
        try:
            snapshots = self._read()
        except PersistenceError as e:
            logger.error("Error loading snapshots: %s", e)
            return []
        logger.info("Loaded %d snapshots from %s", len(snapshots), self.path)
        return snapshots

    # --- Internal ---

    def _write(self, records: list[dict]) -> None:
        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Could not write {self.path}: {e}") from e

    def _read(self) -> list[Snapshot]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError, RecursionError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e

        if not isinstance(data, list):
            raise PersistenceError(f"{self.path} does not contain a list of snapshots")
        try:
            return [Snapshot.from_dict(record) for record in data]
        except ValueError as e:
            raise PersistenceError(f"Malformed snapshot in {self.path}: {e}") from e
