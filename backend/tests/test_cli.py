"""Tests for the headless runner and the click commands."""

import asyncio
import logging
import os
import signal
import sys
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from pricetracker.cli import cli, run_until_signalled
from pricetracker.market.errors import FeedConnectionError
from pricetracker.service import PriceTrackerService


async def _wait_connected(service) -> None:
    for _ in range(200):
        if service.source.is_connected():
            return
        await asyncio.sleep(0.005)
    raise AssertionError("service never connected")


@pytest.mark.asyncio
class TestRunUntilSignalled:
    """Start, wait for a stop request, then run the shutdown sequence."""

    async def test_stop_runs_shutdown_sequence(self, caplog, make_settings, recording_source, shutdown_recorder):
        """Stop, disconnect and save happen in order, then the latest snapshot is logged."""
        caplog.set_level(logging.INFO, logger="pricetracker.cli")
        calls = []
        service = PriceTrackerService(make_settings(), source=recording_source(calls))
        shutdown_recorder(service, calls)
        stop = asyncio.Event()

        task = asyncio.create_task(run_until_signalled(service, stop))
        await _wait_connected(service)
        snapshot = service.scheduler.capture()
        stop.set()
        await asyncio.wait_for(task, timeout=5)

        assert calls == ["connect", "stop", "disconnect", "save"]
        assert f"Latest snapshot: {snapshot.timestamp}" in caplog.text

    @pytest.mark.skipif(sys.platform == "win32", reason="loop signal handlers are POSIX only")
    async def test_sigterm_triggers_shutdown(self, make_settings, recording_source, shutdown_recorder):
        calls = []
        service = PriceTrackerService(make_settings(), source=recording_source(calls))
        shutdown_recorder(service, calls)

        task = asyncio.create_task(run_until_signalled(service))
        await _wait_connected(service)
        os.kill(os.getpid(), signal.SIGTERM)
        await asyncio.wait_for(task, timeout=5)

        assert calls == ["connect", "stop", "disconnect", "save"]

    async def test_failed_start_propagates(self, make_settings, recording_source):
        calls = []
        service = PriceTrackerService(make_settings(), source=recording_source(calls, fail=True))

        with pytest.raises(FeedConnectionError):
            await run_until_signalled(service, asyncio.Event())

        assert calls == ["connect"]


class TestRunCommand:
    """`pricetracker run` via click's test runner."""

    @pytest.fixture
    def env(self, tmp_path):
        return {
            "PRICETRACKER_SNAPSHOT_FILE": str(tmp_path / "snapshots.json"),
            "PRICETRACKER_WARMUP_SECONDS": "0",
            "PRICETRACKER_LOG_LEVEL": "INFO",
        }

    def test_feed_connection_error_exits_1(self, env, recording_source):
        calls = []

        def build(settings):
            return PriceTrackerService(settings, source=recording_source(calls, fail=True))

        with patch("pricetracker.cli.PriceTrackerService", side_effect=build):
            result = CliRunner().invoke(cli, ["run"], env=env)

        assert result.exit_code == 1
        assert calls == ["connect"]

    def test_simulate_flag_selects_simulator(self, env, recording_source):
        seen = []

        def build(settings):
            seen.append(settings)
            return PriceTrackerService(settings, source=recording_source([], fail=True))

        with patch("pricetracker.cli.PriceTrackerService", side_effect=build):
            CliRunner().invoke(cli, ["run", "--simulate"], env=env)

        assert seen[0].feed == "simulator"

    def test_invalid_log_level_is_usage_error(self, env):
        env["PRICETRACKER_LOG_LEVEL"] = "FOO"
        result = CliRunner().invoke(cli, ["run"], env=env)
        assert result.exit_code == 2
        assert "PRICETRACKER_LOG_LEVEL" in result.output
