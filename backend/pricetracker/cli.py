"""Price tracker CLI."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from dataclasses import replace

import click

from .config import FEED_SIMULATOR, Settings
from .market.errors import FeedConnectionError
from .service import PriceTrackerService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # websockets logs every frame at DEBUG
    logging.getLogger("websockets").setLevel(logging.WARNING)


async def run_until_signalled(service: PriceTrackerService, stop: asyncio.Event | None = None) -> None:
    """Start the service and run until SIGINT/SIGTERM (or until stop is set),
    then shut down."""
    if stop is None:
        stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop.set))

    await service.start()
    logger.info("System running. Press Ctrl+C to stop.")
    try:
        await stop.wait()
    finally:
        await service.shutdown()

    latest = service.scheduler.get_latest()
    if latest:
        logger.info("Latest snapshot: %s, tracked %d symbols", latest.timestamp, len(latest.prices))


@click.group()
def cli():
    """Live best bid/ask tracker for Binance bookTicker streams."""
    pass


@cli.command()
@click.option("--simulate", is_flag=True, help="Use the offline GBM feed instead of Binance")
def run(simulate):
    """Track prices headless until interrupted."""
    settings = _load_settings(simulate)
    configure_logging(settings.log_level)
    try:
        asyncio.run(run_until_signalled(PriceTrackerService(settings)))
    except FeedConnectionError as e:
        logger.error("Startup failed: %s", e)
        sys.exit(1)


@cli.command()
@click.option("--simulate", is_flag=True, help="Use the offline GBM feed instead of Binance")
def serve(simulate):
    """Track prices and serve them over HTTP."""
    import uvicorn

    from .api import create_app

    settings = _load_settings(simulate)
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


def _load_settings(simulate: bool) -> Settings:
    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    if simulate:
        settings = replace(settings, feed=FEED_SIMULATOR)
    return settings
