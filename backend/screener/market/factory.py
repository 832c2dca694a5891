"""Factory for wiring the market data pipeline from settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .binance_client import BinanceFeed
from .cache import MarketState
from .hub import BroadcastHub
from .interface import MarketFeed
from .pipeline import MarketPipeline
from .scheduler import RefreshScheduler

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)


def create_market_feed(settings: Settings) -> MarketFeed:
    """Create the Binance feed pointed at the configured endpoints."""
    logger.info(
        "Market feed: Binance (spot %s, futures %s, timeout %.1fs)",
        settings.spot_api_url,
        settings.futures_api_url,
        settings.http_timeout,
    )
    return BinanceFeed(
        spot_base_url=settings.spot_api_url,
        futures_base_url=settings.futures_api_url,
        market_listing_url=settings.market_listing_url,
        timeout=settings.http_timeout,
    )


def create_scheduler(
    settings: Settings,
    feed: MarketFeed,
    state: MarketState | None = None,
    hub: BroadcastHub | None = None,
) -> RefreshScheduler:
    """Wire state, hub and pipeline around ``feed``. Returns an unstarted scheduler.

    Caller must await scheduler.start().
    """
    pipeline = MarketPipeline(
        feed,
        state if state is not None else MarketState(),
        hub if hub is not None else BroadcastHub(queue_size=settings.subscriber_queue_size),
        quote_asset=settings.quote_asset,
        spot_url_template=settings.spot_trade_url_template,
    )
    return RefreshScheduler(
        pipeline,
        snapshot_interval=settings.snapshot_interval,
        reference_interval=settings.reference_refresh_interval,
        startup_attempts=settings.startup_attempts,
        startup_retry_delay=settings.startup_retry_delay,
    )
