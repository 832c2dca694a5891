"""Refresh operations that keep MarketState and the hub up to date."""

from __future__ import annotations

import asyncio
import logging

from .builder import DEFAULT_SPOT_URL_TEMPLATE, build_snapshot
from .cache import MarketState
from .errors import FeedError
from .hub import BroadcastHub
from .interface import MarketFeed
from .parsing import (
    parse_funding,
    parse_futures_contracts,
    parse_market_data,
    parse_spot_symbols,
    parse_tickers,
)
from .resolver import DEFAULT_QUOTE_ASSET

logger = logging.getLogger(__name__)


class MarketPipeline:
    """Owns one refresh operation per cache, plus the snapshot build.

    Each operation runs its blocking feed call in a worker thread, parses the
    result, then swaps the new value into ``state`` with one assignment. On a
    ``FeedError`` the failure is logged and the previous value is kept: stale
    data beats no data. Every operation returns True on success.
    """

    def __init__(
        self,
        feed: MarketFeed,
        state: MarketState,
        hub: BroadcastHub,
        *,
        quote_asset: str = DEFAULT_QUOTE_ASSET,
        spot_url_template: str = DEFAULT_SPOT_URL_TEMPLATE,
    ) -> None:
        self._feed = feed
        self._state = state
        self._hub = hub
        self._quote_asset = quote_asset
        self._spot_url_template = spot_url_template

    @property
    def state(self) -> MarketState:
        return self._state

    @property
    def hub(self) -> BroadcastHub:
        return self._hub

    async def refresh_spot_symbols(self) -> bool:
        try:
            entries = await asyncio.to_thread(self._feed.fetch_spot_exchange_info)
        except FeedError as e:
            logger.error("Spot symbol refresh failed: %s", e)
            return False
        self._state.spot_symbols = parse_spot_symbols(entries)
        logger.info("Fetched %d spot symbols", len(self._state.spot_symbols))
        return True

    async def refresh_futures_contracts(self) -> bool:
        try:
            entries = await asyncio.to_thread(self._feed.fetch_futures_exchange_info)
        except FeedError as e:
            logger.error("Futures contract refresh failed: %s", e)
            return False
        self._state.futures_contracts = parse_futures_contracts(entries)
        logger.info("Fetched %d perpetual futures contracts", len(self._state.futures_contracts))
        return True

    async def refresh_market_data(self) -> bool:
        try:
            entries = await asyncio.to_thread(self._feed.fetch_market_listings)
        except FeedError as e:
            logger.error("Market data refresh failed: %s", e)
            return False
        self._state.market_data = parse_market_data(entries)
        logger.info("Updated market data cache with %d entries", len(self._state.market_data))
        return True

    async def refresh_snapshot(self) -> bool:
        """Fetch tickers and funding together, build, store and broadcast.

        If either fetch fails the whole cycle is skipped and the previous
        snapshot stays in place.
        """
        try:
            raw_tickers, raw_funding = await asyncio.gather(
                asyncio.to_thread(self._feed.fetch_tickers),
                asyncio.to_thread(self._feed.fetch_premium_index),
            )
        except FeedError as e:
            logger.error("Ticker/funding fetch failed: %s", e)
            return False

        snapshot = build_snapshot(
            parse_tickers(raw_tickers),
            parse_funding(raw_funding),
            self._state,
            quote_asset=self._quote_asset,
            spot_url_template=self._spot_url_template,
        )
        self._state.snapshot = snapshot
        delivered = self._hub.publish(snapshot)
        logger.debug("Snapshot built: %d records, sent to %d subscribers", len(snapshot), delivered)
        return True
