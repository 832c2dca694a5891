"""Abstract interface for upstream market feeds."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

RawRecords = list[dict[str, Any]]


class MarketFeed(ABC):
    """Contract for the upstream feeds the pipeline polls.

    Every method is a blocking request/response call returning the raw
    records of one upstream endpoint. The pipeline runs them in a worker
    thread and does all parsing and defaulting itself, so implementations
    only need to fetch and unwrap.

    Implementations raise ``FeedError`` subclasses on failure.

    Lifecycle:
        feed = BinanceFeed(...)
        records = feed.fetch_tickers()
        # ... app shutting down ...
        feed.close()
    """

    @abstractmethod
    def fetch_spot_exchange_info(self) -> RawRecords:
        """Spot symbols: ``[{"symbol": ..., "status": ...}, ...]``."""

    @abstractmethod
    def fetch_futures_exchange_info(self) -> RawRecords:
        """Futures contracts: ``[{"symbol", "contractType", "baseAsset", "quoteAsset"}, ...]``."""

    @abstractmethod
    def fetch_tickers(self) -> RawRecords:
        """Futures 24h tickers: ``[{"symbol", "lastPrice", "priceChangePercent"}, ...]``."""

    @abstractmethod
    def fetch_premium_index(self) -> RawRecords:
        """Futures premium index: ``[{"symbol", "lastFundingRate"}, ...]``."""

    @abstractmethod
    def fetch_market_listings(self) -> RawRecords:
        """Market cap listings: ``[{"symbol", "marketCap", "fullyDilutedMarketCap", "mapperName"}, ...]``."""

    def close(self) -> None:
        """Release network resources. Safe to call multiple times."""
