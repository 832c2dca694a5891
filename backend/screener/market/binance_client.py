"""Binance REST client for spot, futures and market cap feeds."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .errors import FeedError, FeedPayloadError, FeedTransientError
from .interface import MarketFeed, RawRecords

logger = logging.getLogger(__name__)

SPOT_BASE_URL = "https://api.binance.com"
FUTURES_BASE_URL = "https://fapi.binance.com"
MARKET_LISTING_URL = "https://www.binance.com/bapi/composite/v1/public/marketing/symbol/list"

SPOT_EXCHANGE_INFO_ENDPOINT = "/api/v3/exchangeInfo"
FUTURES_EXCHANGE_INFO_ENDPOINT = "/fapi/v1/exchangeInfo"
TICKER_24H_ENDPOINT = "/fapi/v1/ticker/24hr"
PREMIUM_INDEX_ENDPOINT = "/fapi/v1/premiumIndex"
DEFAULT_TIMEOUT = 10.0


class BinanceFeed(MarketFeed):
    """Requests-backed implementation of :class:`MarketFeed`.

    All five endpoints are public and unauthenticated. Every call carries a
    timeout; there are no retries here, the scheduler's next tick is the retry.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        spot_base_url: str = SPOT_BASE_URL,
        futures_base_url: str = FUTURES_BASE_URL,
        market_listing_url: str = MARKET_LISTING_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._spot_base_url = spot_base_url.rstrip("/")
        self._futures_base_url = futures_base_url.rstrip("/")
        self._market_listing_url = market_listing_url
        self._timeout = timeout

    def fetch_spot_exchange_info(self) -> RawRecords:
        payload = self._request(f"{self._spot_base_url}{SPOT_EXCHANGE_INFO_ENDPOINT}")
        return self._unwrap(payload, "symbols", "spot exchange info")

    def fetch_futures_exchange_info(self) -> RawRecords:
        payload = self._request(f"{self._futures_base_url}{FUTURES_EXCHANGE_INFO_ENDPOINT}")
        return self._unwrap(payload, "symbols", "futures exchange info")

    def fetch_tickers(self) -> RawRecords:
        payload = self._request(f"{self._futures_base_url}{TICKER_24H_ENDPOINT}")
        return self._unwrap(payload, None, "24h ticker")

    def fetch_premium_index(self) -> RawRecords:
        payload = self._request(f"{self._futures_base_url}{PREMIUM_INDEX_ENDPOINT}")
        return self._unwrap(payload, None, "premium index")

    def fetch_market_listings(self) -> RawRecords:
        payload = self._request(self._market_listing_url)
        return self._unwrap(payload, "data", "market listings")

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    # --- Internal ---

    def _request(self, url: str) -> Any:
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise FeedTransientError(f"Failed to call {url}: {exc}") from exc

        if response.status_code >= 400:
            self._raise_http_error(url, response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise FeedPayloadError(f"{url} returned a non-JSON payload") from exc

    @staticmethod
    def _raise_http_error(url: str, status_code: int) -> None:
        message = f"{url} answered HTTP {status_code}"
        # 418 and 429 are Binance's rate-limit / IP-ban statuses
        if status_code in {418, 429} or status_code >= 500:
            raise FeedTransientError(message)
        raise FeedError(message)

    @staticmethod
    def _unwrap(payload: Any, key: str | None, what: str) -> RawRecords:
        """Pull the record list out of a payload, keeping only dict entries."""
        if key is not None:
            if not isinstance(payload, dict):
                raise FeedPayloadError(f"Unexpected {what} payload: expected an object")
            payload = payload.get(key)
        if not isinstance(payload, list):
            raise FeedPayloadError(f"Unexpected {what} payload: expected a list")

        records = [entry for entry in payload if isinstance(entry, dict)]
        if len(records) != len(payload):
            logger.debug("Dropped %d non-object %s entries", len(payload) - len(records), what)
        return records
