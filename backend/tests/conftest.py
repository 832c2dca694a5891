"""Pytest configuration and fixtures."""

import pytest

from screener.market.errors import FeedTransientError
from screener.market.interface import MarketFeed

SPOT_EXCHANGE_INFO = [
    {"symbol": "BTCUSDT", "status": "TRADING"},
    {"symbol": "ETHUSDT", "status": "TRADING"},
    {"symbol": "PEPEUSDT", "status": "TRADING"},
    {"symbol": "FOOUSDT", "status": "TRADING"},
    {"symbol": "OLDUSDT", "status": "BREAK"},
]

FUTURES_EXCHANGE_INFO = [
    {"symbol": "BTCUSDT", "contractType": "PERPETUAL", "baseAsset": "BTC", "quoteAsset": "USDT"},
    {"symbol": "ETHUSDT", "contractType": "PERPETUAL", "baseAsset": "ETH", "quoteAsset": "USDT"},
    {"symbol": "1000PEPEUSDT", "contractType": "PERPETUAL", "baseAsset": "1000PEPE", "quoteAsset": "USDT"},
    {"symbol": "BARUSDT", "contractType": "PERPETUAL", "baseAsset": "BAR", "quoteAsset": "USDT"},
    {"symbol": "BTCUSDC", "contractType": "PERPETUAL", "baseAsset": "BTC", "quoteAsset": "USDC"},
    {"symbol": "BTCUSDT_250926", "contractType": "CURRENT_QUARTER", "baseAsset": "BTC", "quoteAsset": "USDT"},
]

TICKERS = [
    {"symbol": "BTCUSDT", "lastPrice": "65000.5", "priceChangePercent": "2.3"},
    {"symbol": "ETHUSDT", "lastPrice": "3200.00", "priceChangePercent": "-1.5"},
    {"symbol": "1000PEPEUSDT", "lastPrice": "0.0123", "priceChangePercent": "5.0"},
    {"symbol": "BARUSDT", "lastPrice": "1.5", "priceChangePercent": "0.1"},
    {"symbol": "BTCUSDC", "lastPrice": "65010.0", "priceChangePercent": "2.2"},
    {"symbol": "NEWUSDT", "lastPrice": "0.5", "priceChangePercent": "10"},
]

PREMIUM_INDEX = [
    {"symbol": "BTCUSDT", "lastFundingRate": "0.0001"},
    {"symbol": "ETHUSDT", "lastFundingRate": "-0.00005"},
    {"symbol": "1000PEPEUSDT", "lastFundingRate": "0.0003"},
    {"symbol": "BTCUSDC", "lastFundingRate": "0.0001"},
]

MARKET_LISTINGS = [
    {"symbol": "BTCUSDT", "marketCap": 1e12, "fullyDilutedMarketCap": 1.1e12},
    {"symbol": "ETHUSDT", "marketCap": 4e11, "fullyDilutedMarketCap": 4e11},
    {"symbol": "PEPEUSDT", "marketCap": 5e9, "fullyDilutedMarketCap": 5e9},
    {"symbol": "FOOUSDT", "marketCap": 2e8, "fullyDilutedMarketCap": 3e8},
    {"symbol": "barusdt", "marketCap": None, "fullyDilutedMarketCap": "", "mapperName": "FOO"},
]


class FakeFeed(MarketFeed):
    """In-memory MarketFeed. Put an endpoint name in ``failures`` to make it raise."""

    def __init__(self) -> None:
        self.spot = list(SPOT_EXCHANGE_INFO)
        self.futures = list(FUTURES_EXCHANGE_INFO)
        self.tickers = list(TICKERS)
        self.premium = list(PREMIUM_INDEX)
        self.listings = list(MARKET_LISTINGS)
        self.failures: set[str] = set()
        self.calls: list[str] = []
        self.closed = False

    def _serve(self, name: str, records: list[dict]) -> list[dict]:
        self.calls.append(name)
        if name in self.failures:
            raise FeedTransientError(f"{name} unavailable")
        return [dict(record) for record in records]

    def fetch_spot_exchange_info(self):
        return self._serve("spot", self.spot)

    def fetch_futures_exchange_info(self):
        return self._serve("futures", self.futures)

    def fetch_tickers(self):
        return self._serve("tickers", self.tickers)

    def fetch_premium_index(self):
        return self._serve("premium", self.premium)

    def fetch_market_listings(self):
        return self._serve("listings", self.listings)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def event_loop_policy():
    """Use the default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture
def fake_feed() -> FakeFeed:
    return FakeFeed()


@pytest.fixture
def market_state():
    """MarketState populated from the sample payloads above."""
    from screener.market.cache import MarketState
    from screener.market.parsing import parse_futures_contracts, parse_market_data, parse_spot_symbols

    state = MarketState()
    state.spot_symbols = parse_spot_symbols(SPOT_EXCHANGE_INFO)
    state.futures_contracts = parse_futures_contracts(FUTURES_EXCHANGE_INFO)
    state.market_data = parse_market_data(MARKET_LISTINGS)
    return state
