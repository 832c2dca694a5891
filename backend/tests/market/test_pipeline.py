"""Tests for MarketPipeline refresh operations (in-memory feed)."""

import pytest

from screener.market.cache import MarketState
from screener.market.hub import BroadcastHub
from screener.market.pipeline import MarketPipeline


def _pipeline(feed) -> MarketPipeline:
    return MarketPipeline(feed, MarketState(), BroadcastHub())


async def _populate(pipeline: MarketPipeline) -> None:
    assert await pipeline.refresh_spot_symbols()
    assert await pipeline.refresh_futures_contracts()
    assert await pipeline.refresh_market_data()


@pytest.mark.asyncio
class TestMarketPipeline:
    """Unit tests for MarketPipeline with a fake feed."""

    async def test_refresh_spot_symbols(self, fake_feed):
        """Test that only TRADING spot symbols are cached."""
        pipeline = _pipeline(fake_feed)
        assert await pipeline.refresh_spot_symbols()
        assert pipeline.state.spot_symbols == frozenset({"BTCUSDT", "ETHUSDT", "PEPEUSDT", "FOOUSDT"})

    async def test_refresh_futures_contracts(self, fake_feed):
        """Test that only perpetual contracts are cached."""
        pipeline = _pipeline(fake_feed)
        assert await pipeline.refresh_futures_contracts()
        assert "BTCUSDT_250926" not in pipeline.state.futures_contracts
        assert pipeline.state.futures_contracts["1000PEPEUSDT"].base_asset == "1000PEPE"

    async def test_refresh_market_data(self, fake_feed):
        """Test that market data keys are uppercased."""
        pipeline = _pipeline(fake_feed)
        assert await pipeline.refresh_market_data()
        assert pipeline.state.market_data["BARUSDT"].mapper_name == "FOO"

    async def test_refresh_market_data_with_oversized_number(self, fake_feed):
        """Test that a number too large for a float defaults to 0 instead of failing the batch."""
        fake_feed.listings.append({"symbol": "bigusdt", "marketCap": 10**400, "fullyDilutedMarketCap": "5"})
        pipeline = _pipeline(fake_feed)

        assert await pipeline.refresh_market_data()

        assert pipeline.state.market_data["BIGUSDT"].market_cap == 0.0
        assert pipeline.state.market_data["BIGUSDT"].fdv == 5.0
        assert "BARUSDT" in pipeline.state.market_data

    async def test_refresh_snapshot_stores_and_publishes(self, fake_feed):
        """Test that a build replaces the snapshot and reaches subscribers."""
        pipeline = _pipeline(fake_feed)
        await _populate(pipeline)
        subscriber = pipeline.hub.subscribe()
        await subscriber.get()  # initial empty snapshot

        assert await pipeline.refresh_snapshot()

        snapshot = pipeline.state.snapshot
        assert snapshot is not None
        assert len(snapshot) == 5
        assert await subscriber.get() == snapshot.to_json()

    async def test_reference_failure_keeps_previous_cache(self, fake_feed):
        """Test that a failed refresh leaves its cache and the others untouched."""
        pipeline = _pipeline(fake_feed)
        await _populate(pipeline)
        assert await pipeline.refresh_snapshot()
        spot_before = pipeline.state.spot_symbols
        contracts_before = pipeline.state.futures_contracts
        snapshot_before = pipeline.state.snapshot

        fake_feed.failures.add("listings")
        fake_feed.listings = []
        assert await pipeline.refresh_market_data() is False

        assert pipeline.state.market_data["BTCUSDT"].market_cap == 1e12
        assert pipeline.state.spot_symbols is spot_before
        assert pipeline.state.futures_contracts is contracts_before
        assert pipeline.state.snapshot is snapshot_before

    async def test_recovered_cache_used_by_next_build(self, fake_feed):
        """Test that a later successful refresh of the failed cache feeds new builds."""
        fake_feed.failures.add("spot")
        pipeline = _pipeline(fake_feed)
        assert await pipeline.refresh_spot_symbols() is False
        assert await pipeline.refresh_futures_contracts()
        assert await pipeline.refresh_market_data()

        assert await pipeline.refresh_snapshot()
        assert not any(record.has_spot for record in pipeline.state.snapshot)

        fake_feed.failures.clear()
        assert await pipeline.refresh_spot_symbols()
        assert await pipeline.refresh_snapshot()
        records = {record.symbol: record for record in pipeline.state.snapshot}
        assert records["BTCUSDT"].has_spot is True
        assert records["1000PEPEUSDT"].has_spot is True

    @pytest.mark.parametrize("failing", ["tickers", "premium"])
    async def test_snapshot_skipped_when_either_fetch_fails(self, fake_feed, failing):
        """Test that a ticker or funding failure keeps the previous snapshot."""
        pipeline = _pipeline(fake_feed)
        await _populate(pipeline)
        assert await pipeline.refresh_snapshot()
        previous = pipeline.state.snapshot
        version = pipeline.state.version

        fake_feed.failures.add(failing)
        assert await pipeline.refresh_snapshot() is False

        assert pipeline.state.snapshot is previous
        assert pipeline.state.version == version

    async def test_failed_build_publishes_nothing(self, fake_feed):
        """Test that subscribers get no message from a skipped cycle."""
        fake_feed.failures.add("tickers")
        pipeline = _pipeline(fake_feed)
        subscriber = pipeline.hub.subscribe()
        await subscriber.get()

        await pipeline.refresh_snapshot()
        assert subscriber.pending == 0

    async def test_rebuild_from_same_inputs_is_identical(self, fake_feed):
        """Test that two builds from the same inputs publish the same bytes."""
        pipeline = _pipeline(fake_feed)
        await _populate(pipeline)
        await pipeline.refresh_snapshot()
        first = pipeline.hub.latest_payload
        await pipeline.refresh_snapshot()
        assert pipeline.hub.latest_payload == first
