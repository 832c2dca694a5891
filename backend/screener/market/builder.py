"""Merge a ticker/funding batch with the reference caches into a Snapshot."""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping

from .cache import MarketState
from .models import FundingRecord, MergedRecord, Snapshot, TickerRecord
from .resolver import DEFAULT_QUOTE_ASSET, resolve_spot

DEFAULT_SPOT_URL_TEMPLATE = "https://www.binance.com/en/trade/{base}_{quote}?type=spot"


def fallback_base_asset(symbol: str, quote_asset: str = DEFAULT_QUOTE_ASSET) -> str:
    """Base asset for a symbol missing from the contract cache: drop the quote suffix."""
    if quote_asset and symbol.endswith(quote_asset) and len(symbol) > len(quote_asset):
        return symbol[: -len(quote_asset)]
    return symbol


def build_snapshot(
    tickers: Iterable[TickerRecord],
    funding: Mapping[str, FundingRecord],
    state: MarketState,
    *,
    quote_asset: str = DEFAULT_QUOTE_ASSET,
    spot_url_template: str = DEFAULT_SPOT_URL_TEMPLATE,
    built_at: float | None = None,
) -> Snapshot:
    """Build one Snapshot, keeping only symbols quoted in ``quote_asset``.

    Reads each cache from ``state`` once up front, so a refresh that lands
    mid-build cannot mix old and new reference data in one snapshot.
    """
    spot_symbols = state.spot_symbols
    contracts = state.futures_contracts
    market_data = state.market_data

    records: list[MergedRecord] = []
    for ticker in tickers:
        if not ticker.symbol.endswith(quote_asset):
            continue

        funding_record = funding.get(ticker.symbol)
        funding_rate = funding_record.funding_rate if funding_record else 0.0

        contract = contracts.get(ticker.symbol)
        if contract is not None:
            base_asset = contract.base_asset
            contract_quote = contract.quote_asset or quote_asset
        else:
            base_asset = fallback_base_asset(ticker.symbol, quote_asset)
            contract_quote = quote_asset

        spot = resolve_spot(base_asset, contract_quote, ticker.symbol, spot_symbols, market_data)
        datum = market_data.get(spot.symbol if spot else ticker.symbol)

        spot_url = None
        if spot is not None:
            spot_url = spot_url_template.format(base=spot.base_asset, quote=contract_quote)

        records.append(
            MergedRecord(
                symbol=ticker.symbol,
                name=base_asset,
                price=ticker.last_price,
                change_24h=ticker.change_percent,
                funding_rate=funding_rate,
                market_cap=datum.market_cap if datum else 0.0,
                fdv=datum.fdv if datum else 0.0,
                has_spot=spot is not None,
                spot_url=spot_url,
            )
        )

    return Snapshot(records=tuple(records), built_at=built_at if built_at is not None else time.time())
