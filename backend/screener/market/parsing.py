"""Turn raw upstream records into models, defaulting malformed fields."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Any

from .models import FundingRecord, FuturesContract, MarketDatum, TickerRecord

logger = logging.getLogger(__name__)

TRADING_STATUS = "TRADING"
PERPETUAL_CONTRACT = "PERPETUAL"


def to_number(value: Any, *, non_negative: bool = False) -> float:
    """Coerce an upstream number (often a string) to a finite float.

    None, empty strings, garbage and NaN/inf all become 0.0. With
    ``non_negative`` set, negative values become 0.0 too.
    """
    if value is None or value == "" or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    if non_negative and number < 0:
        return 0.0
    return number


def _symbol_of(entry: dict[str, Any]) -> str | None:
    symbol = entry.get("symbol")
    if isinstance(symbol, str) and symbol:
        return symbol
    return None


def parse_spot_symbols(entries: Iterable[dict[str, Any]]) -> frozenset[str]:
    """Spot symbols currently in TRADING status."""
    return frozenset(
        symbol
        for entry in entries
        if (symbol := _symbol_of(entry)) and entry.get("status") == TRADING_STATUS
    )


def parse_futures_contracts(entries: Iterable[dict[str, Any]]) -> dict[str, FuturesContract]:
    """Perpetual contracts keyed by futures symbol. Other contract types are dropped."""
    contracts: dict[str, FuturesContract] = {}
    skipped = 0
    for entry in entries:
        if entry.get("contractType") != PERPETUAL_CONTRACT:
            continue
        symbol = _symbol_of(entry)
        base = entry.get("baseAsset")
        quote = entry.get("quoteAsset")
        if not symbol or not isinstance(base, str) or not base:
            skipped += 1
            continue
        contracts[symbol] = FuturesContract(
            symbol=symbol,
            base_asset=base,
            quote_asset=quote if isinstance(quote, str) and quote else "",
        )
    if skipped:
        logger.warning("Skipped %d malformed perpetual contracts", skipped)
    return contracts


def parse_market_data(entries: Iterable[dict[str, Any]]) -> dict[str, MarketDatum]:
    """Market cap / FDV keyed by uppercased symbol."""
    data: dict[str, MarketDatum] = {}
    for entry in entries:
        symbol = _symbol_of(entry)
        if not symbol:
            continue
        mapper_name = entry.get("mapperName")
        key = symbol.upper()
        data[key] = MarketDatum(
            symbol=key,
            market_cap=to_number(entry.get("marketCap"), non_negative=True),
            fdv=to_number(entry.get("fullyDilutedMarketCap"), non_negative=True),
            mapper_name=mapper_name if isinstance(mapper_name, str) and mapper_name else None,
        )
    return data


def parse_tickers(entries: Iterable[dict[str, Any]]) -> list[TickerRecord]:
    """24h tickers in upstream order. Entries without a symbol are skipped."""
    return [
        TickerRecord(
            symbol=symbol,
            last_price=to_number(entry.get("lastPrice")),
            change_percent=to_number(entry.get("priceChangePercent")),
        )
        for entry in entries
        if (symbol := _symbol_of(entry))
    ]


def parse_funding(entries: Iterable[dict[str, Any]]) -> dict[str, FundingRecord]:
    """Funding rates keyed by futures symbol."""
    return {
        symbol: FundingRecord(symbol=symbol, funding_rate=to_number(entry.get("lastFundingRate")))
        for entry in entries
        if (symbol := _symbol_of(entry))
    }
