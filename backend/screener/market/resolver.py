"""Map futures contracts onto their spot counterparts."""

from __future__ import annotations

import re
from collections.abc import Mapping, Set

from .models import MarketDatum, SpotCounterpart

DEFAULT_QUOTE_ASSET = "USDT"

_LEADING_DIGITS = re.compile(r"^[0-9]+")


def trim_numeric_prefix(base_asset: str) -> str:
    """Strip a multiplier prefix: ``"1000PEPE"`` -> ``"PEPE"``."""
    return _LEADING_DIGITS.sub("", base_asset)


def resolve_spot(
    base_asset: str,
    quote_asset: str | None,
    symbol: str,
    spot_symbols: Set[str],
    market_data: Mapping[str, MarketDatum],
) -> SpotCounterpart | None:
    """Find the spot market for a futures contract, or None if there is none.

    Candidates are tried in order and the first listed one wins:

      1. ``base + quote`` as-is
      2. ``base + quote`` with leading digits stripped from base
      3. ``mapper_name + quote`` from the market datum of the futures symbol

    Nothing is guessed beyond these three sources.
    """
    quote = quote_asset or DEFAULT_QUOTE_ASSET

    candidate = f"{base_asset}{quote}"
    if candidate in spot_symbols:
        return SpotCounterpart(base_asset=base_asset, symbol=candidate)

    trimmed = trim_numeric_prefix(base_asset)
    if trimmed and trimmed != base_asset:
        candidate = f"{trimmed}{quote}"
        if candidate in spot_symbols:
            return SpotCounterpart(base_asset=trimmed, symbol=candidate)

    datum = market_data.get(symbol)
    if datum is not None and datum.mapper_name:
        candidate = f"{datum.mapper_name}{quote}"
        if candidate in spot_symbols:
            return SpotCounterpart(base_asset=datum.mapper_name, symbol=candidate)

    return None
