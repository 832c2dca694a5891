"""Data models for market data."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class FuturesContract:
    """Perpetual futures contract metadata from the futures exchange info."""

    symbol: str
    base_asset: str
    quote_asset: str


@dataclass(frozen=True, slots=True)
class MarketDatum:
    """Market cap / FDV for one symbol.

    Missing numbers are stored as 0.0, never as absence. ``mapper_name`` is an
    alternate base-asset name used when the futures base asset does not match
    any spot listing.
    """

    symbol: str
    market_cap: float = 0.0
    fdv: float = 0.0
    mapper_name: str | None = None


@dataclass(frozen=True, slots=True)
class TickerRecord:
    """One entry of the futures 24h ticker batch."""

    symbol: str
    last_price: float = 0.0
    change_percent: float = 0.0


@dataclass(frozen=True, slots=True)
class FundingRecord:
    """One entry of the premium index batch."""

    symbol: str
    funding_rate: float = 0.0


@dataclass(frozen=True, slots=True)
class SpotCounterpart:
    """Spot market matched to a futures contract."""

    base_asset: str
    symbol: str


@dataclass(frozen=True, slots=True)
class MergedRecord:
    """Unified per-symbol record pushed to subscribers."""

    symbol: str
    name: str
    price: float
    change_24h: float
    funding_rate: float = 0.0
    market_cap: float = 0.0
    fdv: float = 0.0
    has_spot: bool = False
    spot_url: str | None = None

    def to_dict(self) -> dict:
        """Serialize for JSON / WebSocket transmission."""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "change24h": self.change_24h,
            "fundingRate": self.funding_rate,
            "market_cap": self.market_cap,
            "fdv": self.fdv,
            "hasSpot": self.has_spot,
            "spotUrl": self.spot_url,
        }


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable, ordered set of merged records from one build cycle."""

    records: tuple[MergedRecord, ...] = ()
    built_at: float = field(default_factory=time.time)  # Unix seconds, not serialized

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def symbols(self) -> list[str]:
        return [record.symbol for record in self.records]

    def to_list(self) -> list[dict]:
        return [record.to_dict() for record in self.records]

    def to_json(self) -> str:
        """Compact JSON array. Identical records always give identical text."""
        return json.dumps(self.to_list(), separators=(",", ":"))


EMPTY_SNAPSHOT_PAYLOAD = "[]"
