"""In-memory reference caches and the current snapshot."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from .models import FuturesContract, MarketDatum, Snapshot


class MarketState:
    """Process-wide market state owned by the pipeline.

    Holds the three reference caches and the latest Snapshot. Every field is
    replaced wholesale by a single assignment on the event loop thread, never
    mutated in place, so readers always see either the old or the new value
    in full. No lock is needed under that discipline.

    Writers: MarketPipeline refresh operations.
    Readers: snapshot builder, broadcast hub, REST endpoints.
    """

    def __init__(self) -> None:
        self._spot_symbols: frozenset[str] = frozenset()
        self._futures_contracts: Mapping[str, FuturesContract] = MappingProxyType({})
        self._market_data: Mapping[str, MarketDatum] = MappingProxyType({})
        self._snapshot: Snapshot | None = None
        self._version: int = 0  # Bumped on every snapshot replacement

    @property
    def spot_symbols(self) -> frozenset[str]:
        return self._spot_symbols

    @spot_symbols.setter
    def spot_symbols(self, symbols: frozenset[str]) -> None:
        self._spot_symbols = frozenset(symbols)

    @property
    def futures_contracts(self) -> Mapping[str, FuturesContract]:
        return self._futures_contracts

    @futures_contracts.setter
    def futures_contracts(self, contracts: Mapping[str, FuturesContract]) -> None:
        self._futures_contracts = MappingProxyType(dict(contracts))

    @property
    def market_data(self) -> Mapping[str, MarketDatum]:
        return self._market_data

    @market_data.setter
    def market_data(self, data: Mapping[str, MarketDatum]) -> None:
        self._market_data = MappingProxyType(dict(data))

    @property
    def snapshot(self) -> Snapshot | None:
        """Latest built snapshot, or None before the first successful build."""
        return self._snapshot

    @snapshot.setter
    def snapshot(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._version += 1

    @property
    def version(self) -> int:
        """Snapshot version counter."""
        return self._version

    def summary(self) -> dict:
        """Sizes of every cache, for health reporting."""
        snapshot = self._snapshot
        return {
            "spot_symbols": len(self._spot_symbols),
            "futures_contracts": len(self._futures_contracts),
            "market_data": len(self._market_data),
            "snapshot_size": len(snapshot) if snapshot is not None else 0,
            "snapshot_built_at": snapshot.built_at if snapshot is not None else None,
        }
