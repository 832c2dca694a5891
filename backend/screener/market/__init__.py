"""Market data subsystem for perp-screener.

Public API:
    MergedRecord        - One unified per-symbol record
    Snapshot            - Immutable ordered set of merged records
    MarketState         - Reference caches plus the current snapshot
    MarketFeed          - Abstract interface for upstream feeds
    BinanceFeed         - Requests-backed Binance feed
    resolve_spot        - Futures -> spot symbol resolution
    build_snapshot      - Merge a ticker batch with the caches
    BroadcastHub        - Subscriber registry and snapshot fan-out
    MarketPipeline      - Cache and snapshot refresh operations
    RefreshScheduler    - Periodic driver for the pipeline
    create_stream_router - FastAPI router factory for the WebSocket endpoint
"""

from .binance_client import BinanceFeed
from .builder import build_snapshot
from .cache import MarketState
from .errors import FeedError, FeedPayloadError, FeedTransientError
from .hub import BroadcastHub, Subscriber
from .interface import MarketFeed
from .models import MergedRecord, Snapshot
from .pipeline import MarketPipeline
from .resolver import resolve_spot
from .scheduler import RefreshScheduler
from .stream import create_stream_router

__all__ = [
    "BinanceFeed",
    "BroadcastHub",
    "FeedError",
    "FeedPayloadError",
    "FeedTransientError",
    "MarketFeed",
    "MarketPipeline",
    "MarketState",
    "MergedRecord",
    "RefreshScheduler",
    "Snapshot",
    "Subscriber",
    "build_snapshot",
    "create_stream_router",
    "resolve_spot",
]
