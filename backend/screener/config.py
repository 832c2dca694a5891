"""Environment-driven configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .market.binance_client import FUTURES_BASE_URL, MARKET_LISTING_URL, SPOT_BASE_URL
from .market.builder import DEFAULT_SPOT_URL_TEMPLATE


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings. Build with ``Settings.from_env()``."""

    spot_api_url: str = SPOT_BASE_URL
    futures_api_url: str = FUTURES_BASE_URL
    market_listing_url: str = MARKET_LISTING_URL
    spot_trade_url_template: str = DEFAULT_SPOT_URL_TEMPLATE
    quote_asset: str = "USDT"
    snapshot_interval: float = 1.0
    reference_refresh_interval: float = 300.0  # 5 minutes
    http_timeout: float = 10.0
    subscriber_queue_size: int = 8
    startup_attempts: int = 3
    startup_retry_delay: float = 2.0
    host: str = "0.0.0.0"
    port: int = 8881
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Read settings from environment variables.

        Blank or missing variables keep their defaults. A variable that does
        not parse raises ValueError naming it.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def text(name: str, default: str) -> str:
            value = env.get(name, "").strip()
            return value or default

        def number(name: str, default: float, kind: type = float, positive: bool = True):
            raw = env.get(name, "").strip()
            if not raw:
                return default
            try:
                value = kind(raw)
            except ValueError as e:
                raise ValueError(f"{name} must be a {kind.__name__}, got {raw!r}") from e
            if positive and value <= 0:
                raise ValueError(f"{name} must be positive, got {raw!r}")
            return value

        return cls(
            spot_api_url=text("SPOT_API_URL", defaults.spot_api_url),
            futures_api_url=text("FUTURES_API_URL", defaults.futures_api_url),
            market_listing_url=text("MARKET_LISTING_URL", defaults.market_listing_url),
            spot_trade_url_template=text("SPOT_TRADE_URL_TEMPLATE", defaults.spot_trade_url_template),
            quote_asset=text("QUOTE_ASSET", defaults.quote_asset).upper(),
            snapshot_interval=number("SNAPSHOT_INTERVAL", defaults.snapshot_interval),
            reference_refresh_interval=number(
                "REFERENCE_REFRESH_INTERVAL", defaults.reference_refresh_interval
            ),
            http_timeout=number("HTTP_TIMEOUT", defaults.http_timeout),
            subscriber_queue_size=number("SUBSCRIBER_QUEUE_SIZE", defaults.subscriber_queue_size, int),
            startup_attempts=number("STARTUP_ATTEMPTS", defaults.startup_attempts, int),
            startup_retry_delay=number(
                "STARTUP_RETRY_DELAY", defaults.startup_retry_delay, positive=False
            ),
            host=text("HOST", defaults.host),
            port=number("PORT", defaults.port, int),
            log_level=text("LOG_LEVEL", defaults.log_level).upper(),
        )
