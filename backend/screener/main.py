"""FastAPI application and uvicorn entrypoint."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .config import Settings
from .market import BroadcastHub, MarketFeed, MarketState, create_stream_router
from .market.factory import create_market_feed, create_scheduler

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, feed: MarketFeed | None = None) -> FastAPI:
    """Build the app. The refresh scheduler runs for the app's lifespan.

    ``feed`` overrides the Binance feed (tests pass an in-memory one).
    """
    settings = settings or Settings.from_env()
    state = MarketState()
    hub = BroadcastHub(queue_size=settings.subscriber_queue_size)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        market_feed = feed or create_market_feed(settings)
        scheduler = create_scheduler(settings, market_feed, state, hub)
        await scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()
            hub.close_all()
            market_feed.close()

    app = FastAPI(title="perp-screener", lifespan=lifespan)
    app.state.market_state = state
    app.state.hub = hub
    app.include_router(create_stream_router(hub, state))
    return app


def run() -> None:
    """Console entrypoint: ``perp-screener``."""
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Server is listening on %s:%d", settings.host, settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
