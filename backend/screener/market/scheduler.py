"""Periodic refresh of the reference caches and the snapshot."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .pipeline import MarketPipeline

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_INTERVAL = 1.0
DEFAULT_REFERENCE_INTERVAL = 300.0


@dataclass(frozen=True, slots=True)
class ScheduledJob:
    """A named action repeated every ``interval`` seconds."""

    name: str
    interval: float
    action: Callable[[], Awaitable[bool]]


class RefreshScheduler:
    """Drives the pipeline's four refresh operations on independent timers.

    Startup order matters: the reference caches (market data included) are
    populated before the first snapshot build, otherwise the first snapshots
    would report no spot market and zero market cap for every symbol.

    Each timer tick runs its job as a separate task. A tick that finds the
    previous run of the same job still in flight is skipped, so slow fetches
    never pile up.

    Lifecycle:
        scheduler = RefreshScheduler(pipeline)
        await scheduler.start()
        # ... app runs ...
        await scheduler.stop()
    """

    def __init__(
        self,
        pipeline: MarketPipeline,
        *,
        snapshot_interval: float = DEFAULT_SNAPSHOT_INTERVAL,
        reference_interval: float = DEFAULT_REFERENCE_INTERVAL,
        startup_attempts: int = 3,
        startup_retry_delay: float = 2.0,
    ) -> None:
        self._pipeline = pipeline
        self._startup_attempts = max(1, startup_attempts)
        self._startup_retry_delay = startup_retry_delay
        self._reference_jobs = [
            ScheduledJob("spot-symbols", reference_interval, pipeline.refresh_spot_symbols),
            ScheduledJob("futures-contracts", reference_interval, pipeline.refresh_futures_contracts),
            ScheduledJob("market-data", reference_interval, pipeline.refresh_market_data),
        ]
        self._snapshot_job = ScheduledJob("snapshot", snapshot_interval, pipeline.refresh_snapshot)
        self._timers: list[asyncio.Task] = []
        self._in_flight: dict[str, asyncio.Task] = {}

    @property
    def jobs(self) -> list[ScheduledJob]:
        return [*self._reference_jobs, self._snapshot_job]

    @property
    def is_running(self) -> bool:
        return any(not timer.done() for timer in self._timers)

    async def start(self) -> None:
        """Populate every cache, build the first snapshot, then start the timers.

        Must be called exactly once per stop().
        """
        for job in self._reference_jobs:
            if not await self._populate(job):
                logger.warning(
                    "Starting without %s after %d attempts; next refresh in %.0fs",
                    job.name,
                    self._startup_attempts,
                    job.interval,
                )
        await self._pipeline.refresh_snapshot()

        self._timers = [
            asyncio.create_task(self._run_timer(job), name=f"refresh-{job.name}") for job in self.jobs
        ]
        logger.info(
            "Refresh scheduler started: snapshot every %.1fs, reference data every %.0fs",
            self._snapshot_job.interval,
            self._reference_jobs[0].interval,
        )

    async def stop(self) -> None:
        """Cancel the timers and any in-flight job. Safe to call multiple times."""
        tasks = [*self._timers, *self._in_flight.values()]
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._timers = []
        self._in_flight.clear()
        logger.info("Refresh scheduler stopped")

    def tick(self, job: ScheduledJob) -> asyncio.Task | None:
        """Launch one run of ``job`` unless its previous run is still going.

        Returns the new task, or None if the tick was skipped.
        """
        running = self._in_flight.get(job.name)
        if running is not None and not running.done():
            logger.debug("Skipping %s tick: previous run still in flight", job.name)
            return None

        task = asyncio.create_task(self._run_job(job), name=f"job-{job.name}")
        self._in_flight[job.name] = task
        task.add_done_callback(lambda t, name=job.name: self._clear_in_flight(name, t))
        return task

    # --- Internal ---

    async def _populate(self, job: ScheduledJob) -> bool:
        for attempt in range(1, self._startup_attempts + 1):
            if await job.action():
                return True
            if attempt < self._startup_attempts:
                logger.warning(
                    "Initial %s populate failed (attempt %d/%d), retrying in %.1fs",
                    job.name,
                    attempt,
                    self._startup_attempts,
                    self._startup_retry_delay,
                )
                await asyncio.sleep(self._startup_retry_delay)
        return False

    async def _run_timer(self, job: ScheduledJob) -> None:
        """Tick on interval. The first run already happened in start()."""
        while True:
            await asyncio.sleep(job.interval)
            self.tick(job)

    async def _run_job(self, job: ScheduledJob) -> None:
        try:
            await job.action()
        except Exception:
            logger.exception("Scheduled job %s failed", job.name)

    def _clear_in_flight(self, name: str, task: asyncio.Task) -> None:
        if self._in_flight.get(name) is task:
            del self._in_flight[name]
