"""
Polling Scheduler.

Drives the engine's periodic work on independent cadences:
- usage accrual: record a fixed increment and re-evaluate the lock
- advisory refresh: ask the oracle for a new fatigue score

Each cadence keeps its own due time, computed from the injected clock, so
changing one interval never shifts the other. Synchronous jobs run inline;
coroutine jobs run as background tasks so a slow oracle cannot delay accrual.
A coroutine job whose previous run is still in flight is skipped for that tick.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from config import Settings
from src.core.clock import Clock, SystemClock

JobFunc = Callable[[], Any]


@dataclass
class Cadence:
    """One periodic job."""

    name: str
    interval: float
    func: JobFunc
    next_due: float = 0.0
    runs: int = 0
    skipped: int = 0
    in_flight: asyncio.Task | None = field(default=None, repr=False)

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.func)


class PollingScheduler:
    """Cadence runner with an injectable clock and sleep function."""

    def __init__(
        self,
        clock: Clock | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.clock = clock or SystemClock()
        self._sleep = sleep
        self._jobs: dict[str, Cadence] = {}

    @property
    def jobs(self) -> dict[str, Cadence]:
        return dict(self._jobs)

    def add_job(self, name: str, interval: float, func: JobFunc, run_immediately: bool = False) -> Cadence:
        """
        Register a cadence.

        Args:
            name: Unique job name
            interval: Seconds between runs
            func: Callable or coroutine function taking no arguments
            run_immediately: Run on the first tick instead of after one interval
        """
        if interval <= 0:
            raise ValueError(f"Interval for {name!r} must be positive")
        if name in self._jobs:
            raise ValueError(f"Job {name!r} already registered")
        now = self.clock.monotonic()
        job = Cadence(name=name, interval=interval, func=func, next_due=now if run_immediately else now + interval)
        self._jobs[name] = job
        logger.debug(f"Scheduled {name} every {interval}s")
        return job

    async def run_pending(self) -> list[str]:
        """Run every job that is due. Returns the names of jobs started."""
        started: list[str] = []
        for job in list(self._jobs.values()):
            now = self.clock.monotonic()
            if now < job.next_due:
                continue
            job.next_due = now + job.interval

            if job.is_async:
                if job.in_flight is not None and not job.in_flight.done():
                    job.skipped += 1
                    logger.debug(f"{job.name} still running; skipping this tick")
                    continue
                job.in_flight = asyncio.create_task(self._run_async(job), name=f"cadence:{job.name}")
            else:
                self._run_sync(job)
            job.runs += 1
            started.append(job.name)
        return started

    def seconds_until_next(self) -> float:
        if not self._jobs:
            return 1.0
        now = self.clock.monotonic()
        return max(0.0, min(job.next_due for job in self._jobs.values()) - now)

    async def run_forever(self, stop: asyncio.Event | None = None) -> None:
        """Tick until `stop` is set."""
        stop = stop or asyncio.Event()
        logger.info(f"Polling scheduler started with {len(self._jobs)} cadence(s)")
        try:
            while not stop.is_set():
                await self.run_pending()
                if stop.is_set():
                    break
                await self._sleep(self.seconds_until_next())
        finally:
            await self.shutdown()
            logger.info("Polling scheduler stopped")

    async def shutdown(self) -> None:
        """Cancel any in-flight background jobs."""
        tasks = [j.in_flight for j in self._jobs.values() if j.in_flight and not j.in_flight.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @staticmethod
    def _run_sync(job: Cadence) -> None:
        try:
            job.func()
        except Exception as e:  # A failed tick must not kill the timeline
            logger.error(f"Scheduled job {job.name} failed: {e}")

    @staticmethod
    async def _run_async(job: Cadence) -> None:
        try:
            await job.func()
        except Exception as e:
            logger.error(f"Scheduled job {job.name} failed: {e}")


def build_polling_scheduler(engine, settings: Settings, sleep=None) -> PollingScheduler:
    """Wire accrual and advisory cadences for an engine."""
    scheduler = PollingScheduler(clock=engine.clock, sleep=sleep or asyncio.sleep)
    increment = settings.accrual_increment_seconds

    def accrue() -> None:
        engine.record_usage(increment)

    scheduler.add_job("usage_accrual", settings.accrual_interval_seconds, accrue)
    scheduler.add_job("advisory_refresh", settings.advisory_interval_seconds, engine.refresh_advisory)
    return scheduler
