"""
Clock sources for the usage engine.

The engine never reads time directly. Accounting periods use `now()` (local
wall clock); the polling scheduler uses `monotonic()` so cadences are immune
to wall-clock jumps.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Time source used by the ledger, lockout and scheduler."""

    def now(self) -> datetime: ...

    def monotonic(self) -> float: ...


class SystemClock:
    """Real local time."""

    def now(self) -> datetime:
        return datetime.now()

    def monotonic(self) -> float:
        return time.monotonic()


class ManualClock:
    """
    Deterministic clock advanced explicitly.

    Wall-clock and monotonic readings move together, so advancing past local
    midnight also rolls the accounting period.
    """

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime(2024, 1, 1, 9, 0, 0)
        self._monotonic = 0.0

    def now(self) -> datetime:
        return self._now

    def monotonic(self) -> float:
        return self._monotonic

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now += timedelta(seconds=seconds)
        self._monotonic += seconds

    async def sleep(self, seconds: float) -> None:
        """Drop-in for asyncio.sleep that advances time instantly."""
        self.advance(max(0.0, seconds))
        await asyncio.sleep(0)


def start_of_day(moment: datetime) -> datetime:
    """Local midnight for the given moment."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
