"""
Usage Ledger.

Append-only record of usage events. The period total is always derived by a
range query over persisted events (timestamp >= local midnight), never from a
running counter, so a process restart mid-day reconstructs the same total.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger
from sqlalchemy import func, select

from src.core.clock import Clock, SystemClock, start_of_day
from src.core.domain import UsageEvent
from src.db.database import SessionFactory, session_scope
from src.db.models import UsageLog


class UsageLedger:
    """Sole writer and reader of usage totals."""

    def __init__(self, session_factory: SessionFactory, clock: Clock | None = None):
        self._session_factory = session_factory
        self.clock = clock or SystemClock()

    def period_start(self) -> datetime:
        """Start of the current accounting period (local midnight)."""
        return start_of_day(self.clock.now())

    def record(self, source_label: str, duration_seconds: int) -> int:
        """
        Append a usage event and return the new period total.

        Non-positive or non-integer durations are a caller bug, not a user
        event: they are logged and ignored, and the unchanged total is
        returned.
        """
        if (
            isinstance(duration_seconds, bool)
            or not isinstance(duration_seconds, int)
            or duration_seconds <= 0
        ):
            logger.warning(
                f"Ignoring invalid usage duration {duration_seconds!r} from {source_label!r}"
            )
            return self.current_total()

        with session_scope(self._session_factory) as session:
            session.add(
                UsageLog(
                    timestamp=self.clock.now(),
                    app_name=source_label,
                    duration_seconds=duration_seconds,
                )
            )
            session.flush()
            total = self._period_total(session)

        logger.debug(f"Recorded {duration_seconds}s from {source_label}; period total {total}s")
        return total

    def current_total(self) -> int:
        """Sum of durations recorded since the start of the current period."""
        with session_scope(self._session_factory) as session:
            return self._period_total(session)

    def recent_events(self, limit: int = 100) -> list[UsageEvent]:
        """Most recent events across all periods, newest first."""
        with session_scope(self._session_factory) as session:
            rows = session.scalars(
                select(UsageLog).order_by(UsageLog.timestamp.desc(), UsageLog.id.desc()).limit(limit)
            ).all()
            return [
                UsageEvent(
                    id=row.id,
                    timestamp=row.timestamp,
                    source_label=row.app_name,
                    duration_seconds=row.duration_seconds,
                )
                for row in rows
            ]

    def _period_total(self, session) -> int:
        stmt = select(func.coalesce(func.sum(UsageLog.duration_seconds), 0)).where(
            UsageLog.timestamp >= self.period_start()
        )
        return int(session.scalar(stmt) or 0)
