"""
Emergency Dispatcher.

Arbitrates emergency triggers so each incident produces exactly one
notification pass. The `active` flag is set before the first suspension
point, which makes check-and-set atomic on the event loop; it is cleared in a
`finally` block so a channel outage can never leave the dispatcher unable to
re-arm. Lock state is never touched here.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Protocol

from loguru import logger

from src.core.clock import Clock, SystemClock
from src.core.domain import Guardian, IncidentOutcome, IncidentStatus

EMERGENCY_MESSAGE = "EMERGENCY ALERT: {user} triggered an SOS from Vigilant. Please check in now."


class NotificationChannel(Protocol):
    """Delivers one alert to one guardian."""

    async def notify(self, guardian: Guardian, message: str) -> bool: ...


class EmergencyDispatcher:
    """Fan-out of emergency alerts with a single active incident."""

    def __init__(
        self,
        channel: NotificationChannel,
        timeout_seconds: float = 10.0,
        clock: Clock | None = None,
    ):
        self.channel = channel
        self.timeout_seconds = timeout_seconds
        self.clock = clock or SystemClock()
        self._active = False
        self.last_outcome: IncidentOutcome | None = None

    @property
    def active(self) -> bool:
        return self._active

    async def trigger(self, guardians: Sequence[Guardian], user_name: str = "User") -> IncidentOutcome:
        """
        Notify every guardian once.

        Returns immediately with ALREADY_ACTIVE if an incident is in flight.
        """
        if self._active:
            logger.info("Emergency already active; ignoring repeated trigger")
            return IncidentOutcome(status=IncidentStatus.ALREADY_ACTIVE)

        self._active = True
        started_at = self.clock.now()
        try:
            if not guardians:
                logger.warning("Emergency triggered with no guardians registered")
                outcome = IncidentOutcome(status=IncidentStatus.NO_GUARDIANS, started_at=started_at)
            else:
                logger.warning(f"Emergency triggered; notifying {len(guardians)} guardian(s)")
                notified, failed = await self._notify_all(
                    guardians, EMERGENCY_MESSAGE.format(user=user_name)
                )
                outcome = IncidentOutcome(
                    status=_status_for(notified, failed),
                    notified=notified,
                    failed=failed,
                    started_at=started_at,
                )
            outcome.finished_at = self.clock.now()
            self.last_outcome = outcome
            logger.info(outcome.summary())
            return outcome
        finally:
            self._active = False

    async def _notify_all(self, guardians: Sequence[Guardian], message: str) -> tuple[list[str], list[str]]:
        tasks = {
            asyncio.ensure_future(self._notify_one(guardian, message)): guardian
            for guardian in guardians
        }
        done, pending = await asyncio.wait(set(tasks), timeout=self.timeout_seconds)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning(
                f"Emergency dispatch timed out after {self.timeout_seconds}s; "
                f"{len(pending)} guardian(s) not confirmed"
            )
            await asyncio.gather(*pending, return_exceptions=True)

        notified: list[str] = []
        failed: list[str] = []
        for task, guardian in tasks.items():
            if task in done and task.result():
                notified.append(guardian.name)
            else:
                failed.append(guardian.name)
        return notified, failed

    async def _notify_one(self, guardian: Guardian, message: str) -> bool:
        try:
            delivered = bool(await self.channel.notify(guardian, message))
        except Exception as e:  # One guardian's failure must not abort the pass
            logger.error(f"Failed to notify guardian {guardian.name}: {e}")
            return False
        if not delivered:
            logger.warning(f"Notification channel rejected alert for {guardian.name}")
        return delivered


def _status_for(notified: list[str], failed: list[str]) -> IncidentStatus:
    if not failed:
        return IncidentStatus.DISPATCHED
    if notified:
        return IncidentStatus.PARTIAL
    return IncidentStatus.FAILED
