"""
Wellbeing Engine: the caller-facing facade of the usage core.

One instance owns the ledger, the lockout state machine, the advisory client
and the emergency dispatcher, plus handles to the collaborator stores. There
are no module-level singletons, so tests can run several engines side by side.

Accrual and lock evaluation happen under one lock: no evaluation ever sees a
total that reflects a partial append.
"""

from __future__ import annotations

import threading
from datetime import datetime

from loguru import logger

from config import Settings
from src.core.advisory import AdvisoryClient, AdvisoryOracle
from src.core.clock import Clock, SystemClock
from src.core.domain import (
    AdvisoryResult,
    IncidentOutcome,
    LockState,
    OverrideActor,
    Profile,
    UsageStatus,
)
from src.core.emergency import EmergencyDispatcher, NotificationChannel
from src.core.ledger import UsageLedger
from src.core.lockout import LockoutStateMachine
from src.db.database import SessionFactory, get_session_factory
from src.integrations.gemini_oracle import create_oracle
from src.integrations.notifications import create_notification_channel
from src.stores import AssessmentStore, GuardianStore, ProfileStore, RoutineStore


class WellbeingEngine:
    """Usage accounting and adaptive lockout for a single user profile."""

    def __init__(
        self,
        ledger: UsageLedger,
        lockout: LockoutStateMachine,
        advisory: AdvisoryClient,
        dispatcher: EmergencyDispatcher,
        profiles: ProfileStore,
        guardians: GuardianStore,
        routines: RoutineStore,
        assessments: AssessmentStore | None = None,
        clock: Clock | None = None,
        source_label: str = "Vigilant App",
    ):
        self.ledger = ledger
        self.lockout = lockout
        self.advisory = advisory
        self.dispatcher = dispatcher
        self.profiles = profiles
        self.guardians = guardians
        self.routines = routines
        self.assessments = assessments
        self.clock = clock or SystemClock()
        self.source_label = source_label
        self._lock = threading.Lock()
        self._period_start: datetime = self.ledger.period_start()

    # -------------------------------------------------------------------------
    # Usage + lockout
    # -------------------------------------------------------------------------

    def record_usage(self, duration_seconds: int, source_label: str | None = None) -> UsageStatus:
        """Append usage and evaluate the lock against the updated period total."""
        with self._lock:
            self._check_rollover()
            total = self.ledger.record(source_label or self.source_label, duration_seconds)
            limit_minutes = self.profiles.get().daily_limit_minutes
            state = self.lockout.evaluate(total, limit_minutes)
        return UsageStatus(
            total_seconds=total,
            limit_seconds=limit_minutes * 60,
            lock_state=state,
            advisory=self.advisory.last_result,
        )

    def evaluate_lock(self) -> LockState:
        """Re-evaluate against the persisted total (e.g. after a restart)."""
        with self._lock:
            self._check_rollover()
            total = self.ledger.current_total()
            return self.lockout.evaluate(total, self.profiles.get().daily_limit_minutes)

    def get_lock_state(self) -> LockState:
        with self._lock:
            self._check_rollover()
            return self.lockout.state

    def request_unlock(self, actor: OverrideActor | str = OverrideActor.USER) -> LockState:
        with self._lock:
            return self.lockout.request_unlock(actor)

    def status(self) -> UsageStatus:
        with self._lock:
            self._check_rollover()
            total = self.ledger.current_total()
            state = self.lockout.state
        return UsageStatus(
            total_seconds=total,
            limit_seconds=self.profiles.get().limit_seconds,
            lock_state=state,
            advisory=self.advisory.last_result,
        )

    def _check_rollover(self) -> None:
        current = self.ledger.period_start()
        if current != self._period_start:
            logger.info(f"Accounting period rolled over to {current.date().isoformat()}")
            self._period_start = current
            self.lockout.on_period_rollover()

    # -------------------------------------------------------------------------
    # Advisory
    # -------------------------------------------------------------------------

    @property
    def latest_advisory(self) -> AdvisoryResult:
        return self.advisory.last_result

    async def refresh_advisory(self) -> AdvisoryResult:
        """Fetch a new advisory. Display only: never changes lock state."""
        profile = self.profiles.get()
        return await self.advisory.refresh(
            usage_seconds=self.ledger.current_total(),
            limit_minutes=profile.daily_limit_minutes,
            now_local=self.clock.now(),
            routine_snapshot=self.routines.list(),
            role=profile.role,
        )

    # -------------------------------------------------------------------------
    # Emergency
    # -------------------------------------------------------------------------

    async def trigger_emergency(self) -> IncidentOutcome:
        """Notify all guardians. Independent of lock state."""
        profile: Profile = self.profiles.get()
        return await self.dispatcher.trigger(self.guardians.list(), user_name=profile.name)

    async def aclose(self) -> None:
        """Close integration clients (e.g. the webhook's HTTP client)."""
        close = getattr(self.dispatcher.channel, "close", None)
        if close is not None:
            await close()


def build_engine(
    settings: Settings,
    session_factory: SessionFactory | None = None,
    oracle: AdvisoryOracle | None = None,
    channel: NotificationChannel | None = None,
    clock: Clock | None = None,
) -> WellbeingEngine:
    """
    Wire a complete engine from settings.

    Args:
        settings: Application settings
        session_factory: Session factory (default database when omitted)
        oracle: Advisory oracle (built from settings when omitted)
        channel: Notification channel (built from settings when omitted)
        clock: Time source (system clock when omitted)
    """
    clock = clock or SystemClock()
    session_factory = session_factory or get_session_factory()
    assessments = AssessmentStore(session_factory)
    advisory = AdvisoryClient(
        oracle if oracle is not None else create_oracle(settings),
        timeout_seconds=settings.advisory_timeout_seconds,
        on_result=assessments.add,
    )
    engine = WellbeingEngine(
        ledger=UsageLedger(session_factory, clock=clock),
        lockout=LockoutStateMachine(clock=clock, clear_at_rollover=settings.lock_clears_at_rollover),
        advisory=advisory,
        dispatcher=EmergencyDispatcher(
            channel if channel is not None else create_notification_channel(settings),
            timeout_seconds=settings.notification_timeout_seconds,
            clock=clock,
        ),
        profiles=ProfileStore(session_factory, default_limit_minutes=settings.default_daily_limit_minutes),
        guardians=GuardianStore(session_factory),
        routines=RoutineStore(session_factory),
        assessments=assessments,
        clock=clock,
        source_label=settings.usage_source_label,
    )
    engine.evaluate_lock()
    return engine
