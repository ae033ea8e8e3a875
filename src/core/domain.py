"""
Domain types shared by the usage engine and its collaborators.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Profile role. Advisory context only; it does not change thresholds."""

    STUDENT = "student"
    IT_WORKER = "it_worker"

    @classmethod
    def parse(cls, value: str) -> Role:
        """Accept the stored literals plus the plain 'worker' alias."""
        normalized = (value or "").strip().lower()
        if normalized == "worker":
            return cls.IT_WORKER
        return cls(normalized)

    @property
    def label(self) -> str:
        return "student" if self is Role.STUDENT else "IT worker"


class LockState(str, Enum):
    """Access state owned by the lockout state machine."""

    UNLOCKED = "unlocked"
    LOCKED = "locked"


class OverrideActor(str, Enum):
    """Who is allowed to clear a lock."""

    USER = "user"
    GUARDIAN = "guardian"


class AdvisorySource(str, Enum):
    ORACLE = "oracle"
    FALLBACK = "fallback"  # last known good result reused
    DEFAULT = "default"  # neutral baseline, nothing known yet


class IncidentStatus(str, Enum):
    DISPATCHED = "dispatched"
    PARTIAL = "partial"
    FAILED = "failed"
    NO_GUARDIANS = "no_guardians"
    ALREADY_ACTIVE = "already_active"


@dataclass(frozen=True)
class UsageEvent:
    """A recorded slice of device usage. Immutable once written."""

    timestamp: datetime
    source_label: str
    duration_seconds: int
    id: int | None = None


@dataclass
class Profile:
    name: str = "Guest"
    role: Role = Role.IT_WORKER
    daily_limit_minutes: int = 360

    @property
    def limit_seconds(self) -> int:
        return self.daily_limit_minutes * 60


@dataclass
class Guardian:
    name: str
    phone: str = ""
    email: str = ""
    id: int | None = None


@dataclass
class RoutineItem:
    time: str  # HH:MM, local
    activity: str
    completed: bool = False
    id: int | None = None

    def describe(self) -> str:
        return f"{self.time}: {self.activity} ({'Done' if self.completed else 'Pending'})"


@dataclass(frozen=True)
class AdvisoryResult:
    """Fatigue advisory. Score is always within [0, 100]."""

    score: int
    recommendation: str
    source: AdvisorySource = AdvisorySource.ORACLE
    generated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "recommendation": self.recommendation,
            "source": self.source.value,
            "generated_at": self.generated_at.isoformat() if self.generated_at else None,
        }


@dataclass(frozen=True)
class LockTransition:
    at: datetime
    from_state: LockState
    to_state: LockState
    reason: str


@dataclass
class IncidentOutcome:
    """Result of one emergency trigger, including partial failures."""

    status: IncidentStatus
    notified: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def attempted(self) -> int:
        return len(self.notified) + len(self.failed)

    def summary(self) -> str:
        if self.status is IncidentStatus.ALREADY_ACTIVE:
            return "An emergency alert is already being sent."
        if self.status is IncidentStatus.NO_GUARDIANS:
            return "No guardians registered; nobody was notified."
        text = f"Emergency alert sent to {len(self.notified)} of {self.attempted} guardians"
        if self.notified:
            text += f": {', '.join(self.notified)}"
        if self.failed:
            text += f". Not reached: {', '.join(self.failed)}"
        return text

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "notified": list(self.notified),
            "failed": list(self.failed),
            "summary": self.summary(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


@dataclass(frozen=True)
class UsageStatus:
    """Point-in-time view of usage against the budget."""

    total_seconds: int
    limit_seconds: int
    lock_state: LockState
    advisory: AdvisoryResult | None = None

    @property
    def remaining_seconds(self) -> int:
        return max(0, self.limit_seconds - self.total_seconds)

    def to_dict(self) -> dict:
        return {
            "total_seconds": self.total_seconds,
            "limit_seconds": self.limit_seconds,
            "remaining_seconds": self.remaining_seconds,
            "lock_state": self.lock_state.value,
            "advisory": self.advisory.to_dict() if self.advisory else None,
        }
