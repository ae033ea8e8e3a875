"""
Core Module - Usage accounting and adaptive lockout engine.

Components:
- ledger: append-only usage events and the period total
- lockout: locked/unlocked state machine with explicit override
- advisory: fatigue advisories from an external oracle, with fallback
- emergency: single-incident guardian notification
- scheduler: decoupled accrual and advisory cadences
- engine: the facade that owns one instance of each

Design Principle:
Only the ledger computes usage totals. Everything else asks it.
"""

from src.core.domain import (
    AdvisoryResult,
    AdvisorySource,
    Guardian,
    IncidentOutcome,
    IncidentStatus,
    LockState,
    LockTransition,
    OverrideActor,
    Profile,
    Role,
    RoutineItem,
    UsageEvent,
    UsageStatus,
)

__all__ = [
    "AdvisoryResult",
    "AdvisorySource",
    "Guardian",
    "IncidentOutcome",
    "IncidentStatus",
    "LockState",
    "LockTransition",
    "OverrideActor",
    "Profile",
    "Role",
    "RoutineItem",
    "UsageEvent",
    "UsageStatus",
]
