"""
Lockout State Machine.

States:
    unlocked (initial) -> locked   when period total > limit_minutes * 60
    locked -> unlocked             only on an explicit override

A usage total that later falls (for example at a period rollover) does not
clear a lock. Clearing at rollover is a separate rule, enabled only through
`clear_at_rollover`.
"""

from __future__ import annotations

from collections import deque

from loguru import logger

from src.core.clock import Clock, SystemClock
from src.core.domain import LockState, LockTransition, OverrideActor

HISTORY_LIMIT = 100


class LockoutStateMachine:
    """Owns the lock flag for one engine instance."""

    def __init__(
        self,
        clock: Clock | None = None,
        clear_at_rollover: bool = False,
        history_limit: int = HISTORY_LIMIT,
    ):
        self.clock = clock or SystemClock()
        self.clear_at_rollover = clear_at_rollover
        self._state = LockState.UNLOCKED
        self._history: deque[LockTransition] = deque(maxlen=history_limit)

    @property
    def state(self) -> LockState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._state is LockState.LOCKED

    @property
    def history(self) -> list[LockTransition]:
        """Most recent transitions, oldest first."""
        return list(self._history)

    def evaluate(self, total_seconds: int, limit_minutes: int) -> LockState:
        """
        Lock when the period total strictly exceeds the limit.

        Re-evaluating while already locked is a no-op.
        """
        limit_seconds = limit_minutes * 60
        if self._state is LockState.UNLOCKED and total_seconds > limit_seconds:
            self._transition(
                LockState.LOCKED,
                f"usage {total_seconds}s exceeded limit {limit_seconds}s",
            )
            logger.warning(f"Daily limit exceeded ({total_seconds}s > {limit_seconds}s); access locked")
        return self._state

    def request_unlock(self, actor: OverrideActor | str = OverrideActor.USER) -> LockState:
        """Explicit override. Malformed requests are logged and ignored."""
        try:
            who = OverrideActor(actor)
        except ValueError:
            logger.warning(f"Ignoring unlock request from unknown actor {actor!r}")
            return self._state

        if self._state is LockState.LOCKED:
            self._transition(LockState.UNLOCKED, f"override by {who.value}")
            logger.info(f"Lock cleared by {who.value} override")
        return self._state

    def on_period_rollover(self) -> LockState:
        """Apply the optional midnight-clear rule."""
        if self.clear_at_rollover and self._state is LockState.LOCKED:
            self._transition(LockState.UNLOCKED, "accounting period rollover")
            logger.info("Lock cleared at accounting period rollover")
        return self._state

    def _transition(self, to_state: LockState, reason: str) -> None:
        self._history.append(
            LockTransition(
                at=self.clock.now(),
                from_state=self._state,
                to_state=to_state,
                reason=reason,
            )
        )
        self._state = to_state
