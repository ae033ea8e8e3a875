"""
Unit tests for the lockout state machine.
"""

import pytest

from src.core.domain import LockState, OverrideActor
from src.core.lockout import LockoutStateMachine


@pytest.fixture
def machine(clock):
    return LockoutStateMachine(clock=clock)


class TestEvaluate:
    def test_starts_unlocked(self, machine):
        assert machine.state is LockState.UNLOCKED
        assert machine.history == []

    def test_exactly_at_limit_does_not_lock(self, machine):
        assert machine.evaluate(60, limit_minutes=1) is LockState.UNLOCKED

    def test_over_limit_locks(self, machine):
        assert machine.evaluate(61, limit_minutes=1) is LockState.LOCKED
        assert machine.is_locked

    def test_re_evaluating_while_locked_is_noop(self, machine):
        machine.evaluate(61, limit_minutes=1)
        machine.evaluate(500, limit_minutes=1)

        assert machine.state is LockState.LOCKED
        assert len(machine.history) == 1

    def test_total_falling_back_does_not_unlock(self, machine):
        machine.evaluate(61, limit_minutes=1)

        assert machine.evaluate(0, limit_minutes=1) is LockState.LOCKED


class TestOverride:
    def test_unlock_clears_lock(self, machine):
        machine.evaluate(61, limit_minutes=1)

        assert machine.request_unlock(OverrideActor.GUARDIAN) is LockState.UNLOCKED
        transition = machine.history[-1]
        assert transition.from_state is LockState.LOCKED
        assert transition.to_state is LockState.UNLOCKED
        assert "guardian" in transition.reason

    def test_unlock_accepts_actor_string(self, machine):
        machine.evaluate(61, limit_minutes=1)

        assert machine.request_unlock("user") is LockState.UNLOCKED

    def test_malformed_override_is_ignored(self, machine):
        machine.evaluate(61, limit_minutes=1)

        assert machine.request_unlock("intruder") is LockState.LOCKED
        assert len(machine.history) == 1

    def test_unlock_when_unlocked_is_noop(self, machine):
        assert machine.request_unlock() is LockState.UNLOCKED
        assert machine.history == []

    def test_can_lock_again_after_override(self, machine):
        machine.evaluate(61, limit_minutes=1)
        machine.request_unlock()

        assert machine.evaluate(62, limit_minutes=1) is LockState.LOCKED


class TestRollover:
    def test_rollover_does_not_clear_by_default(self, machine):
        machine.evaluate(61, limit_minutes=1)

        assert machine.on_period_rollover() is LockState.LOCKED

    def test_rollover_clears_when_enabled(self, clock):
        machine = LockoutStateMachine(clock=clock, clear_at_rollover=True)
        machine.evaluate(61, limit_minutes=1)

        assert machine.on_period_rollover() is LockState.UNLOCKED
        assert machine.history[-1].reason == "accounting period rollover"


class TestHistory:
    def test_history_keeps_only_recent_transitions(self, clock):
        machine = LockoutStateMachine(clock=clock, history_limit=4)
        for _ in range(5):
            machine.evaluate(61, limit_minutes=1)
            machine.request_unlock()

        history = machine.history
        assert len(history) == 4
        assert [t.to_state for t in history] == [LockState.LOCKED, LockState.UNLOCKED] * 2
