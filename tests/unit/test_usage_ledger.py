"""
Unit tests for the usage ledger.
"""

from datetime import datetime

import pytest

from src.core.clock import ManualClock
from src.core.ledger import UsageLedger


@pytest.fixture
def ledger(session_factory, clock):
    return UsageLedger(session_factory, clock=clock)


class TestRecord:
    """Tests for appending usage."""

    def test_record_returns_running_period_total(self, ledger):
        assert ledger.record("Browser", 30) == 30
        assert ledger.record("Browser", 31) == 61
        assert ledger.current_total() == 61

    def test_current_total_does_not_mutate(self, ledger):
        ledger.record("Editor", 45)

        assert ledger.current_total() == 45
        assert ledger.current_total() == 45
        assert len(ledger.recent_events()) == 1

    @pytest.mark.parametrize("bad", [0, -5, 2.5, "10", True, None])
    def test_invalid_durations_are_ignored(self, ledger, bad):
        ledger.record("Editor", 20)

        assert ledger.record("Editor", bad) == 20
        assert len(ledger.recent_events()) == 1

    def test_total_equals_sum_of_positive_durations(self, ledger):
        durations = [10, 0, 25, -3, 7, 60]
        for d in durations:
            ledger.record("App", d)

        assert ledger.current_total() == sum(d for d in durations if d > 0)


class TestPeriodBoundary:
    """Tests for the calendar-day accounting period."""

    def test_period_start_is_local_midnight(self, ledger):
        assert ledger.period_start() == datetime(2024, 3, 10, 0, 0, 0)

    def test_total_resets_at_midnight(self, ledger, clock):
        clock.advance(14 * 3600)  # 23:00
        ledger.record("Video", 600)
        clock.advance(2 * 3600)  # 01:00 next day

        assert ledger.current_total() == 0
        assert ledger.record("Video", 90) == 90

    def test_events_from_previous_day_are_kept(self, ledger, clock):
        ledger.record("Video", 600)
        clock.advance(24 * 3600)
        ledger.record("Video", 60)

        events = ledger.recent_events()
        assert [e.duration_seconds for e in events] == [60, 600]

    def test_restart_reconstructs_total_from_persisted_events(self, session_factory, clock):
        UsageLedger(session_factory, clock=clock).record("Game", 120)
        UsageLedger(session_factory, clock=clock).record("Game", 30)

        restarted = UsageLedger(session_factory, clock=ManualClock(clock.now()))
        assert restarted.current_total() == 150


class TestRecentEvents:
    def test_newest_first_with_labels(self, ledger, clock):
        ledger.record("Mail", 5)
        clock.advance(1)
        ledger.record("Chat", 6)

        events = ledger.recent_events(limit=1)
        assert len(events) == 1
        assert events[0].source_label == "Chat"
        assert events[0].duration_seconds == 6
