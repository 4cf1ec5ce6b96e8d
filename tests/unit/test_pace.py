"""
Test Suite: Pace estimator (window construction, selection, guards)
"""

from datetime import datetime, timedelta

import pytest

from budget_pace.config import Config
from budget_pace.consumption import consumed_work_days
from budget_pace.pace import (
    REASON_INSUFFICIENT_HISTORY,
    REASON_NOT_COMPUTABLE,
    WINDOW_RECENT_DAYS,
    WINDOW_RECENT_SESSIONS,
    Window,
    build_windows,
    days_between,
    estimate_item_pace,
    estimate_pace,
    pace_entries,
    select_window,
)
from budget_pace.schema import TimeEntry

HOUR = 3600


@pytest.fixture
def reference_ledger(make_entry):
    """8h six days ago, 8h four days ago, 4h yesterday."""
    return [
        make_entry(6, 8 * HOUR),
        make_entry(4, 8 * HOUR),
        make_entry(1, 4 * HOUR),
    ]


class TestHelpers:
    def test_days_between_uses_calendar_dates(self):
        late = datetime(2024, 3, 1, 23, 30)
        early_next = datetime(2024, 3, 2, 0, 15)
        assert days_between(late, early_next) == 1
        assert days_between(early_next, early_next) == 0

    def test_pace_entries_filters_and_orders(self, make_entry):
        old = make_entry(5)
        new = make_entry(1)
        ledger = [old, TimeEntry(id="nostart", duration_seconds=HOUR), make_entry(2, None), new]

        assert pace_entries(ledger) == [new, old]

    def test_window_work_days_match_consumption(self, reference_ledger, config):
        window = Window(WINDOW_RECENT_SESSIONS, pace_entries(reference_ledger))

        assert window.work_days(config) == consumed_work_days(reference_ledger, config=config)
        assert window.work_days(config) == pytest.approx(2.5)


class TestWindowSelection:
    def test_reference_scenario_picks_recent_sessions_on_tie(self, reference_ledger, now, config):
        ordered = pace_entries(reference_ledger)
        recent_days, recent_sessions = build_windows(ordered, now, config)

        assert len(recent_days) == 3
        assert len(recent_sessions) == 3
        assert select_window(recent_days, recent_sessions, config) is recent_sessions

    def test_five_recent_sessions_tie_goes_to_recent_sessions(self, make_entry, now, config):
        ledger = [make_entry(d, 2 * HOUR) for d in range(5)]

        pace = estimate_pace(ledger, now, config=config)

        assert pace.available
        assert pace.window_label == WINDOW_RECENT_SESSIONS
        assert pace.entry_count == 5

    def test_busier_week_picks_recent_days(self, make_entry, now, config):
        ledger = [make_entry(d, 2 * HOUR) for d in (0, 1, 1, 2, 3, 4, 5)]

        pace = estimate_pace(ledger, now, config=config)

        assert pace.window_label == WINDOW_RECENT_DAYS
        assert pace.entry_count == 7
        # 14h over 6 calendar days
        assert pace.pace_per_calendar_day == pytest.approx((14 / 8) / 6)

    def test_stale_history_uses_recent_sessions(self, make_entry, now, config):
        ledger = [make_entry(20, 8 * HOUR), make_entry(15, 8 * HOUR)]

        pace = estimate_pace(ledger, now, config=config)

        assert pace.available
        assert pace.window_label == WINDOW_RECENT_SESSIONS
        # 2 work-days from day -20 through today: 21 calendar days
        assert pace.calendar_span == 21
        assert pace.pace_per_calendar_day == pytest.approx(2 / 21)

    def test_only_recent_days_valid(self, make_entry, now):
        config = Config(recent_sessions_window=1)
        ledger = [make_entry(2, 8 * HOUR), make_entry(1, 8 * HOUR)]

        pace = estimate_pace(ledger, now, config=config)

        assert pace.window_label == WINDOW_RECENT_DAYS
        assert pace.entry_count == 2

    def test_entry_at_seven_day_boundary_is_inside(self, now, config):
        ledger = [
            TimeEntry(id="a", start_time=now - timedelta(days=7), duration_seconds=HOUR),
            TimeEntry(id="b", start_time=now - timedelta(days=7, seconds=1), duration_seconds=HOUR),
        ]
        recent_days, _ = build_windows(pace_entries(ledger), now, config)

        assert [e.id for e in recent_days.entries] == ["a"]


class TestPaceValue:
    def test_reference_scenario(self, reference_ledger, now, config):
        pace = estimate_pace(reference_ledger, now, config=config)

        assert pace.available
        assert pace.calendar_span == 7
        assert pace.pace_per_calendar_day == pytest.approx(2.5 / 7)
        assert round(pace.pace_per_calendar_day, 3) == 0.357

    def test_span_can_stop_at_newest_session(self, reference_ledger, now):
        pace = estimate_pace(reference_ledger, now, config=Config(span_through_now=False))

        assert pace.calendar_span == 6
        assert pace.pace_per_calendar_day == pytest.approx(2.5 / 6)

    def test_same_day_sessions_span_one_day(self, now, config):
        ledger = [
            TimeEntry(id="a", start_time=now - timedelta(hours=5), duration_seconds=2 * HOUR),
            TimeEntry(id="b", start_time=now - timedelta(hours=2), duration_seconds=2 * HOUR),
        ]
        pace = estimate_pace(ledger, now, config=config)

        assert pace.calendar_span == 1
        assert pace.pace_per_calendar_day == pytest.approx(0.5)

    def test_to_dict_shape(self, reference_ledger, now, config):
        out = estimate_pace(reference_ledger, now, config=config).to_dict()
        assert set(out) == {"available", "pacePerCalendarDay", "windowLabel"}


class TestUnavailable:
    def test_no_history(self, now, config):
        pace = estimate_pace([], now, config=config)

        assert not pace.available
        assert pace.reason == REASON_INSUFFICIENT_HISTORY
        assert pace.to_dict() == {"available": False, "reason": REASON_INSUFFICIENT_HISTORY}

    def test_single_session(self, make_entry, now, config):
        pace = estimate_pace([make_entry(1)], now, config=config)
        assert pace.reason == REASON_INSUFFICIENT_HISTORY

    def test_open_sessions_do_not_count(self, make_entry, now, config):
        pace = estimate_pace([make_entry(1), make_entry(0, None)], now, config=config)
        assert not pace.available

    def test_rate_at_epsilon_is_not_computable(self, make_entry, now):
        config = Config(global_pace_epsilon=1.0)
        pace = estimate_pace([make_entry(1), make_entry(0)], now, config=config)

        assert not pace.available
        assert pace.reason == REASON_NOT_COMPUTABLE


class TestItemPace:
    def test_uses_item_sessions_only(self, make_entry, now, config):
        ledger = [
            make_entry(1, 4 * HOUR, work_item_id="w1"),
            make_entry(0, 4 * HOUR, work_item_id="w1"),
            make_entry(0, 8 * HOUR, work_item_id="w2"),
            make_entry(0, 8 * HOUR),
        ]
        pace = estimate_item_pace(ledger, "w1", now, config=config)

        assert pace.available
        assert pace.window_label == WINDOW_RECENT_SESSIONS
        assert pace.pace_per_calendar_day == pytest.approx(0.5)

    def test_never_uses_recent_days_window(self, make_entry, now, config):
        ledger = [make_entry(d % 6, HOUR, work_item_id="w1") for d in range(8)]
        pace = estimate_item_pace(ledger, "w1", now, config=config)

        assert pace.entry_count == config.recent_sessions_window

    def test_one_item_session_is_insufficient(self, make_entry, now, config):
        ledger = [make_entry(1, work_item_id="w1"), make_entry(0), make_entry(0)]
        pace = estimate_item_pace(ledger, "w1", now, config=config)

        assert not pace.available
        assert pace.reason == REASON_INSUFFICIENT_HISTORY

    def test_near_zero_rate_is_not_computable(self, make_entry, now, config):
        ledger = [make_entry(1, 1, work_item_id="w1"), make_entry(0, 1, work_item_id="w1")]
        pace = estimate_item_pace(ledger, "w1", now, config=config)

        assert not pace.available
        assert pace.reason == REASON_NOT_COMPUTABLE
