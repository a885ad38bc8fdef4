"""
Tests for the 7-day vs 28-day load ratio.
"""

import pytest

from src.aggregator import SessionAggregator
from src.load_ratio import INSUFFICIENT_HISTORY_MESSAGE, LoadRatioCalculator
from src.schemas import LoadMetric, LoadZone


@pytest.fixture
def calculator():
    """Create calculator using session load."""
    return LoadRatioCalculator()


def test_no_baseline_has_no_ratio(calculator, now):
    """Test that an empty baseline yields no ratio instead of dividing by zero."""
    result = calculator.calculate(SessionAggregator([]), now)

    assert result.ratio is None
    assert result.zone is None
    assert result.available is False
    assert result.chronic_load == 0.0
    assert result.message == INSUFFICIENT_HISTORY_MESSAGE


def test_ratio_hidden_below_five_sessions(calculator, make_session, now):
    """Test that the ratio is computed but not available with four sessions."""
    sessions = [make_session(d) for d in (1, 8, 15, 22)]
    result = calculator.calculate(SessionAggregator(sessions), now)

    assert result.available is False
    assert result.ratio is not None


def test_steady_history_is_optimal(calculator, steady_history, now):
    """Test six evenly spaced sessions, two of them in the last week."""
    result = calculator.calculate(SessionAggregator(steady_history), now)

    assert result.available is True
    # History spans 26 days, so the baseline is normalised over 26 days
    assert result.baseline_days == pytest.approx(26.0)
    assert result.ratio == pytest.approx(1.24)
    assert result.zone == LoadZone.OPTIMAL


def test_overloaded_history_is_high(calculator, overloaded_history, now):
    """Test a hard week on top of a thin baseline."""
    result = calculator.calculate(SessionAggregator(overloaded_history), now)

    assert result.available is True
    assert result.ratio > 1.5
    assert result.zone == LoadZone.HIGH
    assert "reducing volume" in result.message


def test_young_history_uses_three_week_floor(calculator, make_session, now):
    """Test that a history younger than three weeks is normalised over 21 days."""
    sessions = [make_session(d) for d in (1, 2, 3, 4, 5)]
    result = calculator.calculate(SessionAggregator(sessions), now)

    assert result.baseline_days == pytest.approx(21.0)
    # Whole history in the recent window: 5 sessions / (5 sessions / 3 weeks)
    assert result.ratio == pytest.approx(3.0)
    assert result.zone == LoadZone.HIGH


def test_hard_week_on_two_week_history_is_high(calculator, make_session, now):
    """Test five hard sessions after two easier ones only days earlier."""
    recent = [make_session(d, rpe=9.0) for d in (2, 3, 4, 5, 6)]
    older = [make_session(d, rpe=6.0) for d in (8, 10)]
    result = calculator.calculate(SessionAggregator(older + recent), now)

    assert result.acute_load == pytest.approx(1800.0)
    assert result.chronic_load == pytest.approx(2280.0)
    assert result.baseline_days == pytest.approx(21.0)
    # 1800 / (2280 / 3)
    assert result.ratio == pytest.approx(2.37)
    assert result.zone == LoadZone.HIGH


def test_no_recent_sessions_is_low(calculator, make_session, now):
    """Test that a week off gives a zero ratio in the LOW zone."""
    sessions = [make_session(d) for d in (8, 10, 12, 14, 16)]
    result = calculator.calculate(SessionAggregator(sessions), now)

    assert result.acute_load == 0.0
    assert result.ratio == 0.0
    assert result.zone == LoadZone.LOW


def test_climb_count_metric(make_session, now):
    """Test the ratio measured in climbs instead of session load."""
    sessions = [make_session(1, climbs=20)] + [make_session(d) for d in (10, 17, 24)]
    result = LoadRatioCalculator(LoadMetric.CLIMB_COUNT).calculate(SessionAggregator(sessions), now)

    assert result.acute_load == 20.0
    assert result.chronic_load == 50.0
    # 20 / (50 / (24 / 7))
    assert result.ratio == pytest.approx(1.37)
    assert result.zone == LoadZone.ELEVATED


def test_ratio_ignores_future_sessions(calculator, steady_history, make_session, now):
    """Test that sessions at or after `now` do not change the ratio."""
    baseline = calculator.calculate(SessionAggregator(steady_history), now)
    with_future = calculator.calculate(
        SessionAggregator(steady_history + [make_session(0), make_session(-2)]), now
    )
    assert with_future == baseline
