"""
Tests for session aggregation and raw record validation.

Covers:
- Half-open window membership
- Exclusion of empty sessions
- Histogram ordering and load scalars
- Legacy record formats and malformed record skipping
"""

import pytest

from src.aggregator import SessionAggregator, parse_climbs, parse_session, parse_sessions
from src.schemas import ClimbStyle, ClimbType, LoadMetric, Session, WallAngle
from src.thresholds import MS_PER_DAY, MS_PER_HOUR, RECENT_WINDOW_MS


def test_window_is_half_open(make_session, now):
    """Test that the window includes its start and excludes `now`."""
    at_start = make_session(7)
    at_now = make_session(0)
    inside = make_session(3)
    aggregator = SessionAggregator([at_start, at_now, inside])

    recent = aggregator.recent(now)

    assert recent.session_count == 2
    assert at_start in recent.sessions
    assert at_now not in recent.sessions
    assert recent.start == now - RECENT_WINDOW_MS
    assert recent.end == now


def test_empty_window(make_session, now):
    """Test that a window with no sessions has zero totals."""
    aggregator = SessionAggregator([make_session(20)])
    recent = aggregator.recent(now)

    assert recent.is_empty
    assert recent.climb_count == 0
    assert recent.session_load == 0.0
    assert recent.average_rpe is None
    assert recent.grade_histogram == {}
    assert recent.duration_days == pytest.approx(7.0)


def test_degenerate_sessions_excluded(make_session, now):
    """Test that sessions without climbs never reach an aggregate."""
    empty = Session(start_time=now - MS_PER_DAY)
    aggregator = SessionAggregator([empty, make_session(2)])

    assert aggregator.valid_count == 1
    assert aggregator.excluded_count == 1
    assert aggregator.recent(now).session_count == 1


def test_sessions_sorted_and_inputs_untouched(make_session):
    """Test that the aggregator orders its own copy by timestamp."""
    sessions = [make_session(1), make_session(10), make_session(5)]
    original = list(sessions)

    aggregator = SessionAggregator(sessions)

    assert sessions == original
    timestamps = [s.timestamp for s in aggregator.sessions]
    assert timestamps == sorted(timestamps)


def test_window_totals_and_histogram(make_session, now):
    """Test climb counts, RPE volume and grade histogram ordering."""
    aggregator = SessionAggregator([
        make_session(1, climbs=2, grade="V10", rpe=8.0),
        make_session(2, climbs=3, grade="V2", rpe=4.0),
    ])
    recent = aggregator.recent(now)

    assert recent.climb_count == 5
    assert recent.rpe_volume == pytest.approx(28.0)
    assert recent.average_rpe == pytest.approx(5.6)
    assert list(recent.grade_histogram.items()) == [("V2", 3), ("V10", 2)]
    assert recent.load(LoadMetric.CLIMB_COUNT) == 5.0
    assert recent.load(LoadMetric.RPE_VOLUME) == pytest.approx(28.0)
    assert recent.load(LoadMetric.SESSION_LOAD) == pytest.approx(recent.session_load)


def test_history_ignores_future_sessions(make_session, now):
    """Test that sessions at or after `now` are not part of the history."""
    aggregator = SessionAggregator([make_session(2), make_session(1), make_session(-1)])

    assert aggregator.count_before(now) == 2
    assert aggregator.hours_since_last_session(now) == pytest.approx(24.0)
    assert aggregator.typical_gap_hours(now) == pytest.approx(24.0)
    assert aggregator.history_span_days(now) == pytest.approx(2.0)


def test_no_history(now):
    """Test time-since helpers with no sessions."""
    aggregator = SessionAggregator([])

    assert aggregator.hours_since_last_session(now) is None
    assert aggregator.typical_gap_hours(now) is None
    assert aggregator.history_span_days(now) is None


def test_parse_legacy_session_record(now):
    """Test records from local logs: camelCase times, count under `climbs`."""
    record = {
        "startTime": now - 2 * MS_PER_HOUR,
        "endTime": now - MS_PER_HOUR,
        "climbs": 2,
        "climbList": [
            {"grade": "6c", "angle": "30°", "styles": ["power"], "rpe": 7, "attempts": 2},
            {"grade": "V2", "angle": "slab", "styles": [], "rpe": 4},
        ],
    }
    session, skipped = parse_session(record)

    assert skipped == 0
    assert session.start_time == now - 2 * MS_PER_HOUR
    assert session.climb_count == 2
    board, slab = session.climbs
    assert board.grade == "V5"
    assert board.board_angle == "30°"
    assert board.climb_type == ClimbType.BOARD
    assert board.angle_label == "30°"
    assert board.style == ClimbStyle.POWERFUL.value
    assert slab.wall_angle == WallAngle.SLAB
    assert slab.climb_type == ClimbType.BOULDER
    assert slab.board_angle is None
    assert slab.style == ClimbStyle.SIMPLE.value


def test_parse_climbs_skips_malformed():
    """Test that invalid climbs are counted and skipped, not raised."""
    climbs, skipped = parse_climbs([
        {"grade": "V3", "rpe": 5},
        {"grade": "V3", "rpe": 15},
        {"grade": "hard", "rpe": 5},
        "not a climb",
    ])

    assert len(climbs) == 1
    assert skipped == 3


def test_parse_sessions_counts_skipped(now):
    """Test that malformed sessions and climbs are both counted."""
    records = [
        {"start_time": now - MS_PER_DAY, "climbs": [{"grade": "V3", "rpe": 5}, {"grade": "V3"}]},
        {"start_time": now - MS_PER_DAY, "end_time": now - 2 * MS_PER_DAY, "climbs": []},
        {"climbs": [{"grade": "V3", "rpe": 5}]},
        None,
    ]
    sessions, skipped = parse_sessions(records)

    assert len(sessions) == 1
    assert sessions[0].climb_count == 1
    assert skipped == 4


def test_parse_climb_board_angle_variants():
    """Test numeric board angles, explicit climb types and unknown wall names."""
    climbs, skipped = parse_climbs([
        {"grade": "V4", "rpe": 6, "angle": 40},
        {"grade": "V4", "rpe": 6, "wall": "OVERHANG", "type": "board", "board_angle": "25"},
        {"grade": "V4", "rpe": 6, "angle": "ROOF"},
    ])

    assert skipped == 0
    numeric, explicit, unknown = climbs
    assert numeric.board_angle == "40°"
    assert numeric.climb_type == ClimbType.BOARD
    assert explicit.wall_angle == WallAngle.OVERHANG
    assert explicit.angle_label == "25°"
    assert unknown.wall_angle == WallAngle.VERTICAL
    assert unknown.board_angle is None
    assert unknown.climb_type == ClimbType.BOULDER
