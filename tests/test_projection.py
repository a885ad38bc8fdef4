"""
Tests for readiness projection and "what-if" scenarios.

Covers:
- Readiness over additional rest
- Time to reach a readiness zone
- Effect of a hypothetical extra session
- Immutability of the baseline snapshot
"""

import pytest

from src.projection import ReadinessProjector
from src.schemas import ReadinessStatus, ReadinessZone, SessionContext
from src.thresholds import MS_PER_HOUR


@pytest.fixture
def steady_context(steady_history, now):
    """Snapshot of six evenly spaced sessions."""
    return SessionContext(user_id="steady", sessions=tuple(steady_history), now=now)


def test_project_rest(steady_context):
    """Test that projected readiness rises with rest."""
    points = ReadinessProjector(steady_context).project_rest([0, 24, 48])

    assert [p.rest_hours for p in points] == [0, 24, 48]
    assert points[0].score == 63
    assert points[0].at == steady_context.now
    assert points[1].at == steady_context.now + 24 * MS_PER_HOUR
    assert points[0].score <= points[1].score <= points[2].score
    assert points[2].zone == ReadinessZone.OPTIMAL


def test_project_rest_rejects_negative(steady_context):
    """Test that negative rest is rejected."""
    with pytest.raises(ValueError, match="non-negative"):
        ReadinessProjector(steady_context).project_rest([12, -1])


def test_hours_until_optimal(steady_context):
    """Test the first 6-hour step that reaches the optimal zone."""
    projector = ReadinessProjector(steady_context)

    assert projector.hours_until_zone(ReadinessZone.OPTIMAL) == 18
    assert projector.hours_until_zone(ReadinessZone.BALANCED) == 0


def test_hours_until_zone_while_building(make_session, now):
    """Test that no zone is reached while readiness is still building."""
    context = SessionContext(sessions=(make_session(1),), now=now)
    projector = ReadinessProjector(context)

    assert projector.hours_until_zone(ReadinessZone.LIMITED) is None
    points = projector.project_rest([0])
    assert points[0].score is None
    assert points[0].status == ReadinessStatus.BUILDING


def test_with_session_increases_load(steady_context, make_session):
    """Test that an extra hard session raises the load ratio."""
    projector = ReadinessProjector(steady_context)
    hard = make_session(2 / 24, climbs=20, rpe=9.0, style="POWERFUL")

    result = projector.with_session(hard)

    assert result.original_load_ratio == pytest.approx(1.24)
    assert result.new_load_ratio > result.original_load_ratio
    assert result.original_score == 63
    assert result.score_delta == result.new_score - result.original_score
    # Baseline snapshot is untouched
    assert len(steady_context.sessions) == 6
    assert projector.baseline.load_ratio.ratio == pytest.approx(1.24)


def test_with_session_must_be_in_the_past(steady_context, make_session):
    """Test that a session at or after the snapshot instant is rejected."""
    projector = ReadinessProjector(steady_context)
    with pytest.raises(ValueError, match="before the snapshot"):
        projector.with_session(make_session(0))


def test_project_rest_never_drops_after_mixed_week(make_session, now):
    """Test that projected readiness does not fall when an easy session leaves the week."""
    context = SessionContext(
        sessions=(
            make_session(6.95, climbs=30, rpe=1.0),
            make_session(4, rpe=9.0),
            make_session(1, rpe=9.0),
        ),
        now=now,
    )
    points = ReadinessProjector(context).project_rest([0, 3, 6, 12, 24])

    scores = [p.score for p in points]
    assert scores == sorted(scores)
