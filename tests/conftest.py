"""
Shared fixtures for building session histories.

All histories are placed relative to a fixed reference instant so results
are reproducible.
"""

from pathlib import Path

import pytest

from src.schemas import Climb, Session
from src.thresholds import MS_PER_DAY, MS_PER_HOUR

# 2023-11-14 22:13:20 UTC
NOW = 1_700_000_000_000

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def now():
    """Reference instant for every computed metric."""
    return NOW


@pytest.fixture
def sample_history_path():
    """Path to the sample session history export."""
    return FIXTURES_DIR / "sample_history.json"


@pytest.fixture
def make_session():
    """Factory for uniform sessions placed `days_ago` before NOW."""

    def _make(
        days_ago: float,
        climbs: int = 10,
        rpe: float = 6.0,
        grade: str = "V4",
        style: str = "SIMPLE",
        attempts: int = 1,
        now: int = NOW,
    ) -> Session:
        start = now - int(days_ago * MS_PER_DAY)
        return Session(
            start_time=start,
            end_time=start + 2 * MS_PER_HOUR,
            climbs=tuple(
                Climb(grade=grade, style=style, rpe=rpe, attempts=attempts)
                for _ in range(climbs)
            ),
        )

    return _make


@pytest.fixture
def steady_history(make_session):
    """Six sessions five days apart, most recent one day ago, 15 climbs at RPE 6."""
    return [make_session(days_ago, climbs=15, rpe=6.0) for days_ago in (1, 6, 11, 16, 21, 26)]


@pytest.fixture
def overloaded_history(make_session):
    """Five hard sessions in the last week on top of two easier older sessions."""
    recent = [make_session(days_ago, rpe=9.0) for days_ago in (2, 3, 4, 5, 6)]
    older = [make_session(days_ago, rpe=6.0) for days_ago in (14, 21)]
    return older + recent
