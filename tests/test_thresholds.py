"""
Tests for zone boundaries and window constants.
"""

import pytest

from src.schemas import LoadZone, ReadinessZone
from src.thresholds import (
    BASELINE_WINDOW_MS,
    MS_PER_DAY,
    RECENT_WINDOW_MS,
    load_zone,
    readiness_zone,
)


@pytest.mark.parametrize(
    "score,expected",
    [
        (100, ReadinessZone.OPTIMAL),
        (77, ReadinessZone.OPTIMAL),
        (76, ReadinessZone.BALANCED),
        (45, ReadinessZone.BALANCED),
        (44, ReadinessZone.LIMITED),
        (0, ReadinessZone.LIMITED),
    ],
)
def test_readiness_zone_boundaries(score, expected):
    """Test that 77 and 45 are the inclusive lower bounds of the upper zones."""
    assert readiness_zone(score) == expected


@pytest.mark.parametrize(
    "ratio,expected",
    [
        (0.0, LoadZone.LOW),
        (0.79, LoadZone.LOW),
        (0.8, LoadZone.OPTIMAL),
        (1.3, LoadZone.OPTIMAL),
        (1.31, LoadZone.ELEVATED),
        (1.5, LoadZone.ELEVATED),
        (1.51, LoadZone.HIGH),
        (3.0, LoadZone.HIGH),
    ],
)
def test_load_zone_boundaries(ratio, expected):
    """Test load zone cut-offs: LOW is exclusive at 0.8, the others inclusive."""
    assert load_zone(ratio) == expected


def test_load_zone_undefined_ratio():
    """Test that an undefined ratio has no zone."""
    assert load_zone(None) is None


def test_window_lengths():
    """Test that the recent and baseline windows span 7 and 28 days."""
    assert RECENT_WINDOW_MS == 7 * MS_PER_DAY
    assert BASELINE_WINDOW_MS == 28 * MS_PER_DAY
