"""
Contract thresholds for readiness and load metrics.

These values are shared with the presentation layer and other collaborators,
so zone boundaries and availability gates live here and nowhere else.
"""

from typing import Optional

from src.schemas import LoadZone, ReadinessZone


# ============================================================================
# Readiness zones (score is an integer 0-100)
# ============================================================================

READINESS_OPTIMAL_MIN = 77
READINESS_BALANCED_MIN = 45

SCORE_MIN = 0
SCORE_MAX = 100

# ============================================================================
# Load ratio zones
# ============================================================================

LOAD_LOW_MAX = 0.8  # exclusive: ratio < 0.8 is LOW
LOAD_OPTIMAL_MAX = 1.3  # inclusive
LOAD_ELEVATED_MAX = 1.5  # inclusive

LOAD_EPSILON = 1e-9

# ============================================================================
# Availability gates (valid lifetime sessions)
# ============================================================================

MIN_SESSIONS_READINESS = 3
MIN_SESSIONS_CALIBRATED = 5
MIN_SESSIONS_LOAD_RATIO = 5
MIN_SESSIONS_ACCURATE = 7
MIN_CLIMBS_GRADE_PROGRESSION = 30

# ============================================================================
# Windows
# ============================================================================

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR

RECENT_WINDOW_DAYS = 7
BASELINE_WINDOW_DAYS = 28
RECENT_DATA_DAYS = 14

# Shortest baseline a young history is normalised over
MIN_BASELINE_DAYS = 21

RECENT_WINDOW_MS = RECENT_WINDOW_DAYS * MS_PER_DAY
BASELINE_WINDOW_MS = BASELINE_WINDOW_DAYS * MS_PER_DAY


def readiness_zone(score: int) -> ReadinessZone:
    """Map a readiness score to its zone."""
    if score >= READINESS_OPTIMAL_MIN:
        return ReadinessZone.OPTIMAL
    if score >= READINESS_BALANCED_MIN:
        return ReadinessZone.BALANCED
    return ReadinessZone.LIMITED


def load_zone(ratio: Optional[float]) -> Optional[LoadZone]:
    """
    Map a load ratio to its zone.

    Returns None when the ratio is undefined (no baseline load).
    """
    if ratio is None:
        return None
    if ratio < LOAD_LOW_MAX:
        return LoadZone.LOW
    if ratio <= LOAD_OPTIMAL_MAX:
        return LoadZone.OPTIMAL
    if ratio <= LOAD_ELEVATED_MAX:
        return LoadZone.ELEVATED
    return LoadZone.HIGH
