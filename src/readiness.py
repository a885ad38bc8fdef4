"""
Readiness score calculation.

Computes a 0-100 readiness score from recent training recency, intensity and
consistency, gated by how much history the climber has logged.

Score = recovery x 0.45 + intensity x 0.30 + consistency x 0.25
"""

import logging
import math
from statistics import mean, pstdev
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from src.aggregator import SessionAggregator
from src.schemas import ReadinessResult, ReadinessStatus
from src.thresholds import (
    BASELINE_WINDOW_MS,
    MIN_SESSIONS_CALIBRATED,
    MIN_SESSIONS_READINESS,
    READINESS_OPTIMAL_MIN,
    RECENT_WINDOW_MS,
    SCORE_MAX,
    SCORE_MIN,
    readiness_zone,
)

logger = logging.getLogger(__name__)

NEUTRAL_FACTOR = 50.0

# Reference rest is the climber's typical gap, kept within 1-3 days
MIN_REFERENCE_REST_HOURS = 24.0
MAX_REFERENCE_REST_HOURS = 72.0
DEFAULT_REFERENCE_REST_HOURS = 48.0

# Full rest halves the fatigue attributed to recent intensity
MAX_REST_RELIEF = 0.5

MIN_SESSIONS_FOR_CONSISTENCY = 3


class ReadinessWeights(BaseModel):
    """Relative weight of each readiness factor."""

    recovery: float = Field(default=0.45, ge=0.0, le=1.0)
    intensity: float = Field(default=0.30, ge=0.0, le=1.0)
    consistency: float = Field(default=0.25, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_weights_sum(self):
        """Ensure weights sum to 1.0."""
        total = self.recovery + self.intensity + self.consistency
        if not (0.99 <= total <= 1.01):
            raise ValueError(f"Readiness weights must sum to 1.0, got {total:.3f}")
        return self


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rpe_fatigue(rpe: float) -> float:
    """Fatigue share of an RPE: 1 maps to none, 10 to full."""
    return max(0.0, min(1.0, (rpe - 1.0) / 9.0))


class ReadinessCalculator:
    """
    Derives a readiness score and zone from session history.

    Availability:
    - fewer than 3 valid sessions: BUILDING, no score exposed
    - 3-4 sessions: CALIBRATING, provisional score with reduced confidence
    - 5 or more: CALIBRATED, full confidence

    The calculator never raises; unreliable states are reported through the
    status field.
    """

    def __init__(self, weights: Optional[ReadinessWeights] = None):
        self.weights = weights or ReadinessWeights()

    def calculate(self, aggregator: SessionAggregator, now: int) -> ReadinessResult:
        """
        Calculate readiness at a reference instant.

        Args:
            aggregator: Aggregated session history
            now: Reference instant (ms since epoch)

        Returns:
            ReadinessResult with score, zone, status and factor breakdown
        """
        session_count = aggregator.count_before(now)
        confidence = min(1.0, session_count / MIN_SESSIONS_CALIBRATED)

        if session_count < MIN_SESSIONS_READINESS:
            remaining = MIN_SESSIONS_READINESS - session_count
            return ReadinessResult(
                score=None,
                zone=None,
                status=ReadinessStatus.BUILDING,
                confidence=confidence,
                message=(
                    f"Building baseline. Log {remaining} more "
                    f"session{'s' if remaining != 1 else ''} to unlock readiness."
                ),
                session_count=session_count,
            )

        factors = {
            "recovery": self._recovery_factor(aggregator, now),
            "consistency": self._consistency_factor(aggregator, now),
        }
        factors["intensity"] = self._intensity_factor(aggregator, now, factors["recovery"])

        weighted = (
            factors["recovery"] * self.weights.recovery
            + factors["intensity"] * self.weights.intensity
            + factors["consistency"] * self.weights.consistency
        )
        score = round_half_up(max(SCORE_MIN, min(SCORE_MAX, weighted)))

        if session_count < MIN_SESSIONS_CALIBRATED:
            status = ReadinessStatus.CALIBRATING
        else:
            status = ReadinessStatus.CALIBRATED

        logger.debug(
            "Readiness %d (%s) from %d sessions: %s", score, status.value, session_count, factors
        )

        return ReadinessResult(
            score=score,
            zone=readiness_zone(score),
            status=status,
            confidence=confidence,
            message=self._interpret_score(score),
            session_count=session_count,
            breakdown={name: round(value, 2) for name, value in factors.items()},
        )

    def _recovery_factor(self, aggregator: SessionAggregator, now: int) -> float:
        """
        Rest since the last session relative to the climber's usual rest.

        Rises linearly with rest and saturates at 100 once the reference gap
        has elapsed. Without a prior session the factor is neutral.
        """
        hours_since = aggregator.hours_since_last_session(now)
        if hours_since is None:
            return NEUTRAL_FACTOR

        reference = self._reference_rest_hours(aggregator, now)
        return min(100.0, (hours_since / reference) * 100.0)

    def _reference_rest_hours(self, aggregator: SessionAggregator, now: int) -> float:
        typical_gap = aggregator.typical_gap_hours(now)
        if typical_gap is None:
            return DEFAULT_REFERENCE_REST_HOURS
        return max(MIN_REFERENCE_REST_HOURS, min(MAX_REFERENCE_REST_HOURS, typical_gap))

    def _intensity_factor(
        self, aggregator: SessionAggregator, now: int, recovery: float
    ) -> float:
        """
        Recency-weighted RPE of the last training week, discounted by rest.

        The week is the recent window ending at the most recent session. Each
        climb's fatigue fades linearly to zero as its session ages out of the
        recent window, and rest relieves up to half of what remains. With no
        new sessions the factor can only rise as time passes.
        """
        last = aggregator.most_recent_before(now)
        if last is None:
            return NEUTRAL_FACTOR

        week = aggregator.window(last.timestamp + 1, RECENT_WINDOW_MS)
        faded = 0.0
        for session in week.sessions:
            fade = max(0.0, 1.0 - (now - session.timestamp) / RECENT_WINDOW_MS)
            faded += fade * sum(rpe_fatigue(climb.rpe) for climb in session.climbs)

        fatigue = faded / week.climb_count
        relief = MAX_REST_RELIEF * (recovery / 100.0)
        return 100.0 * (1.0 - fatigue * (1.0 - relief))

    def _consistency_factor(self, aggregator: SessionAggregator, now: int) -> float:
        """
        Regularity of session spacing over the baseline window.

        Uses 1 - coefficient of variation of the gaps, so steady cadence scores
        high while long breaks and bursts pull the factor down. The window ends
        at the most recent session, leaving rest since then to the recovery
        factor.
        """
        last = aggregator.most_recent_before(now)
        if last is None:
            return NEUTRAL_FACTOR

        baseline = aggregator.window(last.timestamp + 1, BASELINE_WINDOW_MS)
        if baseline.session_count < MIN_SESSIONS_FOR_CONSISTENCY:
            return NEUTRAL_FACTOR

        gaps = aggregator.gaps_hours(baseline.sessions)
        average_gap = mean(gaps)
        if average_gap <= 0:
            # Every session logged at the same instant
            return 0.0
        variation = pstdev(gaps) / average_gap
        return 100.0 * max(0.0, 1.0 - variation)

    def _interpret_score(self, score: int) -> str:
        """
        Interpret a readiness score into advice text.

        Args:
            score: Readiness score (0-100)

        Returns:
            Advice message
        """
        if score >= 88:
            return "Optimal. Maximum capacity available."
        elif score >= READINESS_OPTIMAL_MIN:
            return "Good. High capacity ready."
        elif score >= 60:
            return "Moderate. Balanced training recommended."
        elif score >= 45:
            return "Caution. Reduced capacity today."
        elif score >= 30:
            return "Limited. Focus on recovery and technique."
        else:
            return "Poor. Prioritize rest and light movement."
