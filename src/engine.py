"""
Metrics engine facade.

Runs the full pipeline on one consistent snapshot:

    session history -> aggregator -> {readiness, load ratio} -> recommendation

The engine is stateless and reads no clock; the caller supplies `now` in the
SessionContext and persists the resulting bundle if it wants to.
"""

import logging
from typing import Any, Iterable, Optional, Tuple

from src.aggregator import SessionAggregator, parse_sessions
from src.load_ratio import LoadRatioCalculator
from src.readiness import ReadinessCalculator, ReadinessWeights
from src.recommendations import RecommendationEngine, calculate_personal_baseline
from src.schemas import (
    ConfidenceLevel,
    LoadMetric,
    MetricAvailability,
    MetricsBundle,
    SessionContext,
    UserAggregateCounts,
)
from src.thresholds import (
    MIN_CLIMBS_GRADE_PROGRESSION,
    MIN_SESSIONS_ACCURATE,
    MIN_SESSIONS_CALIBRATED,
    MIN_SESSIONS_LOAD_RATIO,
    MIN_SESSIONS_READINESS,
    MS_PER_DAY,
    RECENT_DATA_DAYS,
)

logger = logging.getLogger(__name__)


def build_context(
    records: Iterable[Any],
    now: int,
    user_id: Optional[str] = None,
    counts: Optional[UserAggregateCounts] = None,
) -> Tuple[SessionContext, int]:
    """
    Validate raw session records into a SessionContext.

    Args:
        records: Raw session dicts (or Session objects)
        now: Reference instant (ms since epoch)
        user_id: Optional climber identifier
        counts: Optional lifetime counts from the session store

    Returns:
        Tuple of (context, number of skipped records)
    """
    sessions, skipped = parse_sessions(records)
    if skipped:
        logger.warning("Skipped %d malformed records for user %s", skipped, user_id)
    context = SessionContext(user_id=user_id, sessions=tuple(sessions), counts=counts, now=now)
    return context, skipped


def get_metric_availability(
    aggregator: SessionAggregator,
    now: int,
    counts: Optional[UserAggregateCounts] = None,
) -> MetricAvailability:
    """
    Progressive disclosure flags for dashboard metrics.

    Gates are evaluated on valid sessions in the snapshot; the climb-count
    gate uses lifetime totals when the session store supplies them.
    """
    history = aggregator.history_before(now)
    sessions = len(history)
    climbs = sum(s.climb_count for s in history)
    if counts is not None:
        climbs = max(climbs, counts.total_climbs)

    recent_cutoff = now - RECENT_DATA_DAYS * MS_PER_DAY
    has_recent_data = any(s.timestamp > recent_cutoff for s in history)
    accurate = sessions >= MIN_SESSIONS_ACCURATE and has_recent_data

    if accurate:
        overall = ConfidenceLevel.HIGH
    elif sessions >= MIN_SESSIONS_CALIBRATED:
        overall = ConfidenceLevel.MEDIUM
    else:
        overall = ConfidenceLevel.LOW

    return MetricAvailability(
        readiness=sessions >= MIN_SESSIONS_READINESS,
        readiness_accurate=accurate,
        load_ratio=sessions >= MIN_SESSIONS_LOAD_RATIO,
        load_ratio_accurate=accurate,
        weekly_trends=sessions >= MIN_SESSIONS_READINESS,
        grade_progression=climbs >= MIN_CLIMBS_GRADE_PROGRESSION,
        all_metrics=(
            sessions >= MIN_SESSIONS_READINESS and climbs >= MIN_CLIMBS_GRADE_PROGRESSION
        ),
        recommendations=sessions >= 1,
        personalized_recommendations=sessions >= MIN_SESSIONS_CALIBRATED,
        overall_confidence=overall,
    )


class MetricsEngine:
    """
    Computes the readiness, load ratio and recommendation bundle.

    Holds only configuration, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        load_metric: LoadMetric = LoadMetric.SESSION_LOAD,
        weights: Optional[ReadinessWeights] = None,
    ):
        self.readiness_calculator = ReadinessCalculator(weights)
        self.load_ratio_calculator = LoadRatioCalculator(load_metric)
        self.recommendation_engine = RecommendationEngine()

    def compute(self, context: SessionContext, skipped_records: int = 0) -> MetricsBundle:
        """
        Compute all metrics for a snapshot.

        Args:
            context: Session history, counts and reference instant
            skipped_records: Malformed records dropped while building the
                context, reported back in the bundle

        Returns:
            MetricsBundle
        """
        aggregator = SessionAggregator(context.sessions)
        now = context.now

        readiness = self.readiness_calculator.calculate(aggregator, now)
        load_ratio = self.load_ratio_calculator.calculate(aggregator, now)
        recommendation = self.recommendation_engine.recommend(
            readiness, load_ratio, aggregator.recent(now).sessions
        )

        bundle = MetricsBundle(
            user_id=context.user_id,
            computed_at=now,
            readiness=readiness,
            load_ratio=load_ratio,
            recommendation=recommendation,
            availability=get_metric_availability(aggregator, now, context.counts),
            baseline=calculate_personal_baseline(aggregator.history_before(now)),
            skipped_records=skipped_records + aggregator.excluded_count,
        )
        logger.debug(
            "Computed metrics for %s: %s", context.user_id or "anonymous", "; ".join(bundle.summary_lines())
        )
        return bundle

    def compute_from_records(
        self,
        records: Iterable[Any],
        now: int,
        user_id: Optional[str] = None,
        counts: Optional[UserAggregateCounts] = None,
    ) -> MetricsBundle:
        """Validate raw records and compute metrics in one call."""
        context, skipped = build_context(records, now, user_id=user_id, counts=counts)
        return self.compute(context, skipped_records=skipped)
