"""
Training load ratio calculation.

Expresses recent (7-day) training load relative to the climber's baseline
(28-day) load normalised to a 7-day rate:

    ratio = recent_load / max(baseline_load / (baseline_days / recent_days), epsilon)
"""

import logging
from typing import Optional

from src.aggregator import SessionAggregator
from src.schemas import LoadMetric, LoadRatioResult, LoadZone
from src.thresholds import (
    BASELINE_WINDOW_DAYS,
    LOAD_EPSILON,
    MIN_BASELINE_DAYS,
    MIN_SESSIONS_LOAD_RATIO,
    RECENT_WINDOW_DAYS,
    load_zone,
)

logger = logging.getLogger(__name__)

RATIO_DECIMALS = 2

INSUFFICIENT_HISTORY_MESSAGE = "Need more training history for accurate load tracking."


class LoadRatioCalculator:
    """
    Computes the 7-day vs 28-day load ratio and its risk zone.

    The ratio is always computed when a baseline exists, but it is only
    marked available once the climber has logged enough sessions for it to
    be shown as ground truth.
    """

    def __init__(self, metric: LoadMetric = LoadMetric.SESSION_LOAD):
        """
        Initialize calculator.

        Args:
            metric: Load scalar used for both the recent and baseline windows
        """
        self.metric = metric

    def calculate(self, aggregator: SessionAggregator, now: int) -> LoadRatioResult:
        """
        Calculate the load ratio at a reference instant.

        Args:
            aggregator: Aggregated session history
            now: Reference instant (ms since epoch)

        Returns:
            LoadRatioResult; ratio and zone are None when the baseline is empty
        """
        available = aggregator.count_before(now) >= MIN_SESSIONS_LOAD_RATIO

        recent = aggregator.recent(now)
        baseline = aggregator.baseline(now)
        acute_load = recent.load(self.metric)
        chronic_load = baseline.load(self.metric)
        baseline_days = self._baseline_days(aggregator, now)

        if chronic_load <= 0:
            return LoadRatioResult(
                ratio=None,
                zone=None,
                available=available,
                acute_load=acute_load,
                chronic_load=0.0,
                baseline_days=baseline_days,
                message=INSUFFICIENT_HISTORY_MESSAGE,
            )

        weekly_rate = chronic_load / (baseline_days / RECENT_WINDOW_DAYS)
        ratio = round(acute_load / max(weekly_rate, LOAD_EPSILON), RATIO_DECIMALS)
        zone = load_zone(ratio)

        logger.debug(
            "Load ratio %.2f (%s): acute=%.1f chronic=%.1f over %.1f days",
            ratio, zone.value, acute_load, chronic_load, baseline_days,
        )

        return LoadRatioResult(
            ratio=ratio,
            zone=zone,
            available=available,
            acute_load=acute_load,
            chronic_load=chronic_load,
            baseline_days=baseline_days,
            message=self._interpret_zone(zone),
        )

    def _baseline_days(self, aggregator: SessionAggregator, now: int) -> float:
        """
        Length of the baseline used for normalisation.

        A climber whose history is younger than the baseline window is
        normalised over the history they actually have, but never over less
        than three weeks.
        """
        span = aggregator.history_span_days(now)
        if span is None:
            return float(BASELINE_WINDOW_DAYS)
        return max(float(MIN_BASELINE_DAYS), min(float(BASELINE_WINDOW_DAYS), span))

    def _interpret_zone(self, zone: Optional[LoadZone]) -> str:
        """Advice text for a load zone."""
        messages = {
            LoadZone.LOW: "Training load is low. Consider increasing volume.",
            LoadZone.OPTIMAL: "Training load is optimal. Maintain current pattern.",
            LoadZone.ELEVATED: "Training load is elevated. Monitor recovery closely.",
            LoadZone.HIGH: "Training load is high. Consider reducing volume or intensity.",
        }
        return messages.get(zone, INSUFFICIENT_HISTORY_MESSAGE)
