"""
Training recommendations.

Combines readiness, load ratio and recent sessions into a single directive.
Branches are evaluated in priority order and the first match wins:

0. No valid sessions          -> track more sessions, no numeric targets
1. BUILDING or LIMITED        -> recovery, RPE ceiling 5
2. ELEVATED or HIGH load      -> reduce volume, with warning
3. OPTIMAL readiness          -> projecting / high intensity
4. otherwise                  -> moderate volume, technical/endurance focus
"""

import re
from typing import Iterable, List, Optional

from src.readiness import round_half_up
from src.schemas import (
    ConfidenceLevel,
    LoadRatioResult,
    LoadZone,
    PersonalBaseline,
    ReadinessResult,
    ReadinessStatus,
    ReadinessZone,
    RecommendationResult,
    Session,
)

ELEVATED_LOAD_ZONES = (LoadZone.ELEVATED, LoadZone.HIGH)

# Share of volume kept when load is elevated or high
VOLUME_REDUCTION = {
    LoadZone.ELEVATED: 0.8,
    LoadZone.HIGH: 0.6,
}

BASELINE_SESSION_LIMIT = 10

TRACK_CLIMBS = RecommendationResult(
    type="Track Climbs",
    target_volume=None,
    target_rpe=None,
    focus="Track more sessions to build your climbing profile",
    style="mixed",
)

RECOVERY = RecommendationResult(
    type="Recovery",
    target_volume="8-12",
    target_rpe="≤5",
    focus="Technique and movement quality",
    style="technical",
)

POWER = RecommendationResult(
    type="Power",
    target_volume="15-20",
    target_rpe="7-9",
    focus="Projects and limit boulders",
    style="power",
)

CAPACITY = RecommendationResult(
    type="Capacity",
    target_volume="12-18",
    target_rpe="5-7",
    focus="Volume at moderate intensity, technique and endurance",
    style="endurance",
)


def reduce_volume(volume: str, keep: float) -> str:
    """
    Scale a "low-high" climb range down.

    Args:
        volume: Range string such as "15-20"
        keep: Fraction of the volume to keep

    Returns:
        Reduced range; the input unchanged if it is not a range
    """
    match = re.match(r"^(\d+)-(\d+)$", volume)
    if not match:
        return volume
    lower = max(1, round_half_up(int(match.group(1)) * keep))
    upper = max(lower + 1, round_half_up(int(match.group(2)) * keep))
    return f"{lower}-{upper}"


def load_warning(load_ratio: LoadRatioResult) -> str:
    return (
        f"Training load is {load_ratio.zone.value} (ratio {load_ratio.ratio:.2f}). "
        "Reduce volume to manage injury risk."
    )


class RecommendationEngine:
    """Turns readiness and load ratio into one human-actionable directive."""

    def recommend(
        self,
        readiness: ReadinessResult,
        load_ratio: LoadRatioResult,
        recent_sessions: Optional[Iterable[Session]] = None,
    ) -> RecommendationResult:
        """
        Build the training recommendation.

        Args:
            readiness: Readiness result for the snapshot
            load_ratio: Load ratio result for the snapshot
            recent_sessions: Valid sessions from the snapshot; used to detect
                a climber with no history at all when provided

        Returns:
            RecommendationResult
        """
        has_history = readiness.session_count > 0
        if recent_sessions is not None:
            has_history = has_history or any(not s.is_degenerate for s in recent_sessions)
        if readiness.status == ReadinessStatus.BUILDING and not has_history:
            return TRACK_CLIMBS

        load_is_elevated = (
            load_ratio.available
            and load_ratio.ratio is not None
            and load_ratio.zone in ELEVATED_LOAD_ZONES
        )

        if readiness.status == ReadinessStatus.BUILDING or readiness.zone == ReadinessZone.LIMITED:
            if load_is_elevated:
                return RECOVERY.model_copy(update={"warning": load_warning(load_ratio)})
            return RECOVERY

        if load_is_elevated:
            return self._reduced_volume(readiness, load_ratio)

        if readiness.zone == ReadinessZone.OPTIMAL:
            return POWER

        return CAPACITY

    def _reduced_volume(
        self, readiness: ReadinessResult, load_ratio: LoadRatioResult
    ) -> RecommendationResult:
        """Volume-reduction directive sized from the readiness-zone template."""
        template = POWER if readiness.zone == ReadinessZone.OPTIMAL else CAPACITY
        rpe_ceiling = "≤7" if readiness.zone == ReadinessZone.OPTIMAL else "≤6"
        return RecommendationResult(
            type="Reduce Volume",
            target_volume=reduce_volume(template.target_volume, VOLUME_REDUCTION[load_ratio.zone]),
            target_rpe=rpe_ceiling,
            focus="Fewer, quality climbs below your limit",
            style="technical",
            warning=load_warning(load_ratio),
        )


def calculate_personal_baseline(sessions: Iterable[Session]) -> PersonalBaseline:
    """
    Typical session shape from the latest valid sessions.

    Args:
        sessions: Session history in any order

    Returns:
        PersonalBaseline; conservative defaults when no valid session exists
    """
    valid: List[Session] = sorted(
        (s for s in sessions if not s.is_degenerate),
        key=lambda s: s.timestamp,
        reverse=True,
    )[:BASELINE_SESSION_LIMIT]

    if not valid:
        return PersonalBaseline(
            avg_session_load=120.0,
            avg_volume=12.0,
            avg_rpe=6.5,
            confidence=ConfidenceLevel.NONE,
        )

    avg_load = sum(s.load for s in valid) / len(valid)
    avg_volume = sum(s.climb_count for s in valid) / len(valid)
    avg_rpe = sum(s.average_rpe for s in valid) / len(valid)

    if len(valid) >= 5:
        confidence = ConfidenceLevel.HIGH
    elif len(valid) >= 3:
        confidence = ConfidenceLevel.MEDIUM
    else:
        confidence = ConfidenceLevel.LOW

    return PersonalBaseline(
        avg_session_load=round_half_up(avg_load),
        avg_volume=round_half_up(avg_volume),
        avg_rpe=round_half_up(avg_rpe * 2) / 2,
        confidence=confidence,
    )
