"""
What-if analysis for readiness and load.

Lets a climber explore scenarios against the same session history:
- "How ready will I be after another day of rest?"
- "How long until I'm back in the optimal zone?"
- "What would one more session have done to my load ratio?"
"""

from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from src.engine import MetricsEngine
from src.schemas import (
    LoadZone,
    MetricsBundle,
    ReadinessStatus,
    ReadinessZone,
    RecommendationResult,
    Session,
    SessionContext,
)
from src.thresholds import MS_PER_HOUR

DEFAULT_REST_HOURS = (0, 12, 24, 36, 48, 72)


class ProjectionPoint(BaseModel):
    """Readiness after a given amount of additional rest."""

    rest_hours: float = Field(..., ge=0.0, description="Additional rest beyond the snapshot")
    at: int = Field(..., description="Projected instant (ms since epoch)")
    score: Optional[int] = Field(None, ge=0, le=100)
    zone: Optional[ReadinessZone] = None
    status: ReadinessStatus


class SessionScenarioResult(BaseModel):
    """Baseline metrics compared with the metrics after a hypothetical session."""

    original_score: Optional[int] = None
    new_score: Optional[int] = None
    score_delta: Optional[int] = Field(None, description="new - original")
    original_load_ratio: Optional[float] = None
    new_load_ratio: Optional[float] = None
    original_load_zone: Optional[LoadZone] = None
    new_load_zone: Optional[LoadZone] = None
    recommendation_changed: bool = False
    new_recommendation: RecommendationResult


class ReadinessProjector:
    """Re-runs the metrics engine on variations of one snapshot."""

    def __init__(self, context: SessionContext, engine: Optional[MetricsEngine] = None):
        """
        Initialize projector.

        Args:
            context: Baseline snapshot
            engine: Engine to use; a default engine when omitted
        """
        self.context = context
        self.engine = engine or MetricsEngine()
        self.baseline = self.engine.compute(context)

    def project_rest(self, rest_hours: Sequence[float] = DEFAULT_REST_HOURS) -> List[ProjectionPoint]:
        """
        Project readiness over additional rest with no new sessions.

        Args:
            rest_hours: Hours of extra rest to evaluate

        Returns:
            One ProjectionPoint per requested rest duration

        Raises:
            ValueError: If a rest duration is negative
        """
        points = []
        for hours in rest_hours:
            if hours < 0:
                raise ValueError(f"Rest hours must be non-negative, got {hours}")
            bundle = self._at(self.context.now + int(hours * MS_PER_HOUR))
            points.append(
                ProjectionPoint(
                    rest_hours=hours,
                    at=bundle.computed_at,
                    score=bundle.readiness.score,
                    zone=bundle.readiness.zone,
                    status=bundle.readiness.status,
                )
            )
        return points

    def hours_until_zone(
        self,
        target: ReadinessZone = ReadinessZone.OPTIMAL,
        max_hours: int = 96,
        step_hours: int = 6,
    ) -> Optional[int]:
        """
        First projected rest duration that reaches the target zone or better.

        Returns:
            Hours of rest, 0 if already there, or None if not reached within
            max_hours (or no score is available)
        """
        order = [ReadinessZone.LIMITED, ReadinessZone.BALANCED, ReadinessZone.OPTIMAL]
        for hours in range(0, max_hours + 1, step_hours):
            readiness = self._at(self.context.now + hours * MS_PER_HOUR).readiness
            if readiness.zone is not None and order.index(readiness.zone) >= order.index(target):
                return hours
        return None

    def with_session(self, session: Session) -> SessionScenarioResult:
        """
        Compare the snapshot with one where an extra session was logged.

        Args:
            session: Hypothetical session, starting before the snapshot instant

        Raises:
            ValueError: If the session does not start before the snapshot instant
        """
        if session.timestamp >= self.context.now:
            raise ValueError("Hypothetical session must start before the snapshot instant")

        modified = self.context.model_copy(
            update={"sessions": self.context.sessions + (session,)}
        )
        bundle = self.engine.compute(modified)

        original = self.baseline.readiness.score
        new = bundle.readiness.score
        delta = new - original if original is not None and new is not None else None

        return SessionScenarioResult(
            original_score=original,
            new_score=new,
            score_delta=delta,
            original_load_ratio=self.baseline.load_ratio.ratio,
            new_load_ratio=bundle.load_ratio.ratio,
            original_load_zone=self.baseline.load_ratio.zone,
            new_load_zone=bundle.load_ratio.zone,
            recommendation_changed=bundle.recommendation != self.baseline.recommendation,
            new_recommendation=bundle.recommendation,
        )

    def _at(self, now: int) -> MetricsBundle:
        return self.engine.compute(self.context.model_copy(update={"now": now}))
