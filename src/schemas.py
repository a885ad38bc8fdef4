"""
Pydantic models for climbing readiness and load metrics.

This module defines the core data structures for:
- Climb and Session records: the raw training history
- User aggregate counts: lifetime totals maintained by the session store
- Metric results: readiness, load ratio and training recommendations
- Session context and metrics bundle: one consistent snapshot in, one result out

All models are immutable value objects.
"""

import math
import re
from enum import Enum
from statistics import mean
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.grades import normalize_grade, parse_grade


# ============================================================================
# Enumerations
# ============================================================================

class WallAngle(str, Enum):
    """Wall steepness of a boulder problem."""
    SLAB = "SLAB"
    VERTICAL = "VERTICAL"
    OVERHANG = "OVERHANG"


class ClimbType(str, Enum):
    """Where a climb was logged."""
    BOULDER = "BOULDER"
    BOARD = "BOARD"


class ClimbStyle(str, Enum):
    """Movement style logged for a climb."""
    SIMPLE = "SIMPLE"
    POWERFUL = "POWERFUL"
    TECHNICAL = "TECHNICAL"


class ReadinessZone(str, Enum):
    """Readiness tier derived from the score."""
    OPTIMAL = "optimal"
    BALANCED = "balanced"
    LIMITED = "limited"


class ReadinessStatus(str, Enum):
    """How much history backs the readiness score."""
    BUILDING = "building"  # no score exposed
    CALIBRATING = "calibrating"  # provisional score
    CALIBRATED = "calibrated"


class LoadZone(str, Enum):
    """Training load risk tier derived from the load ratio."""
    LOW = "low"
    OPTIMAL = "optimal"
    ELEVATED = "elevated"
    HIGH = "high"


class LoadMetric(str, Enum):
    """Scalar used as "load" by the load ratio calculator."""
    SESSION_LOAD = "session_load"
    RPE_VOLUME = "rpe_volume"
    CLIMB_COUNT = "climb_count"


class ConfidenceLevel(str, Enum):
    """Qualitative confidence attached to derived metrics."""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


_STYLE_ALIASES = {
    "power": ClimbStyle.POWERFUL.value,
    "powerful": ClimbStyle.POWERFUL.value,
    "technical": ClimbStyle.TECHNICAL.value,
    "simple": ClimbStyle.SIMPLE.value,
}

_BOARD_ANGLE = re.compile(r"^(\d{1,2}(?:\.\d+)?)\s*°?$")


def board_angle_label(value) -> Optional[str]:
    """Degree label for a board angle ("30", 30 or "30°" -> "30°"), else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = f"{value:g}"
    match = _BOARD_ANGLE.match(str(value).strip())
    return f"{match.group(1)}°" if match else None


# ============================================================================
# Training history
# ============================================================================


class Climb(BaseModel):
    """A single logged boulder problem."""

    model_config = ConfigDict(frozen=True)

    grade: str = Field(..., description="V-scale grade (V0-V17); Font grades are converted")
    wall_angle: WallAngle = Field(
        default=WallAngle.VERTICAL, description="Wall steepness"
    )
    climb_type: ClimbType = Field(default=ClimbType.BOULDER, description="Gym boulder or training board")
    board_angle: Optional[str] = Field(None, description="Board angle label such as 30°")
    style: str = Field(
        default=ClimbStyle.SIMPLE.value,
        description="SIMPLE, POWERFUL, TECHNICAL or a free-form label",
    )
    rpe: float = Field(..., ge=1.0, le=10.0, description="Rate of perceived exertion (1-10)")
    attempts: int = Field(default=1, ge=1, description="Attempts taken; 1 means flash")
    timestamp: Optional[int] = Field(
        None, ge=0, description="When the climb was logged (ms since epoch)"
    )

    @field_validator("grade", mode="before")
    @classmethod
    def validate_grade(cls, v) -> str:
        """Normalise any accepted grade to its V-scale label."""
        return normalize_grade(v)

    @field_validator("wall_angle", mode="before")
    @classmethod
    def validate_wall_angle(cls, v):
        """Accept case-insensitive wall names; missing angle means vertical."""
        if v is None or v == "":
            return WallAngle.VERTICAL
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("climb_type", mode="before")
    @classmethod
    def validate_climb_type(cls, v):
        if v is None or v == "":
            return ClimbType.BOULDER
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("board_angle", mode="before")
    @classmethod
    def validate_board_angle(cls, v) -> Optional[str]:
        """Normalise board angles to a degree label."""
        if v is None or v == "":
            return None
        label = board_angle_label(v)
        if label is None:
            raise ValueError(f"Unrecognised board angle: {v!r}")
        return label

    @field_validator("style", mode="before")
    @classmethod
    def validate_style(cls, v) -> str:
        """Map known style aliases onto ClimbStyle values, keep free-form labels."""
        if v is None:
            return ClimbStyle.SIMPLE.value
        if isinstance(v, ClimbStyle):
            return v.value
        label = str(v).strip()
        if not label:
            return ClimbStyle.SIMPLE.value
        return _STYLE_ALIASES.get(label.lower(), label)

    @property
    def difficulty(self) -> int:
        """Integer difficulty (V0 = 0)."""
        return parse_grade(self.grade)

    @property
    def angle_label(self) -> str:
        """Board angle for board climbs, otherwise the wall name ("Slab")."""
        return self.board_angle or self.wall_angle.value.title()

    @property
    def is_flash(self) -> bool:
        return self.attempts == 1

    @property
    def rounded_rpe(self) -> float:
        """RPE rounded to the nearest 0.5."""
        return math.floor(self.rpe * 2 + 0.5) / 2

    @property
    def style_multiplier(self) -> float:
        """Load multiplier for movement style."""
        label = self.style.lower()
        if "power" in label:
            return 1.2
        if "technical" in label:
            return 1.0
        return 0.8

    @property
    def load(self) -> float:
        """
        Training load of this climb.

        load = grade points (V0 = 1) x RPE x style multiplier x attempt factor,
        where each extra attempt adds 10%.
        """
        grade_points = self.difficulty + 1
        attempt_factor = 1 + (self.attempts - 1) * 0.1
        return grade_points * self.rpe * self.style_multiplier * attempt_factor


class Session(BaseModel):
    """One climbing outing: an ordered set of climbs."""

    model_config = ConfigDict(frozen=True)

    start_time: int = Field(..., gt=0, description="Session start (ms since epoch)")
    end_time: int = Field(..., gt=0, description="Session end (ms since epoch)")
    climbs: Tuple[Climb, ...] = Field(
        default_factory=tuple, description="Climbs in logged order"
    )

    @model_validator(mode="before")
    @classmethod
    def default_end_time(cls, data):
        """A session without an end time ends when it starts."""
        if isinstance(data, dict) and data.get("end_time") is None and "start_time" in data:
            data = dict(data)
            data["end_time"] = data["start_time"]
        return data

    @model_validator(mode="after")
    def validate_time_order(self):
        """Ensure the session does not end before it starts."""
        if self.end_time < self.start_time:
            raise ValueError(
                f"Session end_time ({self.end_time}) is before start_time ({self.start_time})"
            )
        return self

    @property
    def timestamp(self) -> int:
        """Instant used to place the session in time windows."""
        return self.start_time

    @property
    def duration_ms(self) -> int:
        return self.end_time - self.start_time

    @property
    def climb_count(self) -> int:
        return len(self.climbs)

    @property
    def is_degenerate(self) -> bool:
        """Sessions without climbs carry no training signal."""
        return not self.climbs

    @property
    def average_rpe(self) -> Optional[float]:
        if not self.climbs:
            return None
        return mean(c.rpe for c in self.climbs)

    @property
    def median_grade(self) -> Optional[str]:
        """Middle grade of the session (upper middle for even counts)."""
        if not self.climbs:
            return None
        difficulties = sorted(c.difficulty for c in self.climbs)
        return f"V{difficulties[len(difficulties) // 2]}"

    @property
    def peak_grade(self) -> Optional[str]:
        if not self.climbs:
            return None
        return f"V{max(c.difficulty for c in self.climbs)}"

    @property
    def flash_count(self) -> int:
        return sum(1 for c in self.climbs if c.is_flash)

    @property
    def rpe_volume(self) -> float:
        """Sum of RPE across climbs."""
        return sum(c.rpe for c in self.climbs)

    @property
    def load(self) -> float:
        """Sum of per-climb training load."""
        return sum(c.load for c in self.climbs)


class UserAggregateCounts(BaseModel):
    """Lifetime totals maintained by the session store."""

    model_config = ConfigDict(frozen=True)

    total_sessions: int = Field(default=0, ge=0, description="Lifetime sessions logged")
    total_climbs: int = Field(default=0, ge=0, description="Lifetime climbs logged")


# ============================================================================
# Metric results
# ============================================================================


class ReadinessResult(BaseModel):
    """
    Readiness score with zone and calibration status.

    With BUILDING status the score and zone are withheld and callers must show
    a placeholder.
    """

    model_config = ConfigDict(frozen=True)

    score: Optional[int] = Field(None, ge=0, le=100, description="Readiness score (0-100)")
    zone: Optional[ReadinessZone] = Field(None, description="Readiness zone")
    status: ReadinessStatus = Field(..., description="Calibration status")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence in the score")
    message: Optional[str] = Field(None, description="Advice for the presentation layer")
    session_count: int = Field(default=0, ge=0, description="Valid sessions behind the score")
    breakdown: Dict[str, float] = Field(
        default_factory=dict, description="Factor scores (0-100) that fed the score"
    )

    @property
    def is_available(self) -> bool:
        return self.score is not None


class LoadRatioResult(BaseModel):
    """Recent (7-day) load relative to the normalised baseline (28-day) rate."""

    model_config = ConfigDict(frozen=True)

    ratio: Optional[float] = Field(None, ge=0.0, description="Load ratio; None without baseline")
    zone: Optional[LoadZone] = Field(None, description="Load risk zone")
    available: bool = Field(
        default=False, description="Whether enough history exists to display the ratio"
    )
    acute_load: float = Field(default=0.0, ge=0.0, description="Load in the recent window")
    chronic_load: float = Field(default=0.0, ge=0.0, description="Load in the baseline window")
    baseline_days: float = Field(default=0.0, ge=0.0, description="Baseline length used (days)")
    message: Optional[str] = Field(None, description="Advice for the presentation layer")


class RecommendationResult(BaseModel):
    """One actionable training directive."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Directive label (e.g. 'Power', 'Recovery')")
    target_volume: Optional[str] = Field(None, description="Climb count range, e.g. '12-18'")
    target_rpe: Optional[str] = Field(None, description="RPE range or ceiling, e.g. '≤5'")
    focus: str = Field(..., description="What the session should concentrate on")
    style: str = Field(default="mixed", description="power, endurance, technical or mixed")
    warning: Optional[str] = Field(None, description="Load warning, if any")


class PersonalBaseline(BaseModel):
    """Typical session shape derived from the latest sessions."""

    model_config = ConfigDict(frozen=True)

    avg_session_load: float = Field(..., ge=0.0)
    avg_volume: float = Field(..., ge=0.0, description="Average climbs per session")
    avg_rpe: float = Field(..., ge=0.0, le=10.0, description="Average RPE, rounded to 0.5")
    confidence: ConfidenceLevel = Field(...)


class MetricAvailability(BaseModel):
    """Progressive disclosure flags for dashboard metrics."""

    model_config = ConfigDict(frozen=True)

    readiness: bool
    readiness_accurate: bool
    load_ratio: bool
    load_ratio_accurate: bool
    weekly_trends: bool
    grade_progression: bool
    all_metrics: bool
    recommendations: bool
    personalized_recommendations: bool
    overall_confidence: ConfidenceLevel


# ============================================================================
# Engine input / output
# ============================================================================


class SessionContext(BaseModel):
    """
    Everything the engine needs for one computation.

    Passed explicitly at call time; the engine keeps no user state between
    calls and never reads the wall clock.
    """

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = Field(None, description="Identifier of the climber")
    sessions: Tuple[Session, ...] = Field(default_factory=tuple, description="Session history")
    counts: Optional[UserAggregateCounts] = Field(
        None, description="Lifetime counts from the session store"
    )
    now: int = Field(..., gt=0, description="Reference instant (ms since epoch)")


class MetricsBundle(BaseModel):
    """Readiness, load ratio and recommendation computed from one snapshot."""

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    computed_at: int = Field(..., description="The snapshot's reference instant (ms)")
    readiness: ReadinessResult
    load_ratio: LoadRatioResult
    recommendation: RecommendationResult
    availability: MetricAvailability
    baseline: PersonalBaseline
    skipped_records: int = Field(default=0, ge=0, description="Malformed records ignored")

    def summary_lines(self) -> List[str]:
        """Short human-readable summary, one metric per line."""
        lines = []
        if self.readiness.score is None:
            lines.append(f"Readiness: -- ({self.readiness.status.value})")
        else:
            lines.append(
                f"Readiness: {self.readiness.score} ({self.readiness.zone.value}, "
                f"{self.readiness.status.value})"
            )
        if self.load_ratio.available and self.load_ratio.ratio is not None:
            lines.append(f"Load ratio: {self.load_ratio.ratio:.2f} ({self.load_ratio.zone.value})")
        else:
            lines.append("Load ratio: --")
        lines.append(f"Recommendation: {self.recommendation.type} - {self.recommendation.focus}")
        return lines
