"""
Per-session statistics.

Summarises one session's climbs for session cards and history views:
grade, style, angle and climb-type distributions, average RPE, median and
peak grade, flash rate, experience points and the dominant style.
"""

from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from src.readiness import round_half_up
from src.schemas import Climb, ClimbStyle, ClimbType, Session, WallAngle

BASE_XP = 10
FLASH_XP_BONUS = 1.2

_STYLE_LABELS = {
    ClimbStyle.POWERFUL.value: "Power",
    ClimbStyle.TECHNICAL.value: "Technical",
    ClimbStyle.SIMPLE.value: "Simple",
}


class DistributionEntry(BaseModel):
    """One bar of a distribution chart."""

    label: str
    count: int = Field(..., ge=0)
    percent: int = Field(..., ge=0, le=100, description="Share of climbs, rounded")


class SessionStats(BaseModel):
    """Summary statistics for one session."""

    climb_count: int = Field(..., ge=0)
    grades: List[DistributionEntry] = Field(default_factory=list)
    styles: List[DistributionEntry] = Field(default_factory=list)
    angles: List[DistributionEntry] = Field(default_factory=list)
    types: List[DistributionEntry] = Field(default_factory=list)
    average_rpe: float = Field(default=0.0, ge=0.0, le=10.0)
    median_grade: Optional[str] = None
    peak_grade: Optional[str] = None
    flash_rate: int = Field(default=0, ge=0, le=100, description="Percent of climbs flashed")
    total_xp: int = Field(default=0, ge=0)
    dominant_style: Optional[str] = None


def climb_xp(climb: Climb) -> float:
    """Experience points: 10 x (grade + 1), with a 20% flash bonus."""
    bonus = FLASH_XP_BONUS if climb.is_flash else 1.0
    return BASE_XP * (climb.difficulty + 1) * bonus


def _distribution(counts: Dict[str, int], total: int) -> List[DistributionEntry]:
    return [
        DistributionEntry(
            label=label,
            count=count,
            percent=round_half_up(count / total * 100) if total else 0,
        )
        for label, count in counts.items()
    ]


def style_label(style: str) -> str:
    return _STYLE_LABELS.get(style, style)


def calculate_session_stats(climbs: Iterable[Climb]) -> SessionStats:
    """
    Calculate statistics for a list of climbs.

    Style, wall angle and climb type distributions always list the standard
    categories, even at zero, so charts keep a stable shape. Board angles
    ("30°") get their own entries.

    Args:
        climbs: Climbs of one session

    Returns:
        SessionStats
    """
    climb_list = list(climbs)
    total = len(climb_list)

    style_counts: Dict[str, int] = {label: 0 for label in _STYLE_LABELS.values()}
    angle_counts: Dict[str, int] = {angle.value.title(): 0 for angle in WallAngle}
    type_counts: Dict[str, int] = {climb_type.value.title(): 0 for climb_type in ClimbType}
    grade_counts: Dict[str, int] = {}

    for climb in climb_list:
        grade_counts[climb.grade] = grade_counts.get(climb.grade, 0) + 1
        label = style_label(climb.style)
        style_counts[label] = style_counts.get(label, 0) + 1
        angle_counts[climb.angle_label] = angle_counts.get(climb.angle_label, 0) + 1
        type_counts[climb.climb_type.value.title()] += 1

    if total == 0:
        return SessionStats(
            climb_count=0,
            styles=_distribution(style_counts, 0),
            angles=_distribution(angle_counts, 0),
            types=_distribution(type_counts, 0),
        )

    grades = sorted(_distribution(grade_counts, total), key=lambda e: int(e.label[1:]))
    styles = sorted(_distribution(style_counts, total), key=lambda e: -e.count)
    angles = sorted(_distribution(angle_counts, total), key=lambda e: -e.count)
    types = sorted(_distribution(type_counts, total), key=lambda e: -e.count)

    difficulties = sorted(c.difficulty for c in climb_list)
    flashes = sum(1 for c in climb_list if c.is_flash)

    return SessionStats(
        climb_count=total,
        grades=grades,
        styles=styles,
        angles=angles,
        types=types,
        average_rpe=round(sum(c.rpe for c in climb_list) / total, 2),
        median_grade=f"V{difficulties[total // 2]}",
        peak_grade=f"V{difficulties[-1]}",
        flash_rate=round_half_up(flashes / total * 100),
        total_xp=round_half_up(sum(climb_xp(c) for c in climb_list)),
        dominant_style=styles[0].label,
    )


def calculate_stats_for_session(session: Session) -> SessionStats:
    return calculate_session_stats(session.climbs)
