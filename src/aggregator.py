"""
Session aggregation over time windows.

Normalises a session history into windowed aggregates (counts, intensity
sums, per-grade histograms) shared by the readiness and load calculators.
Raw records coming from long-lived local logs are validated here; malformed
climbs and sessions are skipped, never raised.
"""

import logging
from statistics import mean, median
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.schemas import Climb, ClimbType, LoadMetric, Session, WallAngle, board_angle_label
from src.thresholds import BASELINE_WINDOW_MS, MS_PER_DAY, MS_PER_HOUR, RECENT_WINDOW_MS

logger = logging.getLogger(__name__)

_WALL_ANGLES = {angle.value for angle in WallAngle}


class WindowAggregate(BaseModel):
    """Sessions selected by a half-open window [start, end) and their totals."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., description="Inclusive window start (ms)")
    end: int = Field(..., description="Exclusive window end (ms)")
    sessions: Tuple[Session, ...] = Field(default_factory=tuple)
    session_count: int = 0
    climb_count: int = 0
    rpe_volume: float = 0.0
    session_load: float = 0.0
    average_rpe: Optional[float] = None
    grade_histogram: Dict[str, int] = Field(default_factory=dict)

    @property
    def duration_days(self) -> float:
        return (self.end - self.start) / MS_PER_DAY

    @property
    def is_empty(self) -> bool:
        return self.session_count == 0

    def load(self, metric: LoadMetric) -> float:
        """Total load of the window measured with the given scalar."""
        if metric == LoadMetric.CLIMB_COUNT:
            return float(self.climb_count)
        if metric == LoadMetric.RPE_VOLUME:
            return self.rpe_volume
        return self.session_load


# ============================================================================
# Raw record validation
# ============================================================================


def _first_present(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


def parse_climb(record: Mapping[str, Any]) -> Climb:
    """
    Build a Climb from a raw record.

    Accepts the field names used by the app's local logs (`angle`, `wall`,
    `styles`) as well as the model's own names.

    Raises:
        ValidationError: If a required field is missing or out of range
    """
    wall = _first_present(record, "wall_angle", "wallAngle", "angle", "wall")
    board_angle = _first_present(record, "board_angle", "boardAngle")
    if (
        wall is not None
        and not isinstance(wall, WallAngle)
        and str(wall).strip().upper() not in _WALL_ANGLES
    ):
        # Board climbs log the board angle ("30°") in place of a wall
        board_angle = board_angle or board_angle_label(wall)
        if board_angle is None:
            logger.debug("Treating unrecognised wall angle %r as vertical", wall)
        wall = None

    climb_type = _first_present(record, "climb_type", "climbType", "type")
    if climb_type is None and board_angle is not None:
        climb_type = ClimbType.BOARD

    style = _first_present(record, "style", "styles")
    if isinstance(style, (list, tuple)):
        style = style[0] if style else None

    return Climb(
        grade=record.get("grade"),
        wall_angle=wall,
        climb_type=climb_type,
        board_angle=board_angle,
        style=style,
        rpe=record.get("rpe"),
        attempts=record.get("attempts", 1),
        timestamp=record.get("timestamp"),
    )


def parse_climbs(records: Iterable[Any]) -> Tuple[List[Climb], int]:
    """
    Validate a batch of raw climb records.

    Returns:
        Tuple of (parsed climbs in input order, number of climbs skipped)
    """
    climbs: List[Climb] = []
    skipped = 0
    for raw_climb in records:
        if isinstance(raw_climb, Climb):
            climbs.append(raw_climb)
            continue
        if not isinstance(raw_climb, Mapping):
            skipped += 1
            continue
        try:
            climbs.append(parse_climb(raw_climb))
        except (ValidationError, ValueError) as e:
            skipped += 1
            logger.warning("Skipping malformed climb: %s", _first_error(e))
    return climbs, skipped


def parse_session(record: Mapping[str, Any]) -> Tuple[Optional[Session], int]:
    """
    Build a Session from a raw record, dropping malformed climbs.

    Returns:
        Tuple of (session or None if the session itself is malformed,
        number of climbs skipped)
    """
    raw_climbs = _first_present(record, "climbs", "climbList", "climb_list")
    if not isinstance(raw_climbs, (list, tuple)):
        # Legacy records store the climb count under "climbs"
        raw_climbs = _first_present(record, "climbList", "climb_list") or []

    climbs, skipped = parse_climbs(raw_climbs)

    start = _first_present(record, "start_time", "startTime", "timestamp")
    end = _first_present(record, "end_time", "endTime")
    try:
        session = Session(start_time=start, end_time=end, climbs=tuple(climbs))
    except (ValidationError, ValueError) as e:
        logger.warning("Skipping malformed session: %s", _first_error(e))
        return None, skipped

    return session, skipped


def parse_sessions(records: Iterable[Any]) -> Tuple[List[Session], int]:
    """
    Validate a batch of raw session records.

    Returns:
        Tuple of (parsed sessions, number of skipped sessions and climbs)
    """
    sessions: List[Session] = []
    skipped = 0
    for record in records:
        if isinstance(record, Session):
            sessions.append(record)
            continue
        if not isinstance(record, Mapping):
            skipped += 1
            logger.warning("Skipping session record of type %s", type(record).__name__)
            continue
        session, skipped_climbs = parse_session(record)
        skipped += skipped_climbs
        if session is None:
            skipped += 1
        else:
            sessions.append(session)
    return sessions, skipped


def _first_error(error: Exception) -> str:
    if isinstance(error, ValidationError):
        details = error.errors()
        if details:
            location = ".".join(str(part) for part in details[0]["loc"])
            return f"{location}: {details[0]['msg']}"
    return str(error)


# ============================================================================
# Aggregation
# ============================================================================


class SessionAggregator:
    """
    Time-windowed aggregates over a session history.

    Degenerate sessions (no climbs) are excluded from every aggregate. Input
    sessions are never modified; the aggregator keeps its own sorted tuple.
    """

    def __init__(self, sessions: Iterable[Session]):
        """
        Initialize aggregator with a session history.

        Args:
            sessions: Sessions in any order
        """
        valid = []
        excluded = 0
        for session in sessions:
            if isinstance(session, Session) and not session.is_degenerate:
                valid.append(session)
            else:
                excluded += 1
        self.sessions: Tuple[Session, ...] = tuple(sorted(valid, key=lambda s: s.timestamp))
        self.excluded_count = excluded
        if excluded:
            logger.debug("Excluded %d empty or invalid sessions from aggregation", excluded)

    @property
    def valid_count(self) -> int:
        return len(self.sessions)

    def window(self, now: int, duration_ms: int) -> WindowAggregate:
        """
        Aggregate sessions with timestamp in [now - duration_ms, now).

        Args:
            now: Reference instant (ms)
            duration_ms: Window length (ms)

        Returns:
            WindowAggregate with all counts zero when no session falls inside
        """
        start = now - duration_ms
        selected = tuple(s for s in self.sessions if start <= s.timestamp < now)

        histogram: Dict[str, int] = {}
        rpes: List[float] = []
        for session in selected:
            for climb in session.climbs:
                histogram[climb.grade] = histogram.get(climb.grade, 0) + 1
                rpes.append(climb.rpe)

        ordered_histogram = dict(
            sorted(histogram.items(), key=lambda item: int(item[0][1:]))
        )

        return WindowAggregate(
            start=start,
            end=now,
            sessions=selected,
            session_count=len(selected),
            climb_count=len(rpes),
            rpe_volume=sum(rpes),
            session_load=sum(s.load for s in selected),
            average_rpe=mean(rpes) if rpes else None,
            grade_histogram=ordered_histogram,
        )

    def recent(self, now: int) -> WindowAggregate:
        """The 7-day window ending at now."""
        return self.window(now, RECENT_WINDOW_MS)

    def baseline(self, now: int) -> WindowAggregate:
        """The 28-day window ending at now."""
        return self.window(now, BASELINE_WINDOW_MS)

    def history_before(self, now: int) -> Tuple[Session, ...]:
        """All valid sessions that started before now."""
        return tuple(s for s in self.sessions if s.timestamp < now)

    def count_before(self, now: int) -> int:
        """Valid sessions available to a computation at now."""
        return len(self.history_before(now))

    def most_recent_before(self, now: int) -> Optional[Session]:
        history = self.history_before(now)
        return history[-1] if history else None

    def hours_since_last_session(self, now: int) -> Optional[float]:
        """Rest since the most recent session started, or None without history."""
        last = self.most_recent_before(now)
        if last is None:
            return None
        return (now - last.timestamp) / MS_PER_HOUR

    def typical_gap_hours(self, now: int) -> Optional[float]:
        """Median gap between consecutive sessions before now."""
        gaps = self.gaps_hours(self.history_before(now))
        if not gaps:
            return None
        return median(gaps)

    def history_span_days(self, now: int) -> Optional[float]:
        """Days between the first session and now."""
        history = self.history_before(now)
        if not history:
            return None
        return (now - history[0].timestamp) / MS_PER_DAY

    @staticmethod
    def gaps_hours(sessions: Iterable[Session]) -> List[float]:
        """Hours between consecutive sessions (input assumed time-ordered)."""
        ordered = list(sessions)
        return [
            (later.timestamp - earlier.timestamp) / MS_PER_HOUR
            for earlier, later in zip(ordered, ordered[1:])
        ]
